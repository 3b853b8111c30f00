"""Pin manager: ask the node to keep content out of garbage collection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from edufs.core.exceptions import NodeError, PinFailedError


if TYPE_CHECKING:
    from edufs.core.models import ContentID
    from edufs.core.ports import NodePort


logger = logging.getLogger(__name__)


class PinManager:
    """Pins identifiers on a node.

    Pinning is idempotent: a second pin of the same identifier succeeds.
    Failures are reported as PinFailedError, never as an upload failure,
    so callers can retry just this step.
    """

    def __init__(self, node: NodePort) -> None:
        self._node = node

    def pin(self, cid: ContentID, *, recursive: bool = True) -> None:
        """Pin cid on the node.

        Args:
            cid: Identifier to pin.
            recursive: Pin the whole DAG below cid, not only its root block.

        Raises:
            PinFailedError: If the node refuses or cannot be reached.
        """
        try:
            self._node.pin(cid, recursive=recursive)
        except NodeError as e:
            raise PinFailedError(cid, cause=e) from e
        logger.debug("Pinned %s (recursive=%s)", cid, recursive)
