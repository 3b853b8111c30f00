"""Name publisher: bind a naming-service record to a root identifier."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from edufs.core.exceptions import NamePublishError, NameResolveError, NodeError


if TYPE_CHECKING:
    from edufs.core.models import ContentID, NameBinding
    from edufs.core.ports import NodePort


logger = logging.getLogger(__name__)


class NamePublisher:
    """Delegates name binding and resolution to the node.

    No retries happen here; a failed binding always surfaces.
    """

    def __init__(self, node: NodePort) -> None:
        self._node = node

    def publish_name(self, name: str, cid: ContentID) -> NameBinding:
        """Point the record for key `name` at cid.

        Raises:
            ValueError: If name is empty.
            NamePublishError: If the naming service rejects the binding.
        """
        if not name:
            raise ValueError("Name cannot be empty")
        try:
            binding = self._node.publish_name(name, cid)
        except NodeError as e:
            raise NamePublishError(name, cid, cause=e) from e
        logger.info("Published name %s -> %s", binding.name, binding.value or cid)
        return binding

    def resolve(self, name: str) -> str:
        """Return the path a record currently points at.

        Raises:
            NameResolveError: If the record cannot be resolved.
        """
        try:
            return self._node.resolve_name(name)
        except NodeError as e:
            raise NameResolveError(name, cause=e) from e
