"""Node factory choosing an adapter from the endpoint's form."""

from __future__ import annotations

from typing import TYPE_CHECKING

from edufs.config import DEFAULT_TIMEOUT, endpoint_to_url
from edufs.core.exceptions import ConfigurationError


if TYPE_CHECKING:
    from edufs.core.ports import NodePort


def parse_endpoint_scheme(endpoint: str) -> str | None:
    """Extract the URI scheme from an endpoint string.

    Args:
        endpoint: URL, multiaddress or file:// URI.

    Returns:
        The scheme (e.g., 'http', 'file') or None for multiaddresses.
    """
    if "://" in endpoint:
        scheme = endpoint.split("://", 1)[0]
        # Avoid confusing Windows drive letters (C:) with schemes
        if len(scheme) > 1:
            return scheme.lower()
    return None


def strip_file_scheme(uri: str) -> str:
    """Strip file:// prefix from URI, returning plain path.

    Args:
        uri: URI that may have file:// prefix.

    Returns:
        The path without file:// prefix.
    """
    if uri.startswith("file://"):
        return uri[7:]  # len("file://") == 7
    return uri


def create_node(
    endpoint: str,
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    cid_version: int = 1,
) -> NodePort:
    """Create the node adapter for an endpoint.

    * ``http://`` and ``https://`` URLs and multiaddresses → KuboNode
    * ``file://<dir>`` → LocalNode storing content under <dir>

    Args:
        endpoint: Where the node lives.
        timeout: Per-request timeout for network nodes.
        cid_version: CID version requested from Kubo.

    Returns:
        A NodePort implementation. The caller owns it and must close it.

    Raises:
        ConfigurationError: If no adapter handles the endpoint.
    """
    from edufs.adapters.node.kubo import KuboNode
    from edufs.adapters.node.local import LocalNode

    scheme = parse_endpoint_scheme(endpoint)
    if scheme == "file":
        path = strip_file_scheme(endpoint)
        if not path:
            raise ConfigurationError("file:// endpoint needs a directory path")
        return LocalNode(path)
    if scheme in ("http", "https") or (scheme is None and endpoint.startswith("/")):
        return KuboNode(endpoint_to_url(endpoint), timeout=timeout, cid_version=cid_version)
    scheme_display = f"'{scheme}'" if scheme else repr(endpoint)
    raise ConfigurationError(f"No node adapter for endpoint {scheme_display}")
