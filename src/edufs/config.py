"""Configuration utilities for edufs.

Settings come from command-line options, falling back to EDUFS_*
environment variables and then to defaults for a local Kubo daemon.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from edufs.core.exceptions import ConfigurationError


DEFAULT_NODE = "http://127.0.0.1:5001"
DEFAULT_GATEWAY = "http://127.0.0.1:8080/ipfs/"
DEFAULT_TIMEOUT = 60.0

ENV_NODE = "EDUFS_NODE"
ENV_GATEWAY = "EDUFS_GATEWAY"
ENV_TIMEOUT = "EDUFS_TIMEOUT"


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Settings for one CLI invocation.

    Attributes:
        node: Node endpoint: http(s) URL, multiaddress, or file:// store.
        gateway: Gateway prefix used to print links, ending in "/ipfs/".
        timeout: Per-request timeout in seconds; None waits forever.
    """

    node: str = DEFAULT_NODE
    gateway: str = DEFAULT_GATEWAY
    timeout: float | None = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a config from EDUFS_* variables, defaulting the rest.

        Raises:
            ConfigurationError: If EDUFS_TIMEOUT is not a number.
        """
        env = os.environ if environ is None else environ
        timeout: float | None = DEFAULT_TIMEOUT
        raw_timeout = env.get(ENV_TIMEOUT)
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ConfigurationError(
                    f"{ENV_TIMEOUT} must be a number of seconds, got {raw_timeout!r}"
                ) from None
            if timeout <= 0:
                timeout = None
        return cls(
            node=env.get(ENV_NODE) or DEFAULT_NODE,
            gateway=env.get(ENV_GATEWAY) or DEFAULT_GATEWAY,
            timeout=timeout,
        )

    def gateway_link(self, cid: str) -> str:
        """Return a gateway URL for cid."""
        base = self.gateway if self.gateway.endswith("/") else f"{self.gateway}/"
        return f"{base}{cid}"

    def ipns_link(self, name: str) -> str:
        """Return a gateway URL for a naming record."""
        base = self.gateway.rstrip("/")
        if base.endswith("/ipfs"):
            base = base[: -len("/ipfs")]
        return f"{base}/ipns/{name}"


def endpoint_to_url(endpoint: str) -> str:
    """Convert a node endpoint to an HTTP base URL.

    Accepts URLs unchanged and converts multiaddresses such as
    "/ip4/127.0.0.1/tcp/5001" or "/dns4/node.example/tcp/443/https".

    Args:
        endpoint: URL or multiaddress.

    Returns:
        Base URL without a trailing slash.

    Raises:
        ConfigurationError: If the endpoint cannot be understood.

    Example:
        >>> endpoint_to_url("/ip4/127.0.0.1/tcp/5001")
        'http://127.0.0.1:5001'
    """
    if endpoint.startswith(("http://", "https://")):
        return endpoint.rstrip("/")
    if not endpoint.startswith("/"):
        raise ConfigurationError(f"Unsupported node endpoint: {endpoint!r}")

    parts = [p for p in endpoint.split("/") if p]
    if len(parts) < 4 or parts[2] != "tcp":
        raise ConfigurationError(
            f"Multiaddress must look like /ip4/<host>/tcp/<port>: {endpoint!r}"
        )

    protocol, host, _tcp, port, *rest = parts
    if protocol == "ip6":
        host = f"[{host}]"
    elif protocol not in ("ip4", "dns", "dns4", "dns6"):
        raise ConfigurationError(f"Unsupported multiaddress protocol: {protocol!r}")
    if not port.isdigit():
        raise ConfigurationError(f"Invalid port in multiaddress: {endpoint!r}")

    scheme = "http"
    if rest:
        if rest[0] not in ("http", "https", "tls"):
            raise ConfigurationError(f"Unsupported multiaddress suffix: {endpoint!r}")
        scheme = "http" if rest[0] == "http" else "https"
    return f"{scheme}://{host}:{port}"


def configure_logging(verbose: bool = False) -> None:
    """Send library logs to stderr through rich.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger("edufs")
    logger.handlers.clear()
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
