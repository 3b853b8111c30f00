"""CLI application and shared helpers for edufs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NoReturn

import typer

from edufs.config import (
    DEFAULT_GATEWAY,
    DEFAULT_NODE,
    ENV_GATEWAY,
    ENV_NODE,
    ENV_TIMEOUT,
    ClientConfig,
    configure_logging,
)
from edufs.core.exceptions import EdufsError


if TYPE_CHECKING:
    from edufs.core.ports import NodePort


# Some files failed to upload or pin, but the publish produced a root CID.
EXIT_PARTIAL = 3

app = typer.Typer(
    name="edufs",
    help="Publish files and folders to IPFS and retrieve them by CID.",
    no_args_is_help=True,
)


@dataclass
class CliState:
    """Per-invocation state stored on the typer context.

    The node is created on first use and closed when the command ends.
    """

    config: ClientConfig
    _node: NodePort | None = field(default=None, repr=False)

    def node(self, ctx: typer.Context) -> NodePort:
        if self._node is None:
            from edufs.adapters.node import create_node

            try:
                self._node = create_node(self.config.node, timeout=self.config.timeout)
            except EdufsError as e:
                exit_with_error(e)
            ctx.call_on_close(self._node.close)
        return self._node


def exit_with_error(error: EdufsError) -> NoReturn:
    """Print an error and its recovery hint to stderr and exit with status 1."""
    typer.echo(f"Error: {error}", err=True)
    if error.recovery_hint:
        typer.echo(f"Hint: {error.recovery_hint}", err=True)
    raise typer.Exit(1) from None


def get_state(ctx: typer.Context) -> CliState:
    """Return the CliState created by the app callback."""
    state = ctx.find_object(CliState)
    if state is None:
        # Commands invoked without the callback (direct function calls).
        state = CliState(ClientConfig.from_env())
        ctx.obj = state
    return state


@app.callback()
def configure(
    ctx: typer.Context,
    node: str = typer.Option(
        DEFAULT_NODE,
        "--node",
        "-n",
        envvar=ENV_NODE,
        help="Node API endpoint: URL, multiaddress, or file://<dir> for a local store.",
    ),
    gateway: str = typer.Option(
        DEFAULT_GATEWAY,
        "--gateway",
        envvar=ENV_GATEWAY,
        help="Gateway prefix used when printing links.",
    ),
    timeout: float = typer.Option(
        60.0,
        "--timeout",
        envvar=ENV_TIMEOUT,
        help="Per-request timeout in seconds (0 waits forever).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging.",
    ),
) -> None:
    """Publish files and folders to IPFS and retrieve them by CID."""
    configure_logging(verbose)
    ctx.obj = CliState(
        ClientConfig(
            node=node,
            gateway=gateway,
            timeout=timeout if timeout > 0 else None,
        )
    )


def main() -> None:
    """Entry point for the CLI."""
    app()
