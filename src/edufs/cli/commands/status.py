"""Status command for CLI."""

from __future__ import annotations

import typer

from edufs.cli.main import app, exit_with_error, get_state
from edufs.core.exceptions import EdufsError


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the identity of the connected node."""
    state = get_state(ctx)
    node = state.node(ctx)

    try:
        identity = node.identity()
    except EdufsError as e:
        exit_with_error(e)

    typer.echo(f"Connected to node: {state.config.node}")
    typer.echo(f"Node ID: {identity.node_id}")
    typer.echo(f"Agent Version: {identity.agent_version}")
    typer.echo(f"Protocol Version: {identity.protocol_version}")
