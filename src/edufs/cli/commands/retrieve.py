"""Retrieval commands (cat, download, resolve) for CLI."""

from __future__ import annotations

from pathlib import Path

import typer

from edufs.cli.main import app, exit_with_error, get_state
from edufs.core.exceptions import EdufsError


@app.command()
def cat(
    ctx: typer.Context,
    cid: str = typer.Option(
        ...,
        "--cid",
        "-c",
        help="Content Identifier (CID) of the file to print.",
    ),
) -> None:
    """Print the content of a CID to stdout."""
    from edufs import Retriever

    retriever = Retriever(get_state(ctx).node(ctx))
    out = typer.get_binary_stream("stdout")
    try:
        with retriever.retrieve(cid) as chunks:
            for chunk in chunks:
                out.write(chunk)
        out.flush()
    except EdufsError as e:
        exit_with_error(e)


@app.command()
def download(
    ctx: typer.Context,
    cid: str = typer.Option(
        ...,
        "--cid",
        "-c",
        help="Content Identifier (CID) of the file to download.",
    ),
    output: str = typer.Option(
        ...,
        "--output",
        "-o",
        help="Path to save the downloaded file.",
    ),
) -> None:
    """Download the content of a CID to a local file."""
    from edufs import Retriever

    retriever = Retriever(get_state(ctx).node(ctx))
    dest = Path(output)
    if dest.is_dir():
        typer.echo(f"Error: '{output}' is a directory; give a file path.", err=True)
        raise typer.Exit(1)

    try:
        retriever.download(cid, dest)
    except EdufsError as e:
        exit_with_error(e)

    typer.echo(f"File downloaded and saved to {dest}")


@app.command()
def resolve(
    ctx: typer.Context,
    name: str = typer.Option(
        ...,
        "--name",
        help="IPNS name or key id to resolve.",
    ),
) -> None:
    """Resolve an IPNS name to the path it points at."""
    from edufs import NamePublisher

    try:
        path = NamePublisher(get_state(ctx).node(ctx)).resolve(name)
    except EdufsError as e:
        exit_with_error(e)

    typer.echo(path)
