"""Shared formatting helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from edufs.core.formatting import format_size, status_to_color


if TYPE_CHECKING:
    from edufs.config import ClientConfig
    from edufs.core.models import PublishResult, UploadStatus


def _format_status_with_color(status: UploadStatus) -> Text:
    """Format an upload status with color coding.

    Returns:
        Rich Text object: green when published, yellow when only the pin
        failed, red when the upload failed.
    """
    label = status.value.replace("_", " ")
    color = status_to_color(status)
    return Text(label, style=color) if color else Text(label)


def print_publish_result(result: PublishResult, config: ClientConfig) -> None:
    """Print root CID, gateway link and per-file problems."""
    published = len(result.succeeded)
    total = len(result.per_file)
    typer.echo(f"CID: {result.root_cid}")
    typer.echo(f"URL: {config.gateway_link(result.root_cid)}")
    typer.echo(f"Files: {published}/{total} published")

    if result.root_is_partial:
        first = next(r for r in result.per_file if r.uploaded)
        typer.echo(
            f"Warning: the node cannot add a directory as one object; the CID above "
            f"is the CID of '{first.entry.relative_path}' only, not of the directory.",
            err=True,
        )

    if result.has_failures:
        print_failures(result)


def print_failures(result: PublishResult) -> None:
    """Print a table of files that were not published to stderr."""
    table = Table(title="Files not published")
    table.add_column("Path")
    table.add_column("Size", justify="right")
    table.add_column("Status")
    table.add_column("CID")
    table.add_column("Error")

    for item in result.failed:
        table.add_row(
            item.entry.relative_path,
            format_size(item.entry.size_bytes),
            _format_status_with_color(item.status),
            str(item.cid) if item.cid else "-",
            str(item.error) if item.error else "",
        )

    console = Console(stderr=True)
    console.print(table)
