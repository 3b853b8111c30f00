"""Add and publish commands for CLI."""

from __future__ import annotations

from pathlib import Path

import typer

from edufs.cli.formatting import print_publish_result
from edufs.cli.main import EXIT_PARTIAL, app, exit_with_error, get_state
from edufs.core.exceptions import EdufsError, PublishCancelledError
from edufs.core.models import PublishResult


def _run_publish(
    ctx: typer.Context,
    path: str,
    *,
    per_file: bool,
    jobs: int,
    deadline: float | None,
    quiet: bool,
) -> PublishResult:
    """Publish path with the options shared by add and publish."""
    from edufs import (
        CancelToken,
        NullProgressReporter,
        Publisher,
        PublishMode,
        RichProgressReporter,
        ThreadPoolExecutorAdapter,
    )

    state = get_state(ctx)
    node = state.node(ctx)

    if jobs < 1:
        typer.echo("Error: --jobs must be at least 1.", err=True)
        raise typer.Exit(1)
    if deadline is not None and deadline <= 0:
        typer.echo("Error: --deadline must be greater than 0.", err=True)
        raise typer.Exit(1)

    executor = ThreadPoolExecutorAdapter(max_workers=jobs) if jobs > 1 else None
    mode = PublishMode.PER_FILE if per_file else PublishMode.AUTO
    cancel = CancelToken(timeout=deadline) if deadline is not None else None

    try:
        if quiet:
            publisher = Publisher(node, NullProgressReporter(), executor, mode)
            return publisher.publish(Path(path), cancel=cancel)
        with RichProgressReporter(transient=True) as progress:
            publisher = Publisher(node, progress, executor, mode)
            return publisher.publish(Path(path), cancel=cancel)
    except PublishCancelledError as e:
        typer.echo(f"Error: {e}", err=True)
        for item in e.partial:
            if item.cid is not None:
                typer.echo(f"  {item.entry.relative_path}: {item.cid}", err=True)
        typer.echo(f"Hint: {e.recovery_hint}", err=True)
        raise typer.Exit(1) from None
    except EdufsError as e:
        exit_with_error(e)


def _added_message(result: PublishResult) -> str:
    if result.pin_failures:
        return "File or folder added, but some content is not pinned."
    if result.has_failures:
        return "File or folder added, but some files failed to upload."
    return "File or folder added and pinned."


def _finish(result: PublishResult) -> None:
    if result.has_failures:
        raise typer.Exit(EXIT_PARTIAL)


@app.command()
def add(
    ctx: typer.Context,
    path: str = typer.Option(
        ...,
        "--path",
        "-p",
        help="Path to the file or folder to add.",
    ),
    per_file: bool = typer.Option(
        False,
        "--per-file",
        help="Upload files one by one instead of as a single directory.",
    ),
    jobs: int = typer.Option(
        1,
        "--jobs",
        "-j",
        help="Number of files to upload in parallel in per-file mode.",
    ),
    deadline: float | None = typer.Option(
        None,
        "--deadline",
        help="Stop publishing after this many seconds.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Hide progress bars.",
    ),
) -> None:
    """Add a file or folder to IPFS and pin it to the node."""
    state = get_state(ctx)
    result = _run_publish(
        ctx, path, per_file=per_file, jobs=jobs, deadline=deadline, quiet=quiet
    )
    typer.echo(_added_message(result))
    print_publish_result(result, state.config)
    _finish(result)


@app.command()
def publish(
    ctx: typer.Context,
    path: str = typer.Option(
        ...,
        "--path",
        "-p",
        help="Path to the directory to publish.",
    ),
    ipns_key: str | None = typer.Option(
        None,
        "--ipns-key",
        "-k",
        help="IPNS key to point at the published directory.",
    ),
    per_file: bool = typer.Option(
        False,
        "--per-file",
        help="Upload files one by one instead of as a single directory.",
    ),
    jobs: int = typer.Option(
        1,
        "--jobs",
        "-j",
        help="Number of files to upload in parallel in per-file mode.",
    ),
    deadline: float | None = typer.Option(
        None,
        "--deadline",
        help="Stop publishing after this many seconds.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Hide progress bars.",
    ),
) -> None:
    """Publish a directory on IPFS and optionally bind an IPNS key to it."""
    from edufs import NamePublisher

    state = get_state(ctx)
    result = _run_publish(
        ctx, path, per_file=per_file, jobs=jobs, deadline=deadline, quiet=quiet
    )

    if not ipns_key:
        typer.echo("Directory published via IPFS.")
        print_publish_result(result, state.config)
        _finish(result)
        return

    try:
        binding = NamePublisher(state.node(ctx)).publish_name(ipns_key, result.root_cid)
    except EdufsError as e:
        print_publish_result(result, state.config)
        exit_with_error(e)

    typer.echo("Directory published via IPNS.")
    print_publish_result(result, state.config)
    typer.echo(f"IPNS Key: {ipns_key}")
    typer.echo(f"IPNS Name: {binding.name}")
    typer.echo(f"IPNS Link: {state.config.ipns_link(binding.name)}")
    _finish(result)
