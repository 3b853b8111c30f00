"""CLI for edufs."""

# Import commands to register them with the app
# These imports have side effects (registering commands with @app.command())
from edufs.cli.commands import publish as _publish_module  # noqa: F401
from edufs.cli.commands import retrieve as _retrieve_module  # noqa: F401
from edufs.cli.commands import status as _status_module  # noqa: F401
from edufs.cli.main import app, main


__all__ = ["app", "main"]
