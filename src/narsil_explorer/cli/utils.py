"""
CLI Utilities - Shared helper functions for command line operations.

Formatted status messages, settings resolution and the JSON envelope used
by every `--json` output.
"""

import json
from typing import Any, Optional

import click

from ..config import ExplorerSettings


def echo_success(message: str) -> None:
    """Print a success message with a green checkmark."""
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """Print an error message with a red cross to stderr."""
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """Print a warning message with a yellow alert symbol."""
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    """Print an informational message, dimmed."""
    click.echo(click.style(f"   {message}", dim=True))


def echo_navigation(file_path: str, line: int) -> None:
    """Navigator used by the CLI: there is no editor, so show the location."""
    echo_info(f"Would open: {file_path}:{line}")


def get_settings(ctx: click.Context) -> ExplorerSettings:
    """
    Settings stored on the context by the main group.

    Commands invoked directly (as in tests) get defaults.
    """
    obj = ctx.find_object(dict) or {}
    return obj.get("settings") or ExplorerSettings()


def json_envelope(data: Any = None, error: Optional[str] = None) -> str:
    """Serialize a `{"meta": ..., "data"|"error": ...}` envelope."""
    if error is not None:
        payload = {"meta": {"status": "error"}, "error": {"message": error}}
    else:
        payload = {"meta": {"status": "success"}, "data": data}
    return json.dumps(payload, indent=2, default=str)
