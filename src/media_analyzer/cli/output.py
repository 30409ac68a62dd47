"""JSON output and error helpers shared by CLI commands."""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn

import click

from .exit_codes import ExitCode


def emit_json(data: Any) -> None:
    """Write a JSON document to stdout."""
    click.echo(json.dumps(data, indent=2))


def error_exit(message: str, code: ExitCode | int) -> NoReturn:
    """Print a JSON error document to stderr and exit.

    Args:
        message: Error message to display.
        code: Exit code to use (ExitCode enum or int).
    """
    code_name = code.name if isinstance(code, ExitCode) else "UNKNOWN_ERROR"
    payload = {"status": "failed", "error": {"code": code_name, "message": message}}
    click.echo(json.dumps(payload), err=True)
    sys.exit(int(code))
