"""Satchel CLI - inspect and maintain file-backed session stores.

Commands:
    show     - Print the decoded payload of a session
    destroy  - Remove a session record
    prune    - Remove session files older than an age
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional

import click

from . import __version__
from .config import build_session_config
from .drivers.file import FileDriver
from .faults import Fault

logger = logging.getLogger("satchel.cli")

_CHECK = "✔"
_CROSS = "✘"


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red to stderr."""
    click.echo(click.style(message, fg="red"), err=True)


def info(message: str) -> None:
    """Print info message in cyan."""
    click.echo(click.style(message, fg="cyan"))


def _file_driver(location: str, age: Optional[str] = None) -> FileDriver:
    options = {"driver": "file", "file": {"location": location}}
    if age is not None:
        options["age"] = age
    return FileDriver(build_session_config(options))


location_option = click.option(
    "--location",
    "-l",
    required=True,
    envvar="SATCHEL_FILE_LOCATION",
    type=click.Path(file_okay=False),
    help="Session directory (env: SATCHEL_FILE_LOCATION)",
)


@click.group()
@click.version_option(version=__version__, prog_name="satchel")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, verbose: bool):
    """Inspect and maintain file-backed session stores."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command("show")
@click.argument("session_id")
@location_option
def show(session_id: str, location: str):
    """
    Print the decoded payload of SESSION_ID.

    Examples:
      satchel show sess_abc --location /var/lib/app/sessions
    """
    try:
        driver = _file_driver(location)
        # Reading a missing record would provision an empty file.
        if not driver.path_for(session_id).is_file():
            payload = None
        else:
            payload = asyncio.run(driver.read(session_id))
    except Fault as e:
        error(f"  {_CROSS} {e.message}")
        sys.exit(1)

    if payload is None:
        error(f"  {_CROSS} No valid session '{session_id}'")
        sys.exit(1)

    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@cli.command("destroy")
@click.argument("session_id")
@location_option
def destroy(session_id: str, location: str):
    """
    Remove the record of SESSION_ID.

    Examples:
      satchel destroy sess_abc --location /var/lib/app/sessions
    """
    try:
        asyncio.run(_file_driver(location).destroy(session_id))
    except Fault as e:
        error(f"  {_CROSS} {e.message}")
        sys.exit(1)

    success(f"  {_CHECK} Destroyed session '{session_id}'")


@cli.command("prune")
@location_option
@click.option("--age", "-a", default="2h", show_default=True, help="Maximum idle age (e.g. 90, 30m, 2h, 7d)")
@click.pass_context
def prune(ctx, location: str, age: str):
    """
    Remove session files not touched within AGE.

    Examples:
      satchel prune --location /var/lib/app/sessions --age 7d
    """
    try:
        removed = asyncio.run(_file_driver(location, age).cleanup_expired())
    except Fault as e:
        error(f"  {_CROSS} {e.message}")
        sys.exit(1)

    success(f"  {_CHECK} Removed {removed} expired session file(s)")
    if ctx.obj["verbose"]:
        info(f"  Location: {location}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
