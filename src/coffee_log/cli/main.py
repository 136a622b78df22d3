"""Coffee Log CLI main entry point."""

from __future__ import annotations

import logging
import sys
from typing import Annotated

import typer

from coffee_log.cli.commands import entries as entries_commands
from coffee_log.cli.commands import sync as sync_commands
from coffee_log.utils.config import get_config

app = typer.Typer(
    name="coffeelog",
    help="Coffee Log - offline-first brew journal",
    no_args_is_help=True,
)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose or get_config().debug else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


entries_commands.register(app)
sync_commands.register(app)


@app.command()
def version() -> None:
    """Show version information."""
    from coffee_log import __version__

    typer.echo(f"coffee-log v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
