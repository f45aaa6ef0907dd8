import sys
import traceback

import click
from rich.console import Console
from rich.markup import escape

import sfexport
from sfexport.core.exceptions import SfExportUsageError

from .export import export
from .logger import get_tempfile_logger, init_logger

USAGE_ERRORS = (SfExportUsageError, click.UsageError)


#
# Root command
#
def main(args=None):
    """Main sfexport CLI entry point.

    This wraps the `click` library in order to do some initialization and centralized error handling.
    """
    args = list(args or sys.argv)

    debug = "--debug" in args
    if debug:
        args.remove("--debug")

    init_logger(debug=debug)
    # Hand CLI processing over to click, but handle exceptions
    try:
        cli(args[1:], standalone_mode=False)
    except click.Abort:  # Keyboard interrupt
        Console(stderr=True).print("\n[red bold]Aborted!")
        sys.exit(1)
    except Exception as e:
        handle_exception(e, debug)
        sys.exit(1)


def handle_exception(error, debug=False):
    """Displays error of appropriate message back to user and, for anything
    other than a usage error, writes the traceback to a logfile.
    """
    error_console = Console(stderr=True)
    if isinstance(error, click.ClickException):
        error_console.print(f"[red bold]Error: {escape(error.format_message())}")
    else:
        error_console.print(f"[red bold]Error: {escape(str(error))}")

    if isinstance(error, USAGE_ERRORS):
        return

    logger, logfile_path = get_tempfile_logger()
    try:
        logger.error(
            "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
    error_console.print(
        f"[yellow]Full traceback written to {logfile_path}", soft_wrap=True
    )

    if debug:
        error_console.print_exception()


@click.group("main", help="Export all of a Salesforce org's metadata")
@click.version_option(version=sfexport.__version__, prog_name="sfexport")
def cli():
    """Top-level `click` command group."""


@cli.command(name="version", help="Print the current version of sfexport")
def version():
    click.echo(f"sfexport version: {sfexport.__version__} ({sys.argv[0]})")
    click.echo(f"Python version: {sys.version.split()[0]} ({sys.executable})")


# Top Level Commands

cli.add_command(export)
