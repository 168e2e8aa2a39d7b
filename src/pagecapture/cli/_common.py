"""Common CLI utilities and the main app group."""

import json
import logging
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)
_configured = False

# Load .env file when CLI module is imported
load_dotenv(Path.cwd() / ".env")


def configure_logging(*, verbose: bool = False) -> None:
    """Configure logging with Rich handler. Call once at startup."""
    global _configured
    if _configured:
        return

    from pagecapture.config import get_settings
    from pagecapture.exceptions import ConfigurationError

    try:
        level = logging.DEBUG if verbose else get_settings().log_level
    except ConfigurationError as e:
        raise click.ClickException(e.message) from e

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
            )
        ],
        force=True,
    )

    # Suppress noisy third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    _configured = True


def read_text_file(path: Path) -> str:
    """Read a UTF-8 input file, reporting failures as click errors."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Could not read {path}: {e}") from e


def read_json_file(path: Path) -> Any:
    """Read a JSON input file, reporting failures as click errors."""
    try:
        return json.loads(read_text_file(path))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}") from e


def emit(text: str, output: Path | None = None) -> None:
    """Write command output to ``output``, or to stdout."""
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
            f.write("\n")
        click.echo(f"Wrote {output}", err=True)
    else:
        click.echo(text)


@click.group(help="Capture the primary content of saved web pages.")
def app() -> None:
    """
    Entry point for the pagecapture CLI.

    Provides commands for extracting records from saved pages, classifying
    them, and re-parsing saved task lists and recipes.
    """
