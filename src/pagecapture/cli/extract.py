"""Extraction commands."""

from pathlib import Path

import click

from pagecapture.cli._common import app, configure_logging, emit, read_json_file, read_text_file

_INPUT_FILE = click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path)


@app.command("extract", help="Extract the primary content of a saved page.")
@click.argument("html_file", type=_INPUT_FILE)
@click.option("--url", "-u", required=True, help="URL the page was loaded from")
@click.option(
    "--selection",
    "-s",
    type=str,
    default="",
    help="Text the user had selected on the page",
)
@click.option(
    "--state",
    type=_INPUT_FILE,
    default=None,
    help="JSON file of page state variables (e.g. ytInitialPlayerResponse)",
)
@click.option(
    "--selectors",
    type=_INPUT_FILE,
    default=None,
    help="JSON selector table override. Also reads PAGECAPTURE_SELECTORS_PATH env.",
)
@click.option(
    "--payload/--no-payload",
    default=False,
    show_default=True,
    help="Print the item store request instead of the raw response",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Output JSON file",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def extract_page(
    html_file: Path,
    url: str,
    selection: str,
    state: Path | None,
    selectors: Path | None,
    payload: bool,
    output: Path | None,
    verbose: bool,
) -> None:
    """Run the full extraction pipeline against a saved HTML file.

    Video pages wait for their player state before reading; those waits are
    skipped here because a saved page cannot change.

    Examples:
        pagecapture extract product.html --url https://www.amazon.com/dp/B0TEST1234
        pagecapture extract watch.html --url "https://www.youtube.com/watch?v=abc123" --state state.json
        pagecapture extract post.html --url https://blog.example.com/p --selection "1. Preheat oven"
        pagecapture extract post.html --url https://blog.example.com/p --payload --output item.json
    """
    import asyncio
    import json

    from pagecapture.config import load_settings
    from pagecapture.document import StaticPage
    from pagecapture.exceptions import PageCaptureError
    from pagecapture.services.extract import ExtractService

    configure_logging(verbose=verbose)

    embedded_state = read_json_file(state) if state else {}
    if not isinstance(embedded_state, dict):
        raise click.ClickException(f"{state} must contain a JSON object of state variables")

    overrides = {"selectors_path": selectors} if selectors else {}
    try:
        settings = load_settings(**overrides)
        table = settings.load_selectors()
    except PageCaptureError as e:
        raise click.ClickException(e.message) from e

    page = StaticPage(url, read_text_file(html_file), embedded_state=embedded_state, selection=selection)

    async def no_wait(_seconds: float) -> None:
        return None

    service = ExtractService(settings=settings, selectors=table, sleep=no_wait)
    response = asyncio.run(service.extract(page))

    if response.error:
        click.echo(f"Warning: extraction degraded: {response.error}", err=True)

    data = response.to_item_payload().model_dump(mode="json") if payload else response.to_message()
    emit(json.dumps(data, indent=2, ensure_ascii=False), output)


@app.command("classify", help="Print the content category of a saved page.")
@click.argument("html_file", type=_INPUT_FILE)
@click.option("--url", "-u", required=True, help="URL the page was loaded from")
def classify_page(html_file: Path, url: str) -> None:
    """Classify a saved page.

    Examples:
        pagecapture classify page.html --url https://vimeo.com/12345
    """
    from pagecapture.document import Document
    from pagecapture.services.classifier import classify

    configure_logging()
    click.echo(classify(url, Document(read_text_file(html_file))).value)
