"""Re-parsing commands for saved record bodies."""

from pathlib import Path

import click

from pagecapture.cli._common import app, configure_logging, emit, read_text_file

_INPUT_FILE = click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path)


@app.command("tasks", help="Recover task items from a saved body.")
@click.argument("body_file", type=_INPUT_FILE)
@click.option("--limit", "-n", type=click.IntRange(min=0), default=None, help="Maximum number of tasks")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format",
)
def tasks(body_file: Path, limit: int | None, output_format: str) -> None:
    """Print the tasks in a saved body with a progress summary.

    Examples:
        pagecapture tasks todo.txt
        pagecapture tasks todo.txt --limit 5 --format json
    """
    import json

    from pagecapture.services.reparse import parse_tasks, render_tasks, task_progress

    configure_logging()
    items = parse_tasks(read_text_file(body_file), limit=limit)
    progress = task_progress(items)

    if output_format.lower() == "json":
        data = {
            "tasks": [item.model_dump() for item in items],
            "completed": progress.completed,
            "total": progress.total,
        }
        emit(json.dumps(data, indent=2, ensure_ascii=False))
        return

    if items:
        click.echo(render_tasks(items))
    click.echo(f"{progress.completed}/{progress.total} completed ({progress.percent:.0f}%)", err=True)


@app.command("recipe", help="Recover ingredients and instructions from a saved body.")
@click.argument("body_file", type=_INPUT_FILE)
def recipe(body_file: Path) -> None:
    """Print recipe sections and headline facts as JSON.

    When no structure is recognised the raw body is included so it can be
    shown instead.

    Examples:
        pagecapture recipe pancakes.txt
    """
    import json

    from pagecapture.services.reparse import parse_recipe, parse_recipe_info

    configure_logging()
    body = read_text_file(body_file)
    sections = parse_recipe(body)

    data = {**sections.model_dump(), **parse_recipe_info(body).model_dump()}
    if sections.is_empty:
        click.echo("No ingredients or instructions detected", err=True)
        data["body"] = body
    emit(json.dumps(data, indent=2, ensure_ascii=False))
