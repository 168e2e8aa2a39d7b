"""Post-hoc re-parsers for saved text.

These run on a record body after it has been stored, not on the live page.
They recover task items and recipe sections for display; when nothing is
recognised the caller shows the raw body instead.
"""

import logging
import re

from pagecapture.models import RecipeInfo, RecipeSections, TaskItem, TaskProgress
from pagecapture.patterns import is_completed_line, match_task_line

LOGGER = logging.getLogger(__name__)

# Recipe line shapes
INGREDIENT_HEADER = "ingredient"
INSTRUCTION_HEADERS = ("instruction", "direction", "method")
QUANTITY_UNIT_REGEX = re.compile(r"^\d+\s*(?:cups?|tbsp|tsp|oz|lbs?|g|kg|ml|l)\b", re.IGNORECASE)
BULLET_REGEX = re.compile(r"^[•\-*]\s*")
NUMBERING_REGEX = re.compile(r"^\d+\.\s*")
SHORT_LINE_LENGTH = 50
HEADER_MAX_WORDS = 5

PREP_TIME_REGEX = re.compile(r"(?:prep|preparation)[:\s]+(\d+[ \t\w]+)", re.IGNORECASE)
COOK_TIME_REGEX = re.compile(r"(?:cook|baking)[:\s]+(\d+[ \t\w]+)", re.IGNORECASE)
SERVINGS_REGEX = re.compile(r"(?:serves|servings|yields)[:\s]+(\d+)", re.IGNORECASE)


def _lines(body: str | None) -> list[str]:
    if not body:
        return []
    return [line.strip() for line in body.split("\n") if line.strip()]


# =============================================================================
# Tasks
# =============================================================================


def parse_tasks(body: str | None, limit: int | None = None) -> list[TaskItem]:
    """Recover task items from a saved body.

    Lines matching the task grammar become items; a line is completed when it
    contains ``[x]``, ``✓`` or ``done``. If no line matches, every non-empty
    line becomes an item, completed by the same markers, so rendering the
    items and parsing them again gives the same list.

    Args:
        body: Saved text
        limit: Optional maximum number of items (card previews show 5)

    Returns:
        Task items in order
    """
    lines = _lines(body)
    items = []
    for line in lines:
        task = match_task_line(line)
        if task is not None:
            items.append(TaskItem(text=task, completed=is_completed_line(line)))

    if not items:
        items = [TaskItem(text=line, completed=is_completed_line(line)) for line in lines]

    if limit is not None:
        items = items[:limit]
    return items


def render_tasks(items: list[TaskItem]) -> str:
    """Render items as checkbox lines, one per item."""
    return "\n".join(f"- [{'x' if item.completed else ' '}] {item.text}" for item in items)


def task_progress(items: list[TaskItem]) -> TaskProgress:
    return TaskProgress(completed=sum(1 for item in items if item.completed), total=len(items))


# =============================================================================
# Recipes
# =============================================================================


def _section_header(line: str) -> str | None:
    # A header is a bare keyword or a short line ending in a colon
    words = line.split()
    if BULLET_REGEX.match(line) or re.match(r"^\d", line):
        return None
    if len(words) > 2 and not (line.endswith(":") and len(words) <= HEADER_MAX_WORDS):
        return None
    lower = line.lower()
    if INGREDIENT_HEADER in lower:
        return "ingredients"
    if any(header in lower for header in INSTRUCTION_HEADERS):
        return "instructions"
    return None


def parse_recipe(body: str | None) -> RecipeSections:
    """Split a saved recipe into ingredient and instruction lists.

    Header lines switch the active section and are not kept themselves. A
    header is a one- or two-word line, or a short line ending in a colon, that
    mentions "ingredient", "instruction", "direction" or "method".

    - In the ingredient section, lines starting with a digit, a bullet or a
      letter are kept, bullet removed.
    - In the instruction section, numbered, bulleted or capitalised lines are
      kept, numbering and bullet removed.
    - Before any header, short quantity+unit lines ("2 cups flour") are
      ingredients and numbered or long lines are instructions.

    Args:
        body: Saved recipe text

    Returns:
        RecipeSections; both lists empty when nothing was recognised
    """
    sections = RecipeSections()
    current: str | None = None

    for line in _lines(body):
        header = _section_header(line)
        if header:
            current = header
            continue

        if current == "ingredients":
            if re.match(r"^\d", line) or BULLET_REGEX.match(line) or re.match(r"^[a-z]", line, re.IGNORECASE):
                sections.ingredients.append(BULLET_REGEX.sub("", line, count=1))
        elif current == "instructions":
            if NUMBERING_REGEX.match(line) or BULLET_REGEX.match(line) or re.match(r"^[A-Z]", line):
                step = NUMBERING_REGEX.sub("", line, count=1)
                sections.instructions.append(BULLET_REGEX.sub("", step, count=1))
        elif QUANTITY_UNIT_REGEX.match(line) and len(line) <= SHORT_LINE_LENGTH:
            sections.ingredients.append(line)
        elif NUMBERING_REGEX.match(line) or len(line) > SHORT_LINE_LENGTH:
            sections.instructions.append(NUMBERING_REGEX.sub("", line, count=1))

    if sections.is_empty:
        LOGGER.debug("No recipe structure recognised")
    return sections


def parse_recipe_info(body: str | None) -> RecipeInfo:
    """Pull prep time, cook time and servings out of saved recipe text."""
    if not body:
        return RecipeInfo()

    def first(regex: re.Pattern[str]) -> str | None:
        match = regex.search(body)
        return match.group(1).strip() if match else None

    return RecipeInfo(
        prep_time=first(PREP_TIME_REGEX),
        cook_time=first(COOK_TIME_REGEX),
        servings=first(SERVINGS_REGEX),
    )
