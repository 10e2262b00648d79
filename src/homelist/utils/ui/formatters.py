"""Output formatters for different formats."""

import json
import re
from typing import Any

import yaml
from rich.table import Table
from rich.text import Text

from homelist.models import ShoppingItem, Task

from .console import get_console

console = get_console()

_HASHTAG_RE = re.compile(r"#[\w-]+")


def format_output(data: Any, output_format: str = "pretty") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.dump(data, default_flow_style=False, sort_keys=False))
    elif isinstance(data, dict) and "tasks" in data:
        format_tasks_table([Task.model_validate(t) for t in data["tasks"]])
    elif isinstance(data, dict) and "items" in data:
        format_shopping_table([ShoppingItem.model_validate(i) for i in data["items"]])
    else:
        console.print(data)


def highlight_hashtags(title: str, active_tag: str | None = None) -> Text:
    """Render a title with its hashtag tokens emphasised."""
    text = Text(title)
    for match in _HASHTAG_RE.finditer(title):
        token = match.group(0)
        active = bool(active_tag) and token.lstrip("#").split("-")[0] == active_tag
        text.stylize("bold magenta" if active else "cyan", match.start(), match.end())
    return text


def format_tasks_table(
    tasks: list[Task],
    *,
    active_tag: str | None = None,
    deleting_id: str | None = None,
) -> None:
    """Display tasks in list order, index first so it can be used by `move`."""
    if not tasks:
        console.print("[yellow]No tasks to display[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Position", justify="right")
    table.add_column("Done", justify="center")

    for index, task in enumerate(tasks):
        title = highlight_hashtags(task.title, active_tag)
        if task.completed:
            title.stylize("strike dim")
        if task.id == deleting_id:
            title.stylize("red")
        table.add_row(
            str(index),
            task.id[-8:],
            title,
            task.type,
            f"{task.position:g}",
            "✓" if task.completed else "",
        )

    console.print(table)


def format_shopping_table(items: list[ShoppingItem]) -> None:
    if not items:
        console.print("[yellow]The shopping list is empty[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Item")
    table.add_column("Qty", justify="right")
    table.add_column("Checked", justify="center")

    for item in items:
        name = Text(item.name)
        if item.checked:
            name.stylize("strike dim")
        table.add_row(str(item.id), name, f"{item.quantity:g}", "✓" if item.checked else "")

    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")
