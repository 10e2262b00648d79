"""Task management commands.

Commands operate on the task list the way it is displayed: ``list`` prints
an index column, and ``done``, ``edit``, ``move`` and ``delete`` accept
either that index or the task id (or the id suffix shown in the table).
Filters given to a command must match the ones used for ``list`` for the
indices to agree.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import typer
from rich.prompt import Confirm

from homelist.adapters.rest_api import RestApiTaskRepository
from homelist.models import SHOPPING_TYPE, Task
from homelist.models.exceptions import InvalidInputError, NotFoundError
from homelist.services.api.client import APIClient
from homelist.services.config_service import get_config_service
from homelist.services.drag_controller import DragController, DropResult
from homelist.services.notifications import ConsoleNotifier
from homelist.services.reconciliation import TaskListReconciler
from homelist.services.state import FilterStates
from homelist.utils.exit_codes import ERROR_GENERAL
from homelist.utils.ui.formatters import format_info, format_output, format_tasks_table

from .decorators import command_wrapper

app = typer.Typer(help="Task management commands")

MineOption = typer.Option(False, "--mine", help="Only tasks you created")
TagOption = typer.Option(None, "--tag", "-t", help="Only tasks tagged #TAG")
TypeOption = typer.Option(None, "--type", help="Only tasks of this type")
PagesOption = typer.Option(1, "--pages", "-p", min=1, help="Pages to load")


@asynccontextmanager
async def open_task_list(
    *,
    mine: bool = False,
    tag: str | None = None,
    task_type: str | None = None,
    pages: int = 1,
) -> AsyncIterator[TaskListReconciler]:
    """Load the task list with the given filters applied."""
    config = get_config_service().config
    filters = FilterStates()
    filters.author.set("mine" if mine else "all")
    filters.task_type.set(task_type)

    client = APIClient()
    reconciler = TaskListReconciler(
        RestApiTaskRepository(client),
        filters=filters,
        notifier=ConsoleNotifier(),
        current_user_id=config.user.id,
        page_size=config.list.page_size,
        refetch_threshold=config.list.refetch_threshold,
        scroll_fetch_threshold=config.list.scroll_fetch_threshold,
    )
    try:
        await reconciler.load()
        for _ in range(pages - 1):
            if not await reconciler.fetch_next_page():
                break
        if tag:
            reconciler.toggle_hashtag(tag)
        yield reconciler
    finally:
        reconciler.close()
        await client.close()


def resolve_task(reconciler: TaskListReconciler, ref: str) -> Task:
    """Find a task by visible index, full id or id suffix."""
    visible = reconciler.visible
    if ref.isdigit():
        index = int(ref)
        if index >= len(visible):
            raise NotFoundError(f"No task at index {index}")
        return visible[index]

    matches = [t for t in reconciler.state.base if t.id == ref or t.id.endswith(ref)]
    if not matches:
        raise NotFoundError(f"Task not found: {ref}")
    if len(matches) > 1:
        raise InvalidInputError(f"'{ref}' matches {len(matches)} tasks; use more characters")
    return matches[0]


def _show(reconciler: TaskListReconciler) -> None:
    format_tasks_table(
        reconciler.visible,
        active_tag=reconciler.filters.hashtag.get(),
        deleting_id=reconciler.deleting_id,
    )


@app.command("list")
@command_wrapper
async def list_tasks(
    mine: bool = MineOption,
    tag: str | None = TagOption,
    task_type: str | None = TypeOption,
    pages: int = PagesOption,
    output: str = typer.Option("table", "--output", "-o", help="table, json or yaml"),
) -> None:
    """List tasks, highest position first."""
    async with open_task_list(mine=mine, tag=tag, task_type=task_type, pages=pages) as tasks:
        if output == "table":
            _show(tasks)
            if tasks.has_next_page:
                format_info("More tasks available; use --pages to load them")
        else:
            format_output([t.model_dump(mode="json") for t in tasks.visible], output)


@app.command("add")
@command_wrapper
async def add_task(
    title: str = typer.Argument(..., help="Title; may contain #hashtags"),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    task_type: str = typer.Option("task", "--type", help="task, note or shopping"),
) -> None:
    """Create a task at the top of the list."""
    async with open_task_list() as tasks:
        task = await tasks.create_task(title, description=description, task_type=task_type)
        if task is None:
            raise typer.Exit(ERROR_GENERAL)
        if task.type == SHOPPING_TYPE:
            format_info("Shopping tasks are listed with 'homelist tasks list --type shopping'")


@app.command("done")
@command_wrapper
async def toggle_task(
    task_ref: str = typer.Argument(..., help="Index, id or id suffix"),
    mine: bool = MineOption,
    tag: str | None = TagOption,
    task_type: str | None = TypeOption,
) -> None:
    """Toggle a task's completion flag."""
    async with open_task_list(mine=mine, tag=tag, task_type=task_type) as tasks:
        task = resolve_task(tasks, task_ref)
        updated = await tasks.toggle_status(task.id)
        if updated is None:
            raise typer.Exit(ERROR_GENERAL)
        _show(tasks)


@app.command("edit")
@command_wrapper
async def edit_task(
    task_ref: str = typer.Argument(..., help="Index, id or id suffix"),
    title: str | None = typer.Option(None, "--title", help="New title"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
) -> None:
    """Change a task's title or description."""
    if title is None and description is None:
        raise InvalidInputError("Nothing to change; pass --title and/or --description")
    async with open_task_list() as tasks:
        task = resolve_task(tasks, task_ref)
        updated = await tasks.edit_task(task.id, title=title, description=description)
        if updated is None:
            raise typer.Exit(ERROR_GENERAL)
        _show(tasks)


@app.command("move")
@command_wrapper
async def move_task(
    source: int = typer.Argument(..., help="Current index in the list"),
    destination: int = typer.Argument(..., help="Index to move the task to"),
    mine: bool = MineOption,
    tag: str | None = TagOption,
    task_type: str | None = TypeOption,
    pages: int = PagesOption,
) -> None:
    """Move a task to another place in the list."""
    async with open_task_list(mine=mine, tag=tag, task_type=task_type, pages=pages) as tasks:
        visible = tasks.visible
        if not 0 <= source < len(visible):
            raise NotFoundError(f"No task at index {source}")
        if not 0 <= destination < len(visible):
            raise InvalidInputError(f"Destination must be between 0 and {len(visible) - 1}")

        drag = DragController(tasks)
        drag.start(visible[source].id)
        position = await drag.drop(
            DropResult(
                draggable_id=visible[source].id,
                source_index=source,
                destination_index=destination,
            )
        )
        if position is None:
            format_info("Task is already in place")
        _show(tasks)


@app.command("delete")
@command_wrapper
async def delete_task(
    task_ref: str = typer.Argument(..., help="Index, id or id suffix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    mine: bool = MineOption,
    tag: str | None = TagOption,
    task_type: str | None = TypeOption,
) -> None:
    """Delete a task."""
    async with open_task_list(mine=mine, tag=tag, task_type=task_type) as tasks:
        task = resolve_task(tasks, task_ref)
        if not yes and not Confirm.ask(f"Delete '{task.title}'?"):
            format_info("Cancelled")
            return
        if not await tasks.delete_task(task.id):
            raise typer.Exit(ERROR_GENERAL)
        tasks.notifier.success("Task deleted", f"'{task.title}' has been deleted")
        _show(tasks)
