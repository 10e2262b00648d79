"""Main entry point for the Homelist CLI."""

import asyncio

import httpx
import typer

from homelist import __version__
from homelist.adapters.rest_api import translate_errors
from homelist.commands import config, shopping, tasks
from homelist.commands.decorators import command_wrapper
from homelist.models import ShoppingItem
from homelist.models.events import RealtimeEvent, ShoppingEvent, TaskEvent
from homelist.services.api.client import APIClient, get_client
from homelist.services.api.shopping import ShoppingAPI
from homelist.services.config_service import get_config_service
from homelist.services.realtime import EventBridge, EventRouter
from homelist.services.shopping_state import ShoppingListState
from homelist.utils.ui.console import get_console
from homelist.utils.ui.formatters import format_info, format_shopping_table, format_tasks_table

app = typer.Typer(
    name="homelist",
    help="Shared household task and shopping lists",
    no_args_is_help=True,
)

console = get_console()

app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(shopping.app, name="shopping", help="Shopping list commands")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information and API health."""
    console.print(f"[bold]Homelist[/bold] version [cyan]{__version__}[/cyan]")

    async def check_health() -> None:
        client = get_client()
        try:
            response = await client.request("GET", "/health", retry=0)
            console.print(f"[green]✓ API is healthy[/green] ({client.base_url})")
            server_version = response.json().get("version")
            if server_version and server_version != __version__:
                console.print(f"[yellow]⚠ Server runs version {server_version}[/yellow]")
        except httpx.HTTPError as e:
            console.print(f"[red]✗ API health check failed: {e}[/red]")
        finally:
            await client.close()

    asyncio.run(check_health())


@app.command()
@command_wrapper
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", help="Bind port"),
) -> None:
    """Run the task service."""
    import uvicorn

    from homelist.server import build_app

    config_service = get_config_service()
    server_config = config_service.config.server
    if not config_service.get_edit_secret():
        format_info("No edit secret configured; /api/tasks endpoints will reject every call")
    uvicorn.run(
        build_app(config_service),
        host=host or server_config.host,
        port=port or server_config.port,
        log_level="info",
    )


def _describe(event: RealtimeEvent) -> str:
    if isinstance(event, TaskEvent):
        return f"{event.name}: {event.task.title}"
    if isinstance(event, ShoppingEvent) and event.shopping_item is not None:
        return f"{event.name}: {event.shopping_item.name}"
    return event.name


@app.command()
@command_wrapper
async def watch(
    with_shopping: bool = typer.Option(False, "--shopping", help="Also follow the shopping list"),
    mine: bool = tasks.MineOption,
    tag: str | None = tasks.TagOption,
    task_type: str | None = tasks.TypeOption,
) -> None:
    """Follow the live task list until interrupted."""
    config = get_config_service().config
    shopping_state: ShoppingListState | None = None

    async with tasks.open_task_list(mine=mine, tag=tag, task_type=task_type) as task_list:
        if with_shopping:
            async with APIClient() as client, translate_errors():
                items = await ShoppingAPI(client).get_items()
            shopping_state = ShoppingListState(
                [ShoppingItem.model_validate(item) for item in items]
            )

        def render(event: RealtimeEvent) -> None:
            format_info(_describe(event))
            if isinstance(event, ShoppingEvent) and shopping_state is not None:
                format_shopping_table(shopping_state.items)
            else:
                format_tasks_table(task_list.visible, active_tag=task_list.filters.hashtag.get())

        format_tasks_table(task_list.visible, active_tag=task_list.filters.hashtag.get())
        format_info(f"Watching channel '{config.realtime.channel}' (Ctrl+C to stop)")

        async with APIClient() as client:
            bridge = EventBridge(
                client,
                config.realtime.channel,
                reconnect_delay=config.realtime.reconnect_delay,
            )
            router = EventRouter(task_list, shopping_state, on_change=render)
            await bridge.listen(router)


if __name__ == "__main__":
    app()
