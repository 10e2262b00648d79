"""Shopping list commands."""

import typer

from homelist.adapters.rest_api import translate_errors
from homelist.models import CatalogItem, ShoppingItem
from homelist.services.api.client import APIClient
from homelist.services.api.shopping import CatalogAPI, ShoppingAPI
from homelist.utils.ui.formatters import format_output, format_shopping_table, format_success

from .decorators import command_wrapper

app = typer.Typer(
    help=(
        "Shared shopping list commands. These talk to an external shopping service "
        "exposing /v1/shopping/* at the configured API URL; `homelist serve` does not "
        "provide it."
    )
)


@app.command("list")
@command_wrapper
async def list_items(
    output: str = typer.Option("table", "--output", "-o", help="table, json or yaml"),
) -> None:
    """Show the shopping list, most frequently bought first."""
    async with APIClient() as client:
        async with translate_errors():
            data = await ShoppingAPI(client).get_items()
    items = [ShoppingItem.model_validate(item) for item in data]
    if output == "table":
        format_shopping_table(items)
    else:
        format_output([item.model_dump() for item in items], output)


@app.command("add")
@command_wrapper
async def add_item(
    name: str = typer.Argument(..., help="Catalog item name"),
    quantity: float = typer.Option(1, "--quantity", "-q", help="Quantity"),
) -> None:
    """Put a catalog item on the shopping list."""
    async with APIClient() as client:
        async with translate_errors():
            matches = [
                CatalogItem.model_validate(item)
                for item in await CatalogAPI(client).search(name)
            ]
            exact = [item for item in matches if item.name.lower() == name.lower()]
            if not exact:
                format_output([item.name for item in matches] or f"No catalog item named '{name}'")
                raise typer.Exit(1)
            await ShoppingAPI(client).add_item(exact[0].id, quantity)
    format_success(f"Added {quantity:g} x {exact[0].name}")


@app.command("check")
@command_wrapper
async def check_item(
    item_id: int = typer.Argument(..., help="Shopping item id"),
    uncheck: bool = typer.Option(False, "--uncheck", help="Mark as not bought"),
) -> None:
    """Mark an item as bought."""
    async with APIClient() as client:
        async with translate_errors():
            await ShoppingAPI(client).check_item(item_id, not uncheck)
    format_success(f"Item {item_id} {'unchecked' if uncheck else 'checked'}")


@app.command("quantity")
@command_wrapper
async def set_quantity(
    item_id: int = typer.Argument(..., help="Shopping item id"),
    quantity: float = typer.Argument(..., help="New quantity"),
) -> None:
    """Change how many of an item to buy."""
    async with APIClient() as client:
        async with translate_errors():
            await ShoppingAPI(client).update_quantity(item_id, quantity)
    format_success(f"Item {item_id} quantity set to {quantity:g}")


@app.command("remove")
@command_wrapper
async def remove_item(
    item_id: int = typer.Argument(..., help="Shopping item id"),
) -> None:
    """Take an item off the list."""
    async with APIClient() as client:
        async with translate_errors():
            await ShoppingAPI(client).delete_item(item_id)
    format_success(f"Item {item_id} removed")


@app.command("clear")
@command_wrapper
async def clear_items(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Remove every item from the list."""
    if not yes and not typer.confirm("Clear the whole shopping list?"):
        raise typer.Exit(0)
    async with APIClient() as client:
        async with translate_errors():
            await ShoppingAPI(client).clear_items()
    format_success("Shopping list cleared")
