"""Shopping list API endpoints.

Client side of the catalog ("pattern") and shopping-list ("item") routers.
Mutations of list items are broadcast on the household channel as shopping
events by the server.
"""

from typing import Any

from homelist.services.api.client import APIClient


class CatalogAPI:
    """Catalog of known items and their categories."""

    def __init__(self, client: APIClient):
        self.client = client

    async def get_categories(self) -> list[dict]:
        response = await self.client.get("/v1/shopping/categories")
        return response.json()

    async def create_category(self, name: str) -> dict:
        response = await self.client.post("/v1/shopping/categories", json={"name": name})
        return response.json()

    async def search(self, search_term: str) -> list[dict]:
        response = await self.client.get(
            "/v1/shopping/catalog", params={"search": search_term}
        )
        return response.json()

    async def get_items_not_on_list(self) -> list[dict]:
        """Catalog items not currently on the shopping list, heaviest first."""
        response = await self.client.get(
            "/v1/shopping/catalog", params={"exclude_listed": True}
        )
        return response.json()

    async def create_item(
        self,
        name: str,
        category_id: int,
        *,
        quantity: float = 1,
        add_to_list: bool = False,
    ) -> dict:
        """Add an item to the catalog, optionally putting it on the list too."""
        data: dict[str, Any] = {
            "create_new_shopping_item": add_to_list,
            "item": {"name": name, "category_id": category_id, "quantity": quantity},
        }
        response = await self.client.post("/v1/shopping/catalog", json=data)
        return response.json()

    async def set_item_weight(self, item_id: int, weight: float) -> dict:
        response = await self.client.patch(
            f"/v1/shopping/catalog/{item_id}", json={"weight": weight}
        )
        return response.json()

    async def set_item_price(self, item_id: int, price: float) -> dict:
        response = await self.client.patch(
            f"/v1/shopping/catalog/{item_id}", json={"price": price}
        )
        return response.json()

    async def reset_weights(self) -> None:
        await self.client.post("/v1/shopping/catalog/reset-weights")

    async def delete_item(self, item_id: int) -> dict:
        response = await self.client.delete(f"/v1/shopping/catalog/{item_id}")
        return response.json()


class ShoppingAPI:
    """Items currently on the shared shopping list."""

    def __init__(self, client: APIClient):
        self.client = client

    async def get_items(self, *, sort_by_weight: bool = True) -> list[dict]:
        params = {"sort": "weight"} if sort_by_weight else None
        response = await self.client.get("/v1/shopping/items", params=params)
        return response.json()

    async def add_item(self, catalog_item_id: int, quantity: float = 1) -> dict:
        """Put a catalog item on the list (bumps its weight)."""
        response = await self.client.post(
            "/v1/shopping/items", json={"id": catalog_item_id, "quantity": quantity}
        )
        return response.json()

    async def check_item(self, item_id: int, checked: bool) -> dict:
        response = await self.client.patch(
            f"/v1/shopping/items/{item_id}", json={"checked": checked}
        )
        return response.json()

    async def update_quantity(self, item_id: int, quantity: float) -> dict:
        response = await self.client.patch(
            f"/v1/shopping/items/{item_id}", json={"quantity": quantity}
        )
        return response.json()

    async def mark_all_checked(self) -> None:
        await self.client.post("/v1/shopping/items/check-all")

    async def delete_item(self, item_id: int) -> dict:
        response = await self.client.delete(f"/v1/shopping/items/{item_id}")
        return response.json()

    async def clear_items(self) -> None:
        await self.client.delete("/v1/shopping/items")
