"""Client-side shopping list kept in sync by shopping events."""

from __future__ import annotations

from homelist.models import ShoppingItem
from homelist.models.events import (
    RealtimeEvent,
    ShoppingItemAdded,
    ShoppingItemChecked,
    ShoppingItemDeleted,
    ShoppingItemQuantityUpdated,
    ShoppingItemsCleared,
)


class ShoppingListState:
    """Ordered shopping items; unknown ids in events are ignored."""

    def __init__(self, items: list[ShoppingItem] | None = None):
        self.items: list[ShoppingItem] = list(items or [])

    def replace_all(self, items: list[ShoppingItem]) -> None:
        self.items = list(items)

    def _index(self, item_id: int) -> int | None:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None

    def _patch(self, item: ShoppingItem, **fields: object) -> bool:
        index = self._index(item.id)
        if index is None:
            return False
        self.items[index] = self.items[index].model_copy(update=fields)
        return True

    def handle_event(self, event: RealtimeEvent) -> bool:
        """Apply a shopping event.

        Returns:
            True if the list changed
        """
        match event:
            case ShoppingItemAdded(shopping_item=item):
                if self._index(item.id) is not None:
                    return False
                self.items.append(item)
                return True
            case ShoppingItemChecked(shopping_item=item):
                return self._patch(item, checked=item.checked)
            case ShoppingItemQuantityUpdated(shopping_item=item):
                return self._patch(item, quantity=item.quantity)
            case ShoppingItemDeleted(shopping_item=item):
                index = self._index(item.id)
                if index is None:
                    return False
                del self.items[index]
                return True
            case ShoppingItemsCleared():
                changed = bool(self.items)
                self.items = []
                return changed
            case _:
                return False
