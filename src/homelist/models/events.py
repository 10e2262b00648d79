"""Real-time event models.

Events travel over a channel as ``(name, payload)`` pairs. Task events carry
``{"task": {...}}``, shopping events carry ``{"shoppingItem": {...}}``. The
event name doubles as the discriminator of the ``RealtimeEvent`` union so a
subscriber can dispatch with ``match`` on the event class.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .core import ShoppingItem, Task


class _ChannelEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Wire payload without the event name."""
        return self.model_dump(mode="json", by_alias=True, exclude={"name"})


class TaskCreated(_ChannelEvent):
    name: Literal["task-created"] = "task-created"
    task: Task


class TaskUpdated(_ChannelEvent):
    name: Literal["task-updated", "api-task-updated"] = "task-updated"
    task: Task


class TaskDeleted(_ChannelEvent):
    name: Literal["task-deleted", "api-task-deleted"] = "task-deleted"
    task: Task


class ShoppingItemAdded(_ChannelEvent):
    name: Literal["new-shopping-item"] = "new-shopping-item"
    shopping_item: ShoppingItem = Field(alias="shoppingItem")


class ShoppingItemChecked(_ChannelEvent):
    name: Literal["shopping-item-checked"] = "shopping-item-checked"
    shopping_item: ShoppingItem = Field(alias="shoppingItem")


class ShoppingItemDeleted(_ChannelEvent):
    name: Literal["shopping-item-deleted"] = "shopping-item-deleted"
    shopping_item: ShoppingItem = Field(alias="shoppingItem")


class ShoppingItemQuantityUpdated(_ChannelEvent):
    name: Literal["shopping-item-quantityUpdate"] = "shopping-item-quantityUpdate"
    shopping_item: ShoppingItem = Field(alias="shoppingItem")


class ShoppingItemsCleared(_ChannelEvent):
    name: Literal["shopping-items-cleared"] = "shopping-items-cleared"
    shopping_item: ShoppingItem | None = Field(default=None, alias="shoppingItem")


TaskEvent = Union[TaskCreated, TaskUpdated, TaskDeleted]
ShoppingEvent = Union[
    ShoppingItemAdded,
    ShoppingItemChecked,
    ShoppingItemDeleted,
    ShoppingItemQuantityUpdated,
    ShoppingItemsCleared,
]

RealtimeEvent = Annotated[
    Union[
        TaskCreated,
        TaskUpdated,
        TaskDeleted,
        ShoppingItemAdded,
        ShoppingItemChecked,
        ShoppingItemDeleted,
        ShoppingItemQuantityUpdated,
        ShoppingItemsCleared,
    ],
    Field(discriminator="name"),
]

EVENT_NAMES = frozenset(
    {
        "task-created",
        "task-updated",
        "api-task-updated",
        "task-deleted",
        "api-task-deleted",
        "new-shopping-item",
        "shopping-item-checked",
        "shopping-item-deleted",
        "shopping-item-quantityUpdate",
        "shopping-items-cleared",
    }
)

_event_adapter: TypeAdapter[RealtimeEvent] = TypeAdapter(RealtimeEvent)


def parse_event(name: str, data: dict[str, Any] | None) -> RealtimeEvent | None:
    """Decode a named channel event into its typed model.

    Args:
        name: Event name as sent on the channel
        data: Event payload

    Returns:
        Typed event, or None when the name is not part of the taxonomy

    Raises:
        pydantic.ValidationError: If the payload does not match the event
    """
    if name not in EVENT_NAMES:
        return None
    return _event_adapter.validate_python({**(data or {}), "name": name})
