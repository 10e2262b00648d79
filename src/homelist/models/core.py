"""Task and shopping data models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

SHOPPING_TYPE = "shopping"
DEFAULT_TASK_TYPE = "task"


class Task(BaseModel):
    """Task model representing a complete task entity.

    Attributes:
        id: Unique, stable identifier
        title: Free text, may embed hashtag tokens ("#word", "#word-suffix")
        description: Optional longer text
        completed: Completion flag
        author_id: Identifier of the user who created the task
        type: Type tag ("task", "note", "shopping", ...)
        position: Sort key; higher positions are displayed first
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    title: str
    description: str = ""
    completed: bool = False
    author_id: str | None = None
    type: str = DEFAULT_TASK_TYPE
    position: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TaskCreate(BaseModel):
    """Model for creating a new task.

    Position is assigned by the server.
    """

    title: str = Field(min_length=1)
    description: str = ""
    type: str = DEFAULT_TASK_TYPE
    author_id: str | None = None


class TaskContentUpdate(BaseModel):
    """Title/description patch accepted by the external edit endpoint."""

    title: str | None = None
    description: str | None = None


class TaskStatusUpdate(BaseModel):
    completed: bool


class TaskPositionUpdate(BaseModel):
    position: float


class TaskPage(BaseModel):
    """One page of the paginated task listing.

    Attributes:
        items: Tasks ordered by position descending
        next_cursor: Opaque boundary of the following page, if any
    """

    model_config = ConfigDict(populate_by_name=True)

    items: list[Task] = Field(default_factory=list)
    next_cursor: str | None = Field(default=None, alias="nextCursor")


class Category(BaseModel):
    id: int
    name: str


class CatalogItem(BaseModel):
    """Catalog entry a shopping item is created from.

    Weight grows every time the item is added to the list and drives the
    ordering of the shopping list.
    """

    id: int
    name: str
    category_id: int | None = None
    weight: float = 1
    price: float = 0


class ShoppingItem(BaseModel):
    """Item currently on the shared shopping list."""

    id: int
    name: str
    quantity: float = 1
    category_id: int | None = None
    checked: bool = False
    price: float = 0
