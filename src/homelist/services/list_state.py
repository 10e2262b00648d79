"""Client-held task list state.

Two views are kept side by side:

- ``pages``: the fetched pages, in arrival order. Mutated in place on
  insertions and deletions so that a later re-derivation does not resurrect
  removed tasks or drop created ones.
- ``visible``: the filtered list backing the rendered view.

Every mutation is synchronous and total: unknown ids degrade to no-ops.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from homelist.models import Task, TaskPage

from .filters import filter_tasks

REFETCH_THRESHOLD = 5


class LocalListState:
    """Ordered cache of task pages plus the derived visible list."""

    def __init__(self, refetch_threshold: int = REFETCH_THRESHOLD):
        self.refetch_threshold = refetch_threshold
        self.pages: list[TaskPage] = []
        self.visible: list[Task] = []

    @property
    def base(self) -> list[Task]:
        """All cached tasks, pages flattened in arrival order."""
        return [task for page in self.pages for task in page.items]

    @property
    def next_cursor(self) -> str | None:
        if not self.pages:
            return None
        return self.pages[-1].next_cursor

    def find(self, task_id: str) -> Task | None:
        for task in self.visible:
            if task.id == task_id:
                return task
        for task in self.base:
            if task.id == task_id:
                return task
        return None

    def apply_fetched_pages(self, pages: Iterable[TaskPage]) -> None:
        """Replace the cached pages; the visible list is re-derived separately."""
        self.pages = [page.model_copy(update={"items": list(page.items)}) for page in pages]

    def append_page(self, page: TaskPage) -> None:
        self.pages.append(page.model_copy(update={"items": list(page.items)}))

    def apply_filter(
        self,
        author_id: str | None = None,
        hashtag: str | None = None,
        task_type: str | None = None,
        overlay: Task | None = None,
    ) -> list[Task]:
        """Derive the visible list from the base list.

        Args:
            author_id: Keep only tasks by this author (None keeps all)
            hashtag: Keep only tasks tagged with this hashtag
            task_type: Keep only tasks of this type
            overlay: Locally edited record replacing its stale copy

        Returns:
            The new visible list
        """
        visible = filter_tasks(
            self.base, author_id=author_id, hashtag=hashtag, task_type=task_type
        )
        if overlay is not None:
            visible = [overlay if t.id == overlay.id else t for t in visible]
        self.visible = visible
        return visible

    def apply_patch(self, task_id: str, fields: dict[str, Any]) -> bool:
        """Merge fields into the matching task in pages and visible list.

        Returns:
            True if the task was found anywhere
        """
        found = False
        for page in self.pages:
            for index, task in enumerate(page.items):
                if task.id == task_id:
                    page.items[index] = task.model_copy(update=fields)
                    found = True
        for index, task in enumerate(self.visible):
            if task.id == task_id:
                self.visible[index] = task.model_copy(update=fields)
                found = True
        return found

    def apply_replace(self, task: Task) -> bool:
        """Swap in a full server record for the task with the same id."""
        return self.apply_patch(task.id, task.model_dump())

    def apply_insert_front(self, task: Task) -> None:
        if self.pages:
            self.pages[0].items.insert(0, task)
        else:
            self.pages.append(TaskPage(items=[task]))
        self.visible.insert(0, task)

    def apply_remove(self, task_id: str) -> bool:
        """Remove a task from pages and the visible list.

        Returns:
            True when a task was removed and fewer than ``refetch_threshold``
            tasks remain visible, i.e. a refetch is needed
        """
        removed = False
        for page in self.pages:
            kept = [t for t in page.items if t.id != task_id]
            if len(kept) != len(page.items):
                page.items = kept
                removed = True

        kept_visible = [t for t in self.visible if t.id != task_id]
        if len(kept_visible) != len(self.visible):
            self.visible = kept_visible
            removed = True

        return removed and len(self.visible) < self.refetch_threshold

    def move(self, source_index: int, destination_index: int) -> Task | None:
        """Splice a task from one visible index to another.

        Returns:
            The moved task, or None when either index is out of range
        """
        size = len(self.visible)
        if not (0 <= source_index < size and 0 <= destination_index < size):
            return None
        task = self.visible.pop(source_index)
        self.visible.insert(destination_index, task)
        return task
