"""Task list reconciliation.

The reconciler owns the client-side task list and merges four independent
sources of change into it:

1. paginated fetches from the task repository,
2. optimistic local edits (status toggles, drag reorders),
3. real-time events pushed by other clients,
4. the filter state containers.

Filters are never patched incrementally: any change of author, type,
hashtag, edited-task overlay or base list re-derives the visible list from
the cached pages. Real-time events are applied to both the pages and the
visible list so the next re-derivation stays consistent with them.

All mutations run on the event loop that owns the reconciler. Failed remote
mutations are reported through the notifier and are neither retried nor
rolled back.
"""

from __future__ import annotations

from homelist.models import Task, TaskContentUpdate, TaskCreate, TaskPage
from homelist.models.events import RealtimeEvent, TaskCreated, TaskDeleted, TaskUpdated
from homelist.models.exceptions import HomelistError, InvalidInputError
from homelist.repositories import TaskRepository
from homelist.utils.logger import get_logger

from .filters import clean_hashtag
from .list_state import REFETCH_THRESHOLD, LocalListState
from .notifications import ConsoleNotifier, Notifier
from .state import FilterStates

PAGE_SIZE = 8
SCROLL_FETCH_THRESHOLD = 85


class TaskListReconciler:
    """Keeps the visible task list consistent with every source of change."""

    def __init__(
        self,
        repository: TaskRepository,
        *,
        filters: FilterStates | None = None,
        notifier: Notifier | None = None,
        current_user_id: str | None = None,
        page_size: int = PAGE_SIZE,
        refetch_threshold: int = REFETCH_THRESHOLD,
        scroll_fetch_threshold: float = SCROLL_FETCH_THRESHOLD,
    ):
        """Initialize the reconciler.

        Args:
            repository: Task repository used for fetches and mutations
            filters: Shared filter containers; a private set is created if omitted
            notifier: Receives success/failure messages of mutations
            current_user_id: Id compared against task authors by the "mine" filter
            page_size: Tasks requested per page
            refetch_threshold: Visible count under which a deletion triggers a refetch
            scroll_fetch_threshold: Scroll percentage that loads the next page
        """
        self.repository = repository
        self.filters = filters or FilterStates()
        self.notifier = notifier or ConsoleNotifier()
        self.current_user_id = current_user_id
        self.page_size = page_size
        self.scroll_fetch_threshold = scroll_fetch_threshold
        self.state = LocalListState(refetch_threshold)
        self.is_fetching = False
        self.deleting_id: str | None = None
        self.logger = get_logger("reconciliation")
        self._loaded = False
        self._refetch_pending = False
        self._unsubscribe = self.filters.subscribe_all(lambda _value: self.rederive())

    @property
    def visible(self) -> list[Task]:
        return self.state.visible

    @property
    def has_next_page(self) -> bool:
        return self._loaded and self.state.next_cursor is not None

    def close(self) -> None:
        """Stop listening to the filter containers."""
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def rederive(self) -> list[Task]:
        """Recompute the visible list from the cached pages and filters."""
        author_id = None
        if self.filters.author.get() == "mine":
            # without a session user nothing is "mine"
            author_id = self.current_user_id or ""
        return self.state.apply_filter(
            author_id=author_id,
            hashtag=self.filters.hashtag.get(),
            task_type=self.filters.task_type.get(),
            overlay=self.filters.updated_task.get(),
        )

    def toggle_hashtag(self, token: str) -> str | None:
        """Filter by a hashtag, or clear the filter when it is already active.

        Returns:
            The active hashtag after the toggle
        """
        cleaned = clean_hashtag(token)
        current = self.filters.hashtag.get()
        if current is not None and clean_hashtag(current) == cleaned:
            self.filters.hashtag.set(None)
        else:
            self.filters.hashtag.set(cleaned)
        return self.filters.hashtag.get()

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def load(self) -> list[Task]:
        """Fetch the first page, replacing anything cached."""
        if self.is_fetching:
            return self.visible
        self.is_fetching = True
        try:
            page = await self.repository.list_page(self.page_size)
        except HomelistError as e:
            self.notifier.error("Error", e.message)
            page = None
        finally:
            self.is_fetching = False

        if page is not None:
            self.state.apply_fetched_pages([page])
            self._loaded = True
            self.rederive()
        await self._run_pending_refetch()
        return self.visible

    async def fetch_next_page(self) -> bool:
        """Append the next page if one exists and no fetch is in flight.

        Returns:
            True if a page was fetched
        """
        if self.is_fetching or not self.has_next_page:
            return False

        self.is_fetching = True
        try:
            page = await self.repository.list_page(self.page_size, self.state.next_cursor)
        except HomelistError as e:
            self.notifier.error("Error", e.message)
            page = None
        finally:
            self.is_fetching = False

        if page is not None:
            self.state.append_page(page)
            self.logger.debug("fetched page %d (%d tasks)", len(self.state.pages), len(page.items))
            self.rederive()
        await self._run_pending_refetch()
        return page is not None

    async def refetch(self) -> bool:
        """Reload as many pages as are currently cached.

        Returns:
            True if the refetch ran. While another fetch is in flight the
            refetch is deferred until that fetch finishes and False is returned.
        """
        if self.is_fetching:
            self._refetch_pending = True
            return False

        page_count = max(1, len(self.state.pages))
        pages: list[TaskPage] = []
        cursor: str | None = None
        self.is_fetching = True
        try:
            for _ in range(page_count):
                page = await self.repository.list_page(self.page_size, cursor)
                pages.append(page)
                cursor = page.next_cursor
                if cursor is None:
                    break
        except HomelistError as e:
            self.notifier.error("Error", e.message)
            pages = []
        finally:
            self.is_fetching = False

        if pages:
            self.logger.debug("refetched %d page(s)", len(pages))
            self.state.apply_fetched_pages(pages)
            self._loaded = True
            self.rederive()
        await self._run_pending_refetch()
        return bool(pages)

    async def _run_pending_refetch(self) -> None:
        if self._refetch_pending:
            self._refetch_pending = False
            await self.refetch()

    async def on_scroll(self, scroll_percent: float) -> bool:
        """Load the next page once the view is scrolled past the threshold."""
        if (
            scroll_percent > self.scroll_fetch_threshold
            and self.has_next_page
            and not self.is_fetching
        ):
            return await self.fetch_next_page()
        return False

    # ------------------------------------------------------------------
    # Real-time events
    # ------------------------------------------------------------------

    def handle_event(self, event: RealtimeEvent) -> bool:
        """Apply a task event to the pages and the visible list.

        Returns:
            True if the list dropped under the low-water mark
        """
        match event:
            case TaskCreated(task=task):
                if self.state.find(task.id) is not None:
                    self.state.apply_replace(task)
                else:
                    self.state.apply_insert_front(task)
                return False
            case TaskUpdated(task=task):
                self.state.apply_replace(task)
                return False
            case TaskDeleted(task=task):
                return self.state.apply_remove(task.id)
            case _:
                return False

    async def dispatch(self, event: RealtimeEvent) -> None:
        """Apply an event, refetching when too few tasks remain."""
        self.logger.debug("event %s", event.name)
        if self.handle_event(event):
            await self.refetch()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_task(
        self, title: str, *, description: str = "", task_type: str | None = None
    ) -> Task | None:
        """Create a task and show it at the top once the server confirms it."""
        task_data = TaskCreate(
            title=title,
            description=description,
            type=task_type or self.filters.task_type.get() or "task",
            author_id=self.current_user_id,
        )
        try:
            task = await self.repository.add(task_data)
        except HomelistError as e:
            self.notifier.error("Error", e.message)
            return None

        # the task-created event for this task becomes a replace, not a duplicate
        self.state.apply_insert_front(task)
        self.notifier.success("Task created", f"'{task.title}' has been added")
        return task

    async def toggle_status(self, task_id: str) -> Task | None:
        """Flip a task's completion flag optimistically, then persist it."""
        if not task_id:
            raise InvalidInputError("Invalid id")
        task = self.state.find(task_id)
        if task is None:
            return None

        completed = not task.completed
        self.state.apply_patch(task_id, {"completed": completed})
        try:
            updated = await self.repository.update_status(task_id, completed)
        except HomelistError as e:
            self.notifier.error("Error", e.message)
            return None

        self.state.apply_patch(task_id, {"completed": updated.completed})
        return updated

    async def edit_task(
        self, task_id: str, *, title: str | None = None, description: str | None = None
    ) -> Task | None:
        """Update title/description and overlay the result on the list."""
        if not task_id:
            raise InvalidInputError("Invalid id")
        try:
            updated = await self.repository.update_content(
                task_id, TaskContentUpdate(title=title, description=description)
            )
        except HomelistError as e:
            self.notifier.error("Error", e.message)
            return None

        self.state.apply_replace(updated)
        self.filters.updated_task.set(updated)
        return updated

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task; it leaves the list once the server confirms.

        Returns:
            True if the task was deleted
        """
        if not task_id:
            raise InvalidInputError("Invalid id")

        self.deleting_id = task_id
        try:
            await self.repository.delete(task_id)
        except HomelistError as e:
            self.logger.warning("delete of %s failed: %s", task_id, e.message)
            self.notifier.error("Error", e.message)
            return False
        finally:
            self.deleting_id = None

        if self.state.apply_remove(task_id):
            await self.refetch()
        return True
