"""Tests for TaskListReconciler."""

import asyncio

import pytest
from conftest import InMemoryTaskRepository, make_task

from homelist.models.events import TaskCreated, TaskDeleted, TaskUpdated
from homelist.models.exceptions import InvalidInputError, RemoteMutationError
from homelist.repositories import encode_cursor
from homelist.services.reconciliation import TaskListReconciler
from homelist.services.state import FilterStates


def _tasks(count: int, **fields):
    return [make_task(f"t{i}", 10_000 - i * 10, **fields) for i in range(count)]


def ids(tasks) -> list[str]:
    return [t.id for t in tasks]


def _reconciler(repo, notifier, **kwargs) -> TaskListReconciler:
    kwargs.setdefault("page_size", 8)
    return TaskListReconciler(repo, notifier=notifier, **kwargs)


class GatedRepository(InMemoryTaskRepository):
    """Fetches and status updates wait on a gate so they can be held in flight."""

    def __init__(self, tasks):
        super().__init__(tasks)
        self.gate = asyncio.Event()
        self.gate.set()

    async def list_page(self, limit, cursor=None):
        await self.gate.wait()
        return await super().list_page(limit, cursor)

    async def update_status(self, task_id, completed):
        await self.gate.wait()
        return await super().update_status(task_id, completed)


class TestFetching:
    @pytest.mark.asyncio
    async def test_load_fetches_first_page(self, notifier):
        repo = InMemoryTaskRepository(_tasks(12))
        reconciler = _reconciler(repo, notifier)

        visible = await reconciler.load()

        assert ids(visible) == [f"t{i}" for i in range(8)]
        assert reconciler.has_next_page
        assert repo.calls == [("list_page", 8, None)]

    @pytest.mark.asyncio
    async def test_scroll_past_threshold_loads_next_page(self, notifier):
        repo = InMemoryTaskRepository(_tasks(12))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()

        assert await reconciler.on_scroll(50) is False
        assert await reconciler.on_scroll(85) is False
        assert await reconciler.on_scroll(90) is True

        assert len(reconciler.visible) == 12
        assert not reconciler.has_next_page
        assert await reconciler.on_scroll(99) is False
        assert repo.count("list_page") == 2

    @pytest.mark.asyncio
    async def test_scroll_while_fetching_is_ignored(self, notifier):
        repo = GatedRepository(_tasks(12))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()

        repo.gate.clear()
        first = asyncio.create_task(reconciler.on_scroll(95))
        await asyncio.sleep(0)
        second = await reconciler.on_scroll(95)
        repo.gate.set()

        assert second is False
        assert await first is True
        assert repo.count("list_page") == 2

    @pytest.mark.asyncio
    async def test_refetch_reloads_cached_page_count(self, notifier):
        repo = InMemoryTaskRepository(_tasks(20))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()
        await reconciler.fetch_next_page()
        repo.calls.clear()

        assert await reconciler.refetch() is True

        assert repo.calls == [
            ("list_page", 8, None),
            ("list_page", 8, encode_cursor(repo.tasks[8])),
        ]
        assert len(reconciler.visible) == 16

    @pytest.mark.asyncio
    async def test_fetch_failure_is_notified(self, notifier):
        repo = InMemoryTaskRepository(_tasks(3))
        repo.fail_list_with = RemoteMutationError("service down")
        reconciler = _reconciler(repo, notifier)

        assert await reconciler.load() == []
        assert notifier.errors == [("Error", "service down")]
        assert not reconciler.is_fetching


class TestFilters:
    @pytest.mark.asyncio
    async def test_filter_change_rederives_from_base(self, notifier):
        tasks = [
            make_task("1", 30, title="#home sweep", author_id="me"),
            make_task("2", 20, title="#work mail", author_id="you"),
            make_task("3", 10, title="#home dust", author_id="you", type="note"),
        ]
        filters = FilterStates()
        reconciler = _reconciler(
            InMemoryTaskRepository(tasks), notifier, filters=filters, current_user_id="me"
        )
        await reconciler.load()

        filters.hashtag.set("home")
        assert ids(reconciler.visible) == ["1", "3"]

        filters.author.set("mine")
        assert ids(reconciler.visible) == ["1"]

        filters.author.set("all")
        filters.task_type.set("note")
        assert ids(reconciler.visible) == ["3"]

        filters.hashtag.set(None)
        filters.task_type.set(None)
        assert ids(reconciler.visible) == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_mine_without_user_matches_nothing(self, notifier):
        filters = FilterStates()
        reconciler = _reconciler(
            InMemoryTaskRepository(_tasks(3, author_id="someone")), notifier, filters=filters
        )
        await reconciler.load()

        filters.author.set("mine")

        assert reconciler.visible == []

    @pytest.mark.asyncio
    async def test_toggle_hashtag_twice_clears_filter(self, notifier):
        tasks = [make_task("1", 2, title="#a x"), make_task("2", 1, title="#b y")]
        reconciler = _reconciler(InMemoryTaskRepository(tasks), notifier)
        await reconciler.load()

        assert reconciler.toggle_hashtag("#a") == "a"
        assert ids(reconciler.visible) == ["1"]
        assert reconciler.toggle_hashtag("a") is None
        assert ids(reconciler.visible) == ["1", "2"]

    @pytest.mark.asyncio
    async def test_close_stops_rederiving(self, notifier):
        filters = FilterStates()
        reconciler = _reconciler(InMemoryTaskRepository(_tasks(2)), notifier, filters=filters)
        await reconciler.load()

        reconciler.close()
        filters.task_type.set("note")

        assert len(reconciler.visible) == 2


class TestEvents:
    @pytest.mark.asyncio
    async def test_created_event_prepends(self, notifier):
        reconciler = _reconciler(InMemoryTaskRepository(_tasks(3)), notifier)
        await reconciler.load()

        await reconciler.dispatch(TaskCreated(task=make_task("new", 99_999)))

        assert ids(reconciler.visible)[0] == "new"
        assert ids(reconciler.state.base)[0] == "new"

    @pytest.mark.asyncio
    async def test_created_event_prepends_while_fetch_in_flight(self, notifier):
        repo = GatedRepository(_tasks(12))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()

        repo.gate.clear()
        fetch = asyncio.create_task(reconciler.fetch_next_page())
        await asyncio.sleep(0)
        assert reconciler.is_fetching

        await reconciler.dispatch(TaskCreated(task=make_task("new", 99_999)))
        assert ids(reconciler.visible)[0] == "new"

        repo.gate.set()
        await fetch
        assert ids(reconciler.visible)[0] == "new"

    @pytest.mark.asyncio
    async def test_created_event_for_known_task_replaces(self, notifier):
        reconciler = _reconciler(InMemoryTaskRepository(_tasks(3)), notifier)
        await reconciler.load()

        await reconciler.dispatch(TaskCreated(task=make_task("t1", 1, title="again")))

        assert len(reconciler.visible) == 3
        assert reconciler.visible[1].title == "again"

    @pytest.mark.asyncio
    async def test_updated_event_replaces_in_place(self, notifier):
        reconciler = _reconciler(InMemoryTaskRepository(_tasks(3)), notifier)
        await reconciler.load()
        updated = reconciler.visible[1].model_copy(update={"completed": True})

        await reconciler.dispatch(TaskUpdated(name="api-task-updated", task=updated))

        assert reconciler.visible[1].completed
        assert ids(reconciler.visible) == ["t0", "t1", "t2"]

    @pytest.mark.asyncio
    async def test_unknown_id_events_are_noops(self, notifier):
        repo = InMemoryTaskRepository(_tasks(3))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()
        before = list(reconciler.visible)

        await reconciler.dispatch(TaskUpdated(task=make_task("ghost", 5)))
        await reconciler.dispatch(TaskDeleted(task=make_task("ghost", 5)))

        assert reconciler.visible == before
        assert repo.count("list_page") == 1

    @pytest.mark.asyncio
    async def test_low_water_mark_triggers_exactly_one_refetch(self, notifier):
        repo = InMemoryTaskRepository(_tasks(6))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()

        for task_id in ("t0", "t1"):
            deleted = await repo.delete(task_id)
            await reconciler.dispatch(TaskDeleted(task=deleted))

        # 6 -> 5 stays above the mark, 5 -> 4 refetches once
        assert repo.count("list_page") == 2
        assert ids(reconciler.visible) == ["t2", "t3", "t4", "t5"]

    @pytest.mark.asyncio
    async def test_low_water_during_fetch_refetches_afterwards(self, notifier):
        repo = GatedRepository(_tasks(12))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()

        repo.gate.clear()
        fetch = asyncio.create_task(reconciler.fetch_next_page())
        await asyncio.sleep(0)
        assert reconciler.is_fetching

        for task_id in ("t0", "t1", "t2", "t3"):
            deleted = await repo.delete(task_id)
            await reconciler.dispatch(TaskDeleted(task=deleted))
        assert repo.count("list_page") == 2

        repo.gate.set()
        assert await fetch is True

        assert repo.count("list_page") == 3
        assert repo.calls[-1] == ("list_page", 8, None)
        assert ids(reconciler.visible) == [f"t{i}" for i in range(4, 12)]
        assert not reconciler.is_fetching

    @pytest.mark.asyncio
    async def test_deleting_first_task_of_next_page_keeps_scrolling(self, notifier):
        repo = InMemoryTaskRepository(_tasks(12))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()

        deleted = await repo.delete("t8")
        await reconciler.dispatch(TaskDeleted(task=deleted))

        assert await reconciler.on_scroll(90) is True
        assert ids(reconciler.visible) == [f"t{i}" for i in range(12) if i != 8]
        assert notifier.errors == []


class TestMutations:
    @pytest.mark.asyncio
    async def test_create_task_inserts_after_confirmation(self, notifier):
        repo = InMemoryTaskRepository(_tasks(2))
        reconciler = _reconciler(repo, notifier, current_user_id="me")
        await reconciler.load()

        task = await reconciler.create_task("Buy #grocery milk")

        assert reconciler.visible[0].id == task.id
        assert task.author_id == "me"
        # the echo of our own creation does not duplicate it
        await reconciler.dispatch(TaskCreated(task=task))
        assert ids(reconciler.visible).count(task.id) == 1

    @pytest.mark.asyncio
    async def test_create_task_uses_selected_type(self, notifier):
        filters = FilterStates()
        filters.task_type.set("shopping")
        repo = InMemoryTaskRepository()
        reconciler = _reconciler(repo, notifier, filters=filters)

        task = await reconciler.create_task("Eggs")

        assert task.type == "shopping"

    @pytest.mark.asyncio
    async def test_toggle_status_is_optimistic(self, notifier):
        repo = GatedRepository(_tasks(2))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()

        repo.gate.clear()
        pending = asyncio.create_task(reconciler.toggle_status("t0"))
        await asyncio.sleep(0)
        assert reconciler.visible[0].completed
        assert repo.count("update_status") == 0

        repo.gate.set()
        updated = await pending
        assert updated.completed
        assert ("update_status", "t0", True) in repo.calls

    @pytest.mark.asyncio
    async def test_toggle_status_failure_is_not_rolled_back(self, notifier):
        repo = InMemoryTaskRepository(_tasks(2))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()
        repo.fail_with = RemoteMutationError("boom")

        assert await reconciler.toggle_status("t0") is None

        assert reconciler.visible[0].completed
        assert notifier.errors == [("Error", "boom")]

    @pytest.mark.asyncio
    async def test_toggle_status_rejects_empty_id(self, notifier):
        reconciler = _reconciler(InMemoryTaskRepository(), notifier)

        with pytest.raises(InvalidInputError):
            await reconciler.toggle_status("")

    @pytest.mark.asyncio
    async def test_edit_task_sets_overlay(self, notifier):
        filters = FilterStates()
        repo = InMemoryTaskRepository(_tasks(2))
        reconciler = _reconciler(repo, notifier, filters=filters)
        await reconciler.load()

        updated = await reconciler.edit_task("t1", title="renamed")

        assert filters.updated_task.get() == updated
        assert reconciler.visible[1].title == "renamed"

    @pytest.mark.asyncio
    async def test_delete_removes_on_confirmation(self, notifier):
        repo = InMemoryTaskRepository(_tasks(8))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()

        assert await reconciler.delete_task("t3") is True

        assert "t3" not in ids(reconciler.visible)
        assert reconciler.deleting_id is None
        assert repo.count("list_page") == 1

    @pytest.mark.asyncio
    async def test_delete_failure_keeps_task(self, notifier):
        repo = InMemoryTaskRepository(_tasks(3))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()
        repo.fail_with = RemoteMutationError("nope")

        assert await reconciler.delete_task("t0") is False

        assert "t0" in ids(reconciler.visible)
        assert notifier.errors == [("Error", "nope")]
        assert reconciler.deleting_id is None

    @pytest.mark.asyncio
    async def test_delete_under_low_water_refetches(self, notifier):
        repo = InMemoryTaskRepository(_tasks(5))
        reconciler = _reconciler(repo, notifier)
        await reconciler.load()

        await reconciler.delete_task("t0")

        assert repo.count("list_page") == 2
