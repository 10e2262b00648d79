"""Observable state containers for shared view state.

Each piece of shared view state (author filter, selected type, hashtag,
last edited task) lives in its own container that is created by the caller
and handed to the components that read or write it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, Literal, TypeVar

from homelist.models import Task

T = TypeVar("T")

AuthorFilter = Literal["all", "mine"]


class StateContainer(Generic[T]):
    """Single value with change notification.

    ``set`` notifies subscribers synchronously, and only when the value
    actually changes.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: list[Callable[[T], None]] = []

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a change callback.

        Returns:
            Function removing the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe


@dataclass
class FilterStates:
    """The view state the task list is derived from."""

    author: StateContainer[AuthorFilter] = field(
        default_factory=lambda: StateContainer[AuthorFilter]("all")
    )
    task_type: StateContainer[str | None] = field(
        default_factory=lambda: StateContainer[str | None](None)
    )
    hashtag: StateContainer[str | None] = field(
        default_factory=lambda: StateContainer[str | None](None)
    )
    updated_task: StateContainer[Task | None] = field(
        default_factory=lambda: StateContainer[Task | None](None)
    )

    def subscribe_all(self, callback: Callable[[object], None]) -> Callable[[], None]:
        """Subscribe one callback to every container."""
        unsubscribers = [
            self.author.subscribe(callback),
            self.task_type.subscribe(callback),
            self.hashtag.subscribe(callback),
            self.updated_task.subscribe(callback),
        ]

        def unsubscribe() -> None:
            for unsub in unsubscribers:
                unsub()

        return unsubscribe
