"""Drag-and-drop reorder of the visible task list.

A drop is applied locally first (splice move plus new position on the moved
task), then persisted. A failed persist is reported and the local order is
kept as-is until the next fetch or event corrects it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from homelist.models.exceptions import HomelistError
from homelist.utils.logger import get_logger

from .position_allocator import allocate
from .reconciliation import TaskListReconciler

DragPhase = Literal["idle", "dragging", "dropped-valid", "dropped-no-op"]

TASKS_CONTAINER = "tasks"


@dataclass
class DropResult:
    """Outcome of a drag gesture.

    Attributes:
        draggable_id: Id of the dragged task
        source_index: Visible index the task was picked up from
        destination_index: Visible index it was dropped at; None if dropped
            outside any container
        source_container: Container the drag started in
        destination_container: Container the drag ended in
    """

    draggable_id: str
    source_index: int
    destination_index: int | None
    source_container: str = TASKS_CONTAINER
    destination_container: str | None = TASKS_CONTAINER


class DragController:
    """Idle -> Dragging -> Dropped-valid | Dropped-no-op."""

    def __init__(self, reconciler: TaskListReconciler):
        self.reconciler = reconciler
        self.phase: DragPhase = "idle"
        self.dragging_id: str | None = None
        self.logger = get_logger("drag")

    def start(self, task_id: str) -> None:
        self.phase = "dragging"
        self.dragging_id = task_id

    def _no_op(self) -> None:
        self.phase = "dropped-no-op"
        self.dragging_id = None

    async def drop(self, result: DropResult) -> float | None:
        """Apply a drop.

        Returns:
            The new position when a persist request was issued, else None
        """
        if result.destination_index is None:
            self._no_op()
            return None
        if (
            result.destination_container == result.source_container
            and result.destination_index == result.source_index
        ):
            self._no_op()
            return None

        state = self.reconciler.state
        before = list(state.visible)
        source, destination = result.source_index, result.destination_index
        if not (0 <= source < len(before)) or before[source].id != result.draggable_id:
            self._no_op()
            return None

        task = state.move(source, destination)
        if task is None:
            self._no_op()
            return None

        after = state.visible
        prev_position = after[destination - 1].position if destination > 0 else None
        next_position = (
            after[destination + 1].position if destination + 1 < len(after) else None
        )
        is_first = destination == 0
        is_last = destination == len(after) - 1
        if is_last and destination > 0:
            # the bound below the last slot is the last remaining task
            next_position = after[destination - 1].position

        new_position = allocate(
            prev_position,
            next_position,
            is_first,
            is_last,
            displaced_position=before[destination].position,
        )

        self.phase = "dropped-valid"
        self.dragging_id = None
        if new_position == task.position:
            return None

        state.apply_patch(task.id, {"position": new_position})
        self.logger.info(
            "moved %s from %d to %d (position %s -> %s)",
            task.id,
            source,
            destination,
            task.position,
            new_position,
        )

        try:
            await self.reconciler.repository.update_position(task.id, new_position)
        except HomelistError as e:
            self.reconciler.notifier.error("Error", e.message)
        else:
            self.reconciler.notifier.success(
                "Task position updated", "Task position has been updated successfully"
            )
        return new_position
