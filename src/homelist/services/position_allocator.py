"""Fractional position allocation for drag-reorder.

Tasks are ordered by a float ``position`` (higher first). Moving one task only
rewrites that task's position: the new key is derived from its neighbors
after the move. Precision degrades after many insertions at the same
boundary; positions are never rebalanced.
"""

from __future__ import annotations

INCREMENT = 1024


def allocate(
    prev_position: float | None,
    next_position: float | None,
    is_first: bool,
    is_last: bool,
    *,
    displaced_position: float | None = None,
) -> float:
    """Compute the position of a task dropped between two neighbors.

    Args:
        prev_position: Position of the task now displayed above the moved one
        next_position: Position of the task now displayed below the moved one.
            For the last slot this is the last remaining task's position.
        is_first: The task was dropped in the first slot
        is_last: The task was dropped in the last slot
        displaced_position: Position of the task that occupied the destination
            index before the move. Replaces ``next_position`` when the
            previous bound has to be synthesized.

    Returns:
        The new position
    """
    if prev_position is None and next_position is None:
        return float(INCREMENT)

    if prev_position is None:
        prev_position = next_position + INCREMENT
        if displaced_position is not None:
            next_position = displaced_position

    if is_first:
        position = prev_position
    elif is_last:
        anchor = next_position if next_position is not None else prev_position
        position = anchor - INCREMENT
    elif next_position is None:
        position = prev_position - INCREMENT
    else:
        position = (prev_position + next_position) / 2

    # keep strict ordering against the lower neighbor
    if next_position is not None and position == next_position:
        position -= 1

    return float(position)
