"""Tests for fractional position allocation."""

import pytest

from homelist.services.position_allocator import INCREMENT, allocate


def test_interior_midpoint():
    assert allocate(2048, 1024, False, False) == 1536


def test_interior_between_close_neighbors():
    assert allocate(20, 10, False, False) == 15


def test_first_slot_synthesizes_previous_bound():
    assert allocate(None, 1024, True, False) == 2048


def test_first_slot_uses_displaced_task_as_next_bound():
    # [A30, B20, C10], C dragged to index 0
    assert allocate(None, 30, True, False, displaced_position=30) == 1054


def test_last_slot_goes_one_increment_below_next():
    assert allocate(2048, 1024, False, True) == 0


def test_last_slot_without_next_uses_previous():
    assert allocate(10, None, False, True) == 10 - INCREMENT


def test_open_bottom_interior_slot():
    assert allocate(2048, None, False, False) == 1024


def test_collision_with_next_is_broken_by_one():
    assert allocate(0, 0, False, False) == -1


@pytest.mark.parametrize(
    "prev, nxt, is_first, is_last",
    [
        (None, None, False, False),
        (None, None, True, True),
    ],
)
def test_no_neighbors_returns_constant(prev, nxt, is_first, is_last):
    assert allocate(prev, nxt, is_first, is_last) == 1024.0


def test_result_is_float():
    assert isinstance(allocate(3, 1, False, False), float)


def test_interior_result_stays_between_neighbors():
    position = allocate(100.5, 100.25, False, False)
    assert 100.25 < position < 100.5
