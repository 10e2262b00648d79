"""Task filter predicates.

Hashtags are written in titles as ``#word`` or ``#word-suffix``. A filter
token matches a word when both agree after cleaning: the first ``#`` and all
spaces are removed, and only the part of the word before the first hyphen
is compared. ``"Buy milk #grocery-urgent"`` therefore matches ``grocery`` but
not ``urgent``. Comparison is case-sensitive.
"""

from __future__ import annotations

from collections.abc import Iterable

from homelist.models import Task


def clean_hashtag(token: str) -> str:
    """Normalise a filter token: drop the first ``#`` and any spaces."""
    return token.replace("#", "", 1).replace(" ", "")


def title_hashtags(title: str) -> list[str]:
    """Cleaned hashtag prefixes found in a title."""
    return [
        clean_hashtag(word).split("-")[0]
        for word in title.split(" ")
        if "#" in word
    ]


def matches_hashtag(task: Task, hashtag: str) -> bool:
    return clean_hashtag(hashtag) in title_hashtags(task.title)


def filter_tasks(
    tasks: Iterable[Task],
    *,
    author_id: str | None = None,
    hashtag: str | None = None,
    task_type: str | None = None,
) -> list[Task]:
    """Apply author, hashtag and type filters in that order.

    Args:
        tasks: Base list, left untouched
        author_id: Keep only tasks authored by this user
        hashtag: Keep only tasks carrying this hashtag
        task_type: Keep only tasks of this type

    Returns:
        New list with the surviving tasks in their original order
    """
    result = list(tasks)
    if author_id is not None:
        result = [t for t in result if t.author_id == author_id]
    if hashtag:
        result = [t for t in result if matches_hashtag(t, hashtag)]
    if task_type:
        result = [t for t in result if t.type == task_type]
    return result
