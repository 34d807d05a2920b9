"""Collapse candidate tasks whose titles overlap."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar

PREFIX_CHARS = 20


class _Titled(Protocol):
    title: str


T = TypeVar("T", bound=_Titled)


def dedupe_tasks(tasks: Iterable[T]) -> list[T]:
    """Drop tasks whose title prefix already appears in an accepted title.

    A task is discarded when the first 20 lower-cased characters of its title
    are contained in the lower-cased title of any earlier accepted task. The
    first-seen task (with its assignee and due date) is kept. This is a prefix
    containment check only: "Update the release notes page" is dropped after
    "Update the release notes for v2", while "Review the PR" and
    "Review PR #234 today" both survive.
    """
    accepted: list[T] = []
    for task in tasks:
        prefix = task.title.lower()[:PREFIX_CHARS]
        if any(prefix in kept.title.lower() for kept in accepted):
            continue
        accepted.append(task)
    return accepted
