"""Namespace selection, membership diffing and watch-event filtering."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping, NamedTuple

from .selectors import LabelSelector


class Namespace(NamedTuple):
    """The parts of a namespace the controller cares about."""

    name: str
    labels: dict[str, str]


class EventKind(str, Enum):
    """Kinds of namespace watch events."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def match_namespaces(selector: LabelSelector, namespaces: Iterable[Namespace]) -> list[Namespace]:
    """Return the namespaces whose labels satisfy *selector*, in input order."""
    return [ns for ns in namespaces if selector.matches(ns.labels)]


def removed_namespaces(previous: Iterable[str] | None, current: Iterable[str]) -> list[str]:
    """Return names provisioned last cycle that no longer match.

    Order follows *previous*; duplicates are dropped.
    """
    current_set = set(current)
    removed: list[str] = []
    for name in previous or []:
        if name not in current_set and name not in removed:
            removed.append(name)
    return removed


def should_reenqueue(
    old_labels: Mapping[str, str] | None,
    new_labels: Mapping[str, str] | None,
    kind: EventKind,
) -> bool:
    """Decide whether a namespace event can change which parents select it.

    Creates and deletes always count. Updates count only when the label set
    changed.
    """
    if kind in (EventKind.CREATE, EventKind.DELETE):
        return True
    return dict(old_labels or {}) != dict(new_labels or {})
