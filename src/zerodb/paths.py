"""
Dot-path access over a nested JSON-like document.

A path such as ``"user.profile.name"`` addresses ``doc["user"]["profile"]["name"]``.
Every segment is a mapping key; list indices are not addressed.

Policies
- Reads never create anything and never raise for a missing path.
- Writes always succeed: missing intermediates are created, and non-mapping
  intermediates are replaced by empty mappings.
- Presence is decided by key lookup, never by truthiness, so a stored
  ``0``, ``False``, ``""`` or ``None`` is present.
- Values handed back to callers, and values taken from them, are deep copies.
"""

from __future__ import annotations

import copy
from numbers import Number
from typing import Any, Callable, Dict, List, Tuple

from .errors import PathNotFound, TypeMismatch


Document = Dict[str, Any]


def split_path(path: str) -> List[str]:
    if not isinstance(path, str):
        raise TypeMismatch(f"path must be a string, got {type(path).__name__}")
    return path.split(".")


def lookup(doc: Document, path: str) -> Tuple[bool, Any]:
    """Return ``(found, value)`` without copying."""
    cur: Any = doc
    for seg in split_path(path):
        if not isinstance(cur, dict) or seg not in cur:
            return (False, None)
        cur = cur[seg]
    return (True, cur)


def _parent_for_write(doc: Document, segments: List[str]) -> Document:
    cur = doc
    for seg in segments[:-1]:
        nxt = cur.get(seg)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[seg] = nxt
        cur = nxt
    return cur


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never counts as a number here
    return isinstance(value, Number) and not isinstance(value, bool)


def get_path(doc: Document, path: str, default: Any = None) -> Any:
    found, value = lookup(doc, path)
    if not found:
        return default
    return copy.deepcopy(value)


def has_path(doc: Document, path: str) -> bool:
    found, _ = lookup(doc, path)
    return found


def set_path(doc: Document, path: str, value: Any) -> None:
    segments = split_path(path)
    parent = _parent_for_write(doc, segments)
    parent[segments[-1]] = copy.deepcopy(value)


def delete_path(doc: Document, path: str) -> None:
    segments = split_path(path)
    parent: Any = doc
    for seg in segments[:-1]:
        if not isinstance(parent, dict) or seg not in parent:
            return
        parent = parent[seg]
    if isinstance(parent, dict):
        parent.pop(segments[-1], None)


def push_path(doc: Document, path: str, value: Any) -> None:
    """Append ``value`` to the list at ``path``, creating ``[value]`` if absent."""
    found, current = lookup(doc, path)
    if not found:
        set_path(doc, path, [value])
        return
    if not isinstance(current, list):
        raise TypeMismatch(f"can only push to a sequence (found {type(current).__name__} at {path!r})")
    current.append(copy.deepcopy(value))


def _require_present(doc: Document, path: str) -> Any:
    found, current = lookup(doc, path)
    if not found:
        raise PathNotFound(f"no value at {path!r}")
    return current


def increment_path(doc: Document, path: str, amount: Any = 1) -> None:
    current = _require_present(doc, path)
    if not _is_number(current):
        raise TypeMismatch(f"can only increment a number (found {type(current).__name__} at {path!r})")
    if not _is_number(amount):
        raise TypeMismatch(f"amount must be a number, got {type(amount).__name__}")
    set_path(doc, path, current + amount)


def decrement_path(doc: Document, path: str, amount: Any = 1) -> None:
    current = _require_present(doc, path)
    if not _is_number(current):
        raise TypeMismatch(f"can only decrement a number (found {type(current).__name__} at {path!r})")
    if not _is_number(amount):
        raise TypeMismatch(f"amount must be a number, got {type(amount).__name__}")
    set_path(doc, path, current - amount)


def update_path(doc: Document, path: str, updater: Callable[[Any], Any]) -> None:
    """Replace the value at ``path`` with ``updater(value)``.

    The updater receives a copy of the stored value, so in-place mutation by
    the callable has no effect unless it is also returned.
    """
    if not callable(updater):
        raise TypeMismatch("updater must be callable")
    current = _require_present(doc, path)
    set_path(doc, path, updater(copy.deepcopy(current)))
