from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from .errors import InvalidQuery


_MISSING = object()


@dataclass(frozen=True)
class Literal:
    value: Any

    def matches(self, candidate: Any) -> bool:
        if candidate is _MISSING:
            return False
        return _equal(candidate, self.value)


@dataclass(frozen=True)
class Pattern:
    regex: re.Pattern

    def matches(self, candidate: Any) -> bool:
        # Only strings are tested; missing or non-string fields never match
        return isinstance(candidate, str) and self.regex.search(candidate) is not None


Criterion = Union[Literal, Pattern]


def _equal(a: Any, b: Any) -> bool:
    """Structural equality that keeps booleans apart from numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a is b
    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, (dict, list, tuple)) or isinstance(b, (dict, list, tuple)):
        return False
    return a == b


@dataclass(frozen=True)
class Query:
    """A query compiled once into per-field criteria (AND semantics)."""

    criteria: Tuple[Tuple[str, Criterion], ...]

    def matches(self, element: Any) -> bool:
        if not self.criteria:
            return True
        if not isinstance(element, dict):
            return False
        for field, criterion in self.criteria:
            if not criterion.matches(element.get(field, _MISSING)):
                return False
        return True


def compile_query(query: Union[Mapping[str, Any], Query]) -> Query:
    if isinstance(query, Query):
        return query
    if not isinstance(query, Mapping):
        raise InvalidQuery(f"query must be a mapping, got {type(query).__name__}")
    criteria: List[Tuple[str, Criterion]] = []
    for field, value in query.items():
        if not isinstance(field, str):
            raise InvalidQuery(f"query field names must be strings, got {field!r}")
        if isinstance(value, re.Pattern):
            if isinstance(value.pattern, bytes):
                raise InvalidQuery(f"pattern for {field!r} must be a str pattern, not bytes")
            criteria.append((field, Pattern(value)))
        else:
            criteria.append((field, Literal(value)))
    return Query(criteria=tuple(criteria))


def find(sequence: Any, query: Union[Mapping[str, Any], Query]) -> List[Any]:
    """Return copies of the elements of ``sequence`` matching every criterion.

    Anything that is not a list yields an empty result.
    """
    compiled = compile_query(query)
    if not isinstance(sequence, list):
        return []
    return [copy.deepcopy(el) for el in sequence if compiled.matches(el)]


def find_one(sequence: Any, query: Union[Mapping[str, Any], Query]) -> Optional[Any]:
    compiled = compile_query(query)
    if not isinstance(sequence, list):
        return None
    for el in sequence:
        if compiled.matches(el):
            return copy.deepcopy(el)
    return None


__all__ = ["Literal", "Pattern", "Query", "compile_query", "find", "find_one"]
