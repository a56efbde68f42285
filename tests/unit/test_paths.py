from __future__ import annotations

import pytest

from zerodb.errors import PathNotFound, TypeMismatch
from zerodb.paths import (
    decrement_path,
    delete_path,
    get_path,
    has_path,
    increment_path,
    push_path,
    set_path,
    update_path,
)


def test_get_nested_and_missing_paths():
    doc = {"user": {"name": "John", "age": 18}, "flag": True}

    assert get_path(doc, "user.name") == "John"
    assert get_path(doc, "user.missing") is None
    assert get_path(doc, "user.missing", "fallback") == "fallback"
    # Descending through a non-mapping returns the default
    assert get_path(doc, "flag.inner", 7) == 7
    assert get_path(doc, "nope.deeper.still") is None


def test_get_returns_a_copy():
    doc = {"user": {"tags": ["a"]}}

    tags = get_path(doc, "user.tags")
    tags.append("b")

    assert doc["user"]["tags"] == ["a"]


def test_set_creates_intermediate_mappings():
    doc: dict = {}
    set_path(doc, "a.b.c", 1)
    assert doc == {"a": {"b": {"c": 1}}}


def test_set_replaces_non_mapping_intermediate():
    doc = {"a": 5}
    set_path(doc, "a.b", "x")
    assert doc == {"a": {"b": "x"}}


def test_set_is_idempotent():
    once: dict = {}
    twice: dict = {}
    set_path(once, "user.name", "John")
    set_path(twice, "user.name", "John")
    set_path(twice, "user.name", "John")
    assert once == twice


def test_set_stores_a_copy_of_the_value():
    doc: dict = {}
    value = {"items": [1]}
    set_path(doc, "v", value)
    value["items"].append(2)
    assert doc["v"] == {"items": [1]}


@pytest.mark.parametrize("falsy", [0, False, "", None, [], {}])
def test_presence_is_not_truthiness(falsy):
    doc: dict = {}
    set_path(doc, "x", falsy)

    assert has_path(doc, "x") is True
    assert get_path(doc, "x", 99) == falsy


def test_has_path_missing():
    doc = {"a": {"b": 1}}
    assert has_path(doc, "a.b")
    assert not has_path(doc, "a.c")
    assert not has_path(doc, "a.b.c")


def test_delete_and_repeat_delete_is_noop():
    doc = {"user": {"name": "John", "age": 1}}

    delete_path(doc, "user.name")
    assert doc == {"user": {"age": 1}}

    delete_path(doc, "user.name")
    assert doc == {"user": {"age": 1}}


def test_delete_with_missing_intermediate_is_noop():
    doc = {"a": 1}
    delete_path(doc, "x.y.z")
    delete_path(doc, "a.b")
    assert doc == {"a": 1}


def test_push_creates_then_appends():
    doc: dict = {}
    push_path(doc, "posts", {"id": 0})
    assert get_path(doc, "posts") == [{"id": 0}]

    push_path(doc, "posts", {"id": 1})
    assert get_path(doc, "posts") == [{"id": 0}, {"id": 1}]


def test_push_onto_non_sequence_raises():
    doc = {"posts": "nope"}
    with pytest.raises(TypeMismatch):
        push_path(doc, "posts", 1)


def test_increment_and_decrement():
    doc = {"user": {"age": 18}}

    increment_path(doc, "user.age")
    increment_path(doc, "user.age", 10)
    decrement_path(doc, "user.age")
    decrement_path(doc, "user.age", 5)

    assert doc["user"]["age"] == 23


def test_increment_zero_counts_as_present():
    doc = {"count": 0}
    increment_path(doc, "count", 2)
    assert doc["count"] == 2


def test_increment_missing_raises_path_not_found():
    with pytest.raises(PathNotFound):
        increment_path({}, "count")
    with pytest.raises(PathNotFound):
        decrement_path({"a": {}}, "a.count")


@pytest.mark.parametrize("current", ["1", True, [1], {"n": 1}, None])
def test_increment_non_numeric_raises(current):
    doc = {"n": current}
    with pytest.raises(TypeMismatch):
        increment_path(doc, "n")


def test_increment_non_numeric_amount_raises():
    doc = {"n": 1}
    with pytest.raises(TypeMismatch):
        increment_path(doc, "n", "2")
    with pytest.raises(TypeMismatch):
        decrement_path(doc, "n", True)


def test_update_applies_function():
    doc = {"user": {"name": "John Doe"}}
    update_path(doc, "user.name", lambda name: name.lower())
    assert doc["user"]["name"] == "john doe"


def test_update_falsy_value_is_present():
    doc = {"name": ""}
    update_path(doc, "name", lambda s: s + "x")
    assert doc["name"] == "x"


def test_update_missing_raises():
    with pytest.raises(PathNotFound):
        update_path({}, "name", lambda s: s)


def test_update_requires_callable():
    with pytest.raises(TypeMismatch):
        update_path({"a": 1}, "a", "not callable")  # type: ignore[arg-type]


def test_non_string_path_raises():
    with pytest.raises(TypeMismatch):
        get_path({}, 123)  # type: ignore[arg-type]
