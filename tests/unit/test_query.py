from __future__ import annotations

import re

import pytest

from zerodb.errors import InvalidQuery
from zerodb.query import Literal, Pattern, compile_query, find, find_one


def _posts():
    return [
        {"id": 0, "author": "John", "title": "Hello world"},
        {"id": 1, "author": "Nick", "title": "Goodbye"},
        {"id": 2, "author": "John"},
        {"id": 3, "author": "Ann", "title": 42},
    ]


def test_find_by_literal():
    posts = [{"id": 0, "author": "John"}, {"id": 1, "author": "Nick"}]
    assert find(posts, {"author": "John"}) == [{"id": 0, "author": "John"}]


def test_empty_query_matches_everything():
    posts = _posts()
    assert find(posts, {}) == posts


def test_regex_excludes_missing_and_non_string_fields():
    result = find(_posts(), {"title": re.compile(r"^Hello")})
    assert [p["id"] for p in result] == [0]

    anything = find(_posts(), {"title": re.compile(r".*")})
    assert [p["id"] for p in anything] == [0, 1]


def test_criteria_are_anded():
    result = find(_posts(), {"author": "John", "title": re.compile("world")})
    assert [p["id"] for p in result] == [0]


def test_missing_field_does_not_equal_none():
    records = [{"a": None}, {}]
    assert find(records, {"a": None}) == [{"a": None}]


def test_structural_equality():
    records = [
        {"tags": ["x", "y"], "meta": {"n": 1}},
        {"tags": ["x"], "meta": {"n": 1}},
        {"flag": 1},
        {"flag": True},
    ]
    assert find(records, {"tags": ["x", "y"]}) == [records[0]]
    assert len(find(records, {"meta": {"n": 1}})) == 2
    # Booleans and numbers are never equal
    assert find(records, {"flag": True}) == [{"flag": True}]
    assert find(records, {"flag": 1}) == [{"flag": 1}]


def test_non_sequence_yields_no_match():
    assert find(None, {"a": 1}) == []
    assert find({"a": 1}, {"a": 1}) == []
    assert find_one("text", {}) is None


def test_non_mapping_elements_are_skipped():
    assert find([1, "a", {"a": 1}], {"a": 1}) == [{"a": 1}]


def test_find_one_returns_first_or_none():
    assert find_one(_posts(), {"author": "John"})["id"] == 0
    assert find_one(_posts(), {"author": "Zed"}) is None


def test_results_are_copies():
    posts = _posts()
    found = find(posts, {"id": 0})
    found[0]["author"] = "Changed"
    assert posts[0]["author"] == "John"


@pytest.mark.parametrize("bad", [None, [("a", 1)], "a=1", 5])
def test_invalid_query_raises(bad):
    with pytest.raises(InvalidQuery):
        find([], bad)


def test_non_string_field_name_raises():
    with pytest.raises(InvalidQuery):
        compile_query({1: "a"})


def test_compile_query_tags_criteria():
    pattern = re.compile("x")
    compiled = compile_query({"a": 1, "b": pattern})
    assert compiled.criteria == (("a", Literal(1)), ("b", Pattern(pattern)))


def test_bytes_pattern_raises_invalid_query():
    with pytest.raises(InvalidQuery):
        find([{"t": "Hello"}], {"t": re.compile(b"^H")})
