"""Tests for the path codec."""

from __future__ import annotations

from typing import Any

import pytest

from tinct.domain.paths import (
    ArrayDescriptor,
    PathEntry,
    decompose,
    flatten,
    get_path,
    join_path,
    recompose,
)


class TestDecompose:
    def test_nested_maps(self) -> None:
        entries = decompose({"std": {"fg": "#fff", "bg": "#000"}})
        assert [(e.path, e.value) for e in entries] == [
            (("std", "fg"), "#fff"),
            (("std", "bg"), "#000"),
        ]

    def test_dotted_key_stays_one_segment(self) -> None:
        entries = decompose({"colors": {"editor.background": "$(bg)"}})
        assert entries[0].path == ("colors", "editor.background")
        assert entries[0].flat_path == "colors.editor.background"

    def test_list_of_maps_uses_int_segments(self) -> None:
        doc = {"tokenColors": [{"scope": "comment", "settings": {"foreground": "#888"}}]}
        paths = [e.path for e in decompose(doc)]
        assert paths == [
            ("tokenColors", 0, "scope"),
            ("tokenColors", 0, "settings", "foreground"),
        ]

    def test_scalar_list_elements_carry_descriptor(self) -> None:
        entries = decompose({"scope": ["comment", "string"]})
        assert entries[1].array == ArrayDescriptor(path=("scope",), index=1)
        assert entries[1].array.flat_path == "scope"

    def test_prefix_is_prepended(self) -> None:
        entries = decompose({"cyan": "#56b6c2"}, ("palette",))
        assert entries[0].flat_path == "palette.cyan"

    def test_non_string_leaves_pass_through(self) -> None:
        entries = decompose({"a": 1, "b": True, "c": None})
        assert [e.value for e in entries] == [1, True, None]

    def test_empty_containers_produce_nothing(self) -> None:
        assert decompose({"a": {}, "b": []}) == []


class TestRecompose:
    @pytest.mark.parametrize(
        "doc",
        [
            {"a": {"b": "x", "c": 2}},
            {"colors": {"editor.background": "#000000"}},
            {"tokenColors": [{"scope": ["a", "b"], "settings": {"fontStyle": "italic"}}]},
            {"list": ["x", ["y", "z"]]},
        ],
    )
    def test_round_trip_identity(self, doc: dict[str, Any]) -> None:
        assert recompose(decompose(doc)) == doc

    def test_last_entry_wins(self) -> None:
        entries = [PathEntry(("a",), 1), PathEntry(("a",), 2)]
        assert recompose(entries) == {"a": 2}

    def test_list_ordered_by_index(self) -> None:
        entries = [PathEntry(("l", 1), "b"), PathEntry(("l", 0), "a")]
        assert recompose(entries) == {"l": ["a", "b"]}

    def test_empty_input(self) -> None:
        assert recompose([]) == {}


class TestHelpers:
    def test_join_path(self) -> None:
        assert join_path(("tokenColors", 0, "scope")) == "tokenColors.0.scope"

    def test_flatten(self) -> None:
        assert flatten({"a": {"b": 1}, "c": [2]}) == {"a.b": 1, "c.0": 2}

    def test_get_path(self) -> None:
        doc = {"a": [{"b": "x"}]}
        assert get_path(doc, ("a", 0, "b")) == "x"
        assert get_path(doc, ("a", 3, "b"), "missing") == "missing"
        assert get_path(doc, ("z",)) is None

    def test_with_prefix_moves_descriptor(self) -> None:
        entry = decompose({"scope": ["x"]})[0].with_prefix("theme")
        assert entry.path == ("theme", "scope", 0)
        assert entry.array == ArrayDescriptor(path=("theme", "scope"), index=0)
