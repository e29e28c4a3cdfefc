"""Tests for mdsigil.utils: edit distance, escaping, hashing, logging."""

from dataclasses import dataclass
from enum import Enum

from hypothesis import given, settings
from hypothesis import strategies as st

from mdsigil.utils import (
    closest_names,
    escape_xml,
    get_logger,
    levenshtein,
    shields_escape,
    subtree_hash,
)

# =========================================================================
# Edit distance
# =========================================================================


class TestLevenshtein:
    def test_identical(self) -> None:
        assert levenshtein("mathbold", "mathbold") == 0

    def test_empty(self) -> None:
        assert levenshtein("", "abc") == 3
        assert levenshtein("abc", "") == 3

    def test_transposition_costs_two(self) -> None:
        assert levenshtein("mathbold", "mathbodl") == 2

    def test_single_edits(self) -> None:
        assert levenshtein("kitten", "sitten") == 1
        assert levenshtein("kitten", "kittens") == 1
        assert levenshtein("kitten", "kiten") == 1

    @given(a=st.text(max_size=12), b=st.text(max_size=12))
    @settings(max_examples=50)
    def test_symmetric(self, a: str, b: str) -> None:
        assert levenshtein(a, b) == levenshtein(b, a)

    @given(a=st.text(max_size=12), b=st.text(max_size=12))
    @settings(max_examples=50)
    def test_bounded_by_longer_length(self, a: str, b: str) -> None:
        assert levenshtein(a, b) <= max(len(a), len(b))


class TestClosestNames:
    def test_orders_by_distance_then_name(self) -> None:
        assert closest_names("dat", ["dot", "cat", "dash"]) == ["cat", "dot", "dash"]

    def test_limit(self) -> None:
        assert closest_names("dat", ["dot", "cat", "dash"], limit=1) == ["cat"]

    def test_rejects_distant_names(self) -> None:
        assert closest_names("notreal", ["dot", "arrow"]) == []

    def test_zero_limit(self) -> None:
        assert closest_names("dot", ["dot"], limit=0) == []

    def test_deduplicates_candidates(self) -> None:
        assert closest_names("dot", ["dot", "dot"]) == ["dot"]


# =========================================================================
# Escaping
# =========================================================================


class TestEscaping:
    def test_escape_xml(self) -> None:
        assert escape_xml("<a & 'b'>") == "&lt;a &amp; &#39;b&#39;&gt;"

    def test_shields_escape(self) -> None:
        assert shields_escape("build-passing") == "build--passing"
        assert shields_escape("snake_case") == "snake__case"
        assert shields_escape("two words") == "two%20words"
        assert shields_escape("C#?%") == "C%23%3F%25"


# =========================================================================
# Hashing
# =========================================================================


class _Color(Enum):
    RED = "red"


@dataclass(frozen=True)
class _Leaf:
    name: str
    color: _Color
    tags: tuple[str, ...] = ()
    note: str | None = None


class TestHashing:
    def test_subtree_hash_nested_sequences_differ(self) -> None:
        assert subtree_hash(_Leaf("x", _Color.RED, ("ab",))) != subtree_hash(
            _Leaf("x", _Color.RED, ("a", "b"))
        )

    def test_subtree_hash_is_structural(self) -> None:
        a = _Leaf("x", _Color.RED, ("a", "b"))
        b = _Leaf("x", _Color.RED, ("a", "b"))
        assert a is not b
        assert subtree_hash(a) == subtree_hash(b)

    def test_subtree_hash_sees_field_changes(self) -> None:
        assert subtree_hash(_Leaf("x", _Color.RED)) != subtree_hash(_Leaf("y", _Color.RED))
        assert subtree_hash(_Leaf("x", _Color.RED, ("a",))) != subtree_hash(
            _Leaf("x", _Color.RED, ("b",))
        )

    def test_subtree_hash_exclude(self) -> None:
        a = _Leaf("x", _Color.RED, note="one")
        b = _Leaf("x", _Color.RED, note="two")
        assert subtree_hash(a) != subtree_hash(b)
        assert subtree_hash(a, exclude=frozenset({"note"})) == subtree_hash(
            b, exclude=frozenset({"note"})
        )

    def test_subtree_hash_truncate(self) -> None:
        assert len(subtree_hash(_Leaf("x", _Color.RED), truncate=8)) == 8


class TestLogger:
    def test_prefixes_name(self) -> None:
        assert get_logger("mymodule").name == "mdsigil.mymodule"

    def test_keeps_package_names(self) -> None:
        assert get_logger("mdsigil.parser").name == "mdsigil.parser"
        assert get_logger("mdsigil").name == "mdsigil"
