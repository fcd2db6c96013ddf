"""Tests for fsmgen.grouping: event -> source -> destinations table."""
from __future__ import annotations

from fsmgen.grammar import Transition, TransitionPair
from fsmgen.grouping import group_transitions, uncovered_pairs


def transition(event: str, *pairs: str, code: str | None = None) -> Transition:
    parsed = tuple(TransitionPair(*pair.split(">")) for pair in pairs)
    return Transition(event, parsed, code)


class TestGroupTransitions:
    def test_destinations_per_source(self) -> None:
        grouped = group_transitions([transition("Turn", "Open>Close", "Close>Open", "Close>Close")])
        assert list(grouped) == ["Turn"]
        assert grouped["Turn"].sources == {"Close": ("Close", "Open"), "Open": ("Close",)}

    def test_duplicates_collapse(self) -> None:
        grouped = group_transitions([transition("Turn", "Open>Close", "Open>Close")])
        assert grouped["Turn"].destinations("Open") == ("Close",)

    def test_events_and_sources_are_sorted(self) -> None:
        grouped = group_transitions([
            transition("Zap", "B>A"),
            transition("Add", "C>A", "A>C"),
        ])
        assert list(grouped) == ["Add", "Zap"]
        assert list(grouped["Add"].sources) == ["A", "C"]

    def test_order_of_input_does_not_matter(self) -> None:
        first = group_transitions([transition("Turn", "Open>Close", "Close>Open", "Close>Close")])
        second = group_transitions([transition("Turn", "Close>Close", "Open>Close", "Close>Open")])
        assert first == second

    def test_repeated_event_blocks_merge(self) -> None:
        grouped = group_transitions([
            transition("Turn", "Open>Close", code="first()"),
            transition("Turn", "Close>Open", code="second()"),
        ])
        group = grouped["Turn"]
        assert group.sources == {"Close": ("Open",), "Open": ("Close",)}
        assert group.code == "first()\nsecond()"
        assert group.has_code

    def test_source_without_pairs_is_absent(self) -> None:
        grouped = group_transitions([transition("Turn", "Open>Close")])
        assert "Close" not in grouped["Turn"].sources
        assert grouped["Turn"].destinations("Close") == ()

    def test_no_code_block(self) -> None:
        group = group_transitions([transition("Turn", "Open>Close")])["Turn"]
        assert group.code == ""
        assert not group.has_code

    def test_empty_code_block_is_recorded(self) -> None:
        group = group_transitions([transition("Turn", "Open>Close", code="")])["Turn"]
        assert group.code == ""
        assert group.has_code


class TestUncoveredPairs:
    def test_lists_missing_combinations(self) -> None:
        grouped = group_transitions([transition("Turn", "Open>Close"), transition("Lock", "Close>Locked")])
        assert uncovered_pairs(["Open", "Close", "Locked"], grouped) == [
            ("Locked", "Lock"),
            ("Open", "Lock"),
            ("Close", "Turn"),
            ("Locked", "Turn"),
        ]
