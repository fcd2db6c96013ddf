"""
Transition grouping

Turns the flat list of (event, from, to) facts into the table the generator
works from: event -> source state -> destination states. Keys and
destination sets are sorted so equivalent descriptions always produce the
same table, whatever order their transitions were written in.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from .grammar import Transition


@dataclass(frozen=True)
class EventGroup:
    """All transitions recorded for one event"""
    event: str
    sources: Dict[str, Tuple[str, ...]] = field(default_factory=dict)  # sorted source -> sorted targets
    code: str = ""  # code blocks of every block for this event, in declaration order
    has_code: bool = False

    def destinations(self, source: str) -> Tuple[str, ...]:
        return self.sources.get(source, ())


def group_transitions(transitions: Iterable[Transition]) -> Dict[str, EventGroup]:
    """
    Group transition facts by event, then by source state

    Args:
        transitions: Parsed transition blocks in declaration order

    Returns:
        Mapping event -> EventGroup with events in sorted order. Duplicate
        pairs collapse; a source with no pair under an event is absent from
        that event's group.
    """
    table: Dict[str, Dict[str, Set[str]]] = {}
    code: Dict[str, List[str]] = {}

    for transition in transitions:
        sources = table.setdefault(transition.event, {})
        for pair in transition.pairs:
            sources.setdefault(pair.source, set()).add(pair.target)
        if transition.code is not None:
            code.setdefault(transition.event, []).append(transition.code)

    grouped = {}
    for event in sorted(table):
        blocks = [block for block in code.get(event, []) if block]
        grouped[event] = EventGroup(
            event=event,
            sources={source: tuple(sorted(targets)) for source, targets in sorted(table[event].items())},
            code='\n'.join(blocks),
            has_code=event in code,
        )
    return grouped


def uncovered_pairs(states: Iterable[str], grouped: Dict[str, EventGroup]) -> List[Tuple[str, str]]:
    """(state, event) combinations with no recorded transition, sorted"""
    return [
        (state, event)
        for event, group in grouped.items()
        for state in sorted(states)
        if state not in group.sources
    ]
