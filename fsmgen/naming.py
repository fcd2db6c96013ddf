"""
Name derivation for generated code

Maps state and event identifiers to the hook, resolution type and namespace
names used by the generated module. Every generated name comes from here so
callback declarations, resolution types and dispatch arms always agree.
"""

import enum
import re
from typing import Dict, Iterable, Tuple

from .errors import NameCollision

# One word: an acronym before a capitalised word, a (capitalised) lowercase
# run, an uppercase run, or digits
WORD_RE = re.compile(r'[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+[0-9]*|[A-Z]+[0-9]*|[0-9]+')


class NameKind(enum.Enum):
    RESOLUTION_TYPE = 'resolution type'
    ENTRY_HOOK = 'entry hook'
    EXIT_HOOK = 'exit hook'
    PRE_TRANSITION_HOOK = 'pre-transition hook'
    EVENT_NAMESPACE = 'event namespace'
    STATE_TYPE = 'state'
    EVENT_TYPE = 'event'


SEED_COUNTS = {
    NameKind.RESOLUTION_TYPE: 1,
    NameKind.ENTRY_HOOK: 2,
    NameKind.EXIT_HOOK: 1,
    NameKind.PRE_TRANSITION_HOOK: 1,
    NameKind.EVENT_NAMESPACE: 1,
    NameKind.STATE_TYPE: 1,
    NameKind.EVENT_TYPE: 1,
}


def split_words(identifier: str):
    return WORD_RE.findall(identifier)


def snake_case(identifier: str) -> str:
    """OpenDoor -> open_door, HTTPServer -> http_server, S1 -> s1"""
    return '_'.join(word.lower() for word in split_words(identifier))


def pascal_case(identifier: str) -> str:
    """open_door -> OpenDoor, S1 -> S1"""
    return ''.join(word[0].upper() + word[1:].lower() for word in split_words(identifier))


def derive(kind: NameKind, *seeds: str) -> str:
    """
    Derive a generated identifier

    Args:
        kind: Which generated name to build
        seeds: Declared identifiers the name is built from; ENTRY_HOOK takes
            (from_state, to_state), every other kind takes one identifier

    Returns:
        The derived identifier, e.g. derive(ENTRY_HOOK, "S1", "S2") is
        "entry_s2_from_s1"
    """
    expected = SEED_COUNTS[kind]
    if len(seeds) != expected:
        raise ValueError(f"{kind.value} takes {expected} seed(s), got {len(seeds)}")

    if kind is NameKind.RESOLUTION_TYPE:
        return 'AfterExit' + pascal_case(seeds[0])
    if kind is NameKind.ENTRY_HOOK:
        source, target = seeds
        return f'entry_{snake_case(target)}_from_{snake_case(source)}'
    if kind is NameKind.EXIT_HOOK:
        return 'exit_' + snake_case(seeds[0])
    if kind is NameKind.PRE_TRANSITION_HOOK:
        return 'on_' + snake_case(seeds[0])
    if kind is NameKind.EVENT_NAMESPACE:
        return snake_case(seeds[0])
    return seeds[0]


def check_collisions(derivations: Iterable[Tuple[NameKind, Tuple[str, ...], str]]) -> Dict[str, Tuple[NameKind, Tuple[str, ...]]]:
    """
    Reject distinct inputs that map to the same generated name

    Args:
        derivations: (kind, seeds, name) triples; the same (kind, seeds) pair
            may appear more than once

    Returns:
        Mapping of each generated name to the input that produced it

    Raises:
        NameCollision: two different (kind, seeds) inputs share a name
    """
    owners = {}
    for kind, seeds, name in derivations:
        owner = owners.setdefault(name, (kind, seeds))
        if owner != (kind, seeds):
            raise NameCollision(
                f"generated name '{name}' is derived from both "
                f"{owner[0].value} {', '.join(owner[1])} and {kind.value} {', '.join(seeds)}"
            )
    return owners
