"""
State machine description parser

Parses a full description into a Machine and checks it can produce a valid
generated module: declared names are unique and usable as Python
identifiers, and every reference points at a declared state or event.
"""

import keyword
import logging
from pathlib import Path
from typing import Optional

from .errors import DuplicateName, ReservedName, SpecError, UnknownName
from .grammar import Machine
from .lexer import TokenStream

logger = logging.getLogger(__name__)

# Names defined or imported by every generated module
GENERATED_NAMES = frozenset({
    'State', 'Event', 'Machine', 'INIT_STATE',
    'TransitionError', 'NoSuchTransition', 'IllegalDestination',
    'annotations', 'abstractmethod', 'dataclass', 'field',
    'Optional', 'Protocol', 'Union',
    # locals of the dispatch method
    'self', 'event', 'to', 'after_exit',
})


class SpecParser:
    """
    Parser for state machine descriptions

    Produces an immutable Machine. Raises a SpecError subclass for the first
    syntax or validation problem found.
    """

    def parse_file(self, spec_path: str) -> Machine:
        """
        Parse a description file

        Args:
            spec_path: Path to the description

        Returns:
            Parsed and validated Machine
        """
        text = Path(spec_path).read_text(encoding='utf-8')
        return self.parse_text(text, source_name=str(spec_path))

    def parse_text(self, text: str, source_name: Optional[str] = None) -> Machine:
        try:
            machine = Machine.parse(TokenStream(text))
            self._validate(machine)
        except SpecError as exc:
            if exc.source_name is None:
                exc.source_name = source_name
            raise

        logger.debug(
            f"Parsed {source_name or '<text>'}: {len(machine.states)} states, "
            f"{len(machine.events)} events, {len(machine.transitions)} transition blocks"
        )
        return machine

    def _validate(self, machine: Machine):
        self._check_duplicates(machine)
        self._check_reserved(machine)
        self._check_initial_state(machine)
        self._check_transition_references(machine)

    def _check_duplicates(self, machine: Machine):
        seen = {}
        for declarations in (machine.states, machine.events):
            for declaration in declarations:
                previous = seen.get(declaration.name)
                if previous is not None:
                    raise DuplicateName(
                        f"'{declaration.name}' is already declared as a {previous}",
                        declaration.span,
                    )
                seen[declaration.name] = declarations.ENTRY_KIND

    def _check_reserved(self, machine: Machine):
        for declarations in (machine.states, machine.events):
            for declaration in declarations:
                name = declaration.name
                if keyword.iskeyword(name) or keyword.issoftkeyword(name):
                    raise ReservedName(f"{declarations.ENTRY_KIND} name '{name}' is a Python keyword", declaration.span)
                if name in GENERATED_NAMES:
                    raise ReservedName(
                        f"{declarations.ENTRY_KIND} name '{name}' clashes with a name in the generated module",
                        declaration.span,
                    )
                if not any(char.isalnum() for char in name):
                    raise ReservedName(f"{declarations.ENTRY_KIND} name '{name}' has no letters or digits", declaration.span)

    def _check_initial_state(self, machine: Machine):
        initial = machine.initial_state
        if machine.states.get(initial.name) is None:
            raise UnknownName(f"initial state '{initial.name}' is not a declared state", initial.span)

    def _check_transition_references(self, machine: Machine):
        for transition in machine.transitions:
            if machine.events.get(transition.event) is None:
                raise UnknownName(f"'{transition.event}' is not a declared event", transition.span)
            for pair in transition.pairs:
                for name in (pair.source, pair.target):
                    if machine.states.get(name) is None:
                        raise UnknownName(
                            f"'{name}' in {transition.event} transitions is not a declared state",
                            pair.span,
                        )
