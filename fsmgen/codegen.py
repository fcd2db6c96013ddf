#!/usr/bin/env python3
"""
State machine code generator (Python + Jinja2)

Generates a Python module from a declarative state machine description:
state and event types, the Machine holder, per-event callback interfaces
with their AfterExit resolution types, and the dispatch method.
"""

import argparse
import ast
import builtins
import keyword
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .errors import ReservedName, SpecError
from .fsm_parser import GENERATED_NAMES, SpecParser
from .grammar import Machine
from .grouping import EventGroup, group_transitions, uncovered_pairs
from .license_config import get_generated_code_header
from .naming import NameKind, check_collisions, derive

logger = logging.getLogger(__name__)

BUILTIN_NAMES = frozenset(dir(builtins))

# Names bound at module level of the generated file
MODULE_LEVEL_KINDS = (NameKind.STATE_TYPE, NameKind.EVENT_TYPE, NameKind.EVENT_NAMESPACE)
EVENT_SEEDED_KINDS = (NameKind.EVENT_TYPE, NameKind.EVENT_NAMESPACE, NameKind.PRE_TRANSITION_HOOK)


def imported_names(lines: Iterable[str]) -> FrozenSet[str]:
    """
    Names bound by extra import lines

    Raises:
        ValueError: a line is not a valid import statement
    """
    names = set()
    for line in lines:
        try:
            tree = ast.parse(line)
        except SyntaxError as e:
            raise ValueError(f"invalid import line {line!r}: {e.msg}") from e

        for node in tree.body:
            if isinstance(node, ast.Import):
                names.update(alias.asname or alias.name.split('.')[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom):
                names.update(alias.asname or alias.name for alias in node.names)
            else:
                raise ValueError(f"not an import statement: {line!r}")
    return frozenset(names)


@dataclass
class DestinationView:
    state: str
    entry_hook: str


@dataclass
class SourceView:
    state: str
    exit_hook: str
    resolution_type: str
    destinations: List[DestinationView] = field(default_factory=list)
    default_destination: Optional[str] = None  # data-only mode: the single destination


@dataclass
class EventView:
    event: str
    namespace: str
    pre_hook: str
    code: str = ""
    has_code: bool = False
    sources: List[SourceView] = field(default_factory=list)


class CodeGenerator:
    """
    Code generator for declarative state machines

    Uses Jinja2 templates to render a Python module from a parsed Machine.

    Args:
        template_dir: Directory holding machine.jinja2 (default: ./templates)
        callbacks: Generate the exit/entry callback protocol; when False the
            dispatch method only checks and records transitions
        imports: Import lines placed in the generated module, for payload and
            context types defined elsewhere

    Raises:
        ValueError: an entry of imports is not an import statement
    """

    def __init__(self, template_dir=None, callbacks: bool = True, imports: Optional[List[str]] = None):
        if template_dir is None:
            template_dir = Path(__file__).parent / 'templates'

        self.callbacks = callbacks
        self.imports = list(imports or [])
        self.imported_names = imported_names(self.imports)

        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(['html', 'xml']),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True
        )

    def generate_source(self, machine: Machine, source_name: Optional[str] = None) -> str:
        """
        Render the generated module for a parsed machine

        Args:
            machine: Parsed and validated description
            source_name: Name of the description, shown in the file header

        Returns:
            Python source text; identical input always yields identical text

        Raises:
            NameCollision: two declarations derive the same generated name
            ReservedName: a derived name is not an identifier, or a module-level
                name would shadow a builtin, an imported name or a name the
                generated module uses
        """
        grouped = group_transitions(machine.transitions)
        # An event whose blocks record no pair has nothing to dispatch
        grouped = {event: group for event, group in grouped.items() if group.sources}

        self._check_names(machine, grouped)

        for state, event in uncovered_pairs(machine.states.names(), grouped):
            logger.debug(f"No {event} transition from {state}: dispatch raises NoSuchTransition")

        groups = [self._event_view(group) for group in grouped.values()]
        logger.debug(f"Grouped {len(machine.transitions)} transition blocks into {len(groups)} events")

        template = self.env.get_template('machine.jinja2')
        return template.render(
            header=get_generated_code_header(source_name),
            source_name=source_name or 'a state machine description',
            imports=self.imports,
            callbacks=self.callbacks,
            states=list(machine.states),
            events=list(machine.events),
            initial_state=machine.initial_state.name,
            context_type=machine.context.type if machine.context is not None else None,
            groups=groups,
            bases=[f'{group.namespace}.Callback' for group in groups] if self.callbacks else [],
        )

    def _event_view(self, group: EventGroup) -> EventView:
        view = EventView(
            event=group.event,
            namespace=derive(NameKind.EVENT_NAMESPACE, group.event),
            pre_hook=derive(NameKind.PRE_TRANSITION_HOOK, group.event),
            code=group.code,
            has_code=group.has_code,
        )

        for source, targets in group.sources.items():
            view.sources.append(SourceView(
                state=source,
                exit_hook=derive(NameKind.EXIT_HOOK, source),
                resolution_type=derive(NameKind.RESOLUTION_TYPE, source),
                destinations=[
                    DestinationView(target, derive(NameKind.ENTRY_HOOK, source, target))
                    for target in targets
                ],
                default_destination=targets[0] if len(targets) == 1 else None,
            ))
        return view

    def _check_names(self, machine: Machine, grouped: Dict[str, EventGroup]):
        derivations = []
        for state in machine.states.names():
            derivations.append((NameKind.STATE_TYPE, (state,), derive(NameKind.STATE_TYPE, state)))
        for event in machine.events.names():
            derivations.append((NameKind.EVENT_TYPE, (event,), derive(NameKind.EVENT_TYPE, event)))

        if self.callbacks:
            # Resolution types live inside their event's namespace
            for event, group in grouped.items():
                derivations.append((NameKind.EVENT_NAMESPACE, (event,), derive(NameKind.EVENT_NAMESPACE, event)))
                derivations.append((NameKind.PRE_TRANSITION_HOOK, (event,), derive(NameKind.PRE_TRANSITION_HOOK, event)))
                resolution_types = [
                    (NameKind.RESOLUTION_TYPE, (source,), derive(NameKind.RESOLUTION_TYPE, source))
                    for source in group.sources
                ]
                self._check_usable(machine, resolution_types)
                check_collisions(resolution_types)

                for source, targets in group.sources.items():
                    derivations.append((NameKind.EXIT_HOOK, (source,), derive(NameKind.EXIT_HOOK, source)))
                    for target in targets:
                        derivations.append(
                            (NameKind.ENTRY_HOOK, (source, target), derive(NameKind.ENTRY_HOOK, source, target))
                        )

        self._check_usable(machine, derivations)
        check_collisions(derivations)

    def _check_usable(self, machine: Machine, derivations):
        for kind, seeds, name in derivations:
            # Report at the declaration the name is derived from
            declarations = machine.events if kind in EVENT_SEEDED_KINDS else machine.states
            declaration = declarations.get(seeds[0])
            span = declaration.span if declaration is not None else None

            if not name.isidentifier() or keyword.iskeyword(name):
                raise ReservedName(
                    f"{kind.value} '{name}' derived from {', '.join(seeds)} is not a valid Python identifier",
                    span,
                )
            if kind not in MODULE_LEVEL_KINDS:
                continue
            if name in BUILTIN_NAMES or name in GENERATED_NAMES:
                raise ReservedName(
                    f"{kind.value} '{name}' derived from {seeds[0]} would shadow a name the generated module uses",
                    span,
                )
            if name in self.imported_names:
                raise ReservedName(
                    f"{kind.value} '{name}' derived from {seeds[0]} would shadow an imported name",
                    span,
                )

    def generate(self, spec_path: str, output_dir: str) -> bool:
        """
        Generate a Python module from a description file

        Args:
            spec_path: Path to the description
            output_dir: Directory for the generated module

        Returns:
            True if generation succeeded, False otherwise
        """
        try:
            machine = SpecParser().parse_file(spec_path)

            print(f"Generating code for: {Path(spec_path).stem}")
            print(f"  States: {len(machine.states)}")
            print(f"  Events: {len(machine.events)}")
            print(f"  Callbacks: {self.callbacks}")

            output = self.generate_source(machine, source_name=Path(spec_path).name)

            output_path = Path(output_dir) / f"{Path(spec_path).stem}_fsm.py"
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output, encoding='utf-8')

            print(f"  ✓ Generated: {output_path}")
            return True

        except SpecError as e:
            if e.source_name is None:
                e.source_name = str(spec_path)
            print(f"Error: {e}", file=sys.stderr)
            return False
        except OSError as e:
            print(f"Error generating code: {e}", file=sys.stderr)
            return False


def compile_text(text: str, callbacks: bool = True, imports: Optional[List[str]] = None,
                 source_name: Optional[str] = None) -> str:
    """Parse description text and return the generated module source"""
    machine = SpecParser().parse_text(text, source_name=source_name)
    generator = CodeGenerator(callbacks=callbacks, imports=imports)
    return generator.generate_source(machine, source_name=source_name)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='fsmgen',
        description='Generate a Python state machine module from a declarative description'
    )
    parser.add_argument('spec_file', help='Input state machine description')
    parser.add_argument('-o', '--output-dir', default='.',
                        help='Output directory for generated files')
    parser.add_argument('-t', '--template-dir', default=None,
                        help='Template directory (default: bundled templates)')
    parser.add_argument('--data-only', action='store_true',
                        help='Generate transitions as data, without the callback protocol')
    parser.add_argument('--import', dest='imports', action='append', default=[], metavar='LINE',
                        help='Import line to add to the generated module (repeatable)')
    parser.add_argument('--stdout', action='store_true',
                        help='Write the generated module to stdout instead of a file')
    parser.add_argument('--normalize', action='store_true',
                        help='Print the description in canonical form and exit')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    # Check input file exists
    if not Path(args.spec_file).exists():
        print(f"Error: description file not found: {args.spec_file}", file=sys.stderr)
        return 1

    try:
        generator = CodeGenerator(
            template_dir=args.template_dir,
            callbacks=not args.data_only,
            imports=args.imports
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.normalize or args.stdout:
        try:
            machine = SpecParser().parse_file(args.spec_file)
            if args.normalize:
                sys.stdout.write(machine.render())
            else:
                sys.stdout.write(generator.generate_source(machine, source_name=Path(args.spec_file).name))
        except SpecError as e:
            if e.source_name is None:
                e.source_name = args.spec_file
            print(f"Error: {e}", file=sys.stderr)
            return 1
        return 0

    success = generator.generate(args.spec_file, args.output_dir)
    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())
