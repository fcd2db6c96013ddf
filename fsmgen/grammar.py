"""
Grammar elements of a state machine description

Each element parses itself from a TokenStream (recursive descent, one token
of lookahead) and renders itself back to description text. Rendering is the
structural inverse of parsing: rendering a parsed element and parsing the
result again yields an equal element.

Example description:

    Context = Door;

    States { Open, Close, Locked = int }

    InitialState(Open)

    Events { Turn, Lock = str }

    Transitions {
        Turn [Open => Close, Close => Open],
        Lock [Close => Locked],
    }
"""

import textwrap
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from .errors import ExpectedKeyword, MalformedList, UnexpectedToken
from .lexer import EOF, ERROR, NAME, NUMBER, STRING, Span, Token, TokenStream

CONTEXT_KEYWORD = 'Context'
STATES_KEYWORD = 'States'
INITIAL_STATE_KEYWORD = 'InitialState'
EVENTS_KEYWORD = 'Events'
TRANSITIONS_KEYWORD = 'Transitions'

INDENT = '    '


def expect_keyword(stream: TokenStream, keyword: str) -> Token:
    token = stream.peek()
    if not token.is_name(keyword):
        raise ExpectedKeyword(keyword, token.describe(), token.span)
    return stream.next()


def expect_op(stream: TokenStream, value: str, context: str) -> Token:
    token = stream.peek()
    if not token.is_op(value):
        raise UnexpectedToken(f"expected '{value}' {context}, found '{token.describe()}'", token.span)
    return stream.next()


def expect_name(stream: TokenStream, what: str) -> Token:
    token = stream.peek()
    if token.kind != NAME:
        raise UnexpectedToken(f"expected {what}, found '{token.describe()}'", token.span)
    return stream.next()


def parse_list(stream: TokenStream, open_op: str, close_op: str,
               parse_item: Callable[[TokenStream], object], what: str) -> tuple:
    """
    Parse `open item, item, ... close` (trailing comma and empty list allowed)

    Token errors raised while reading an item, and missing separators, are
    reported as MalformedList.
    """
    expect_op(stream, open_op, f"to open {what}")
    items = []

    while not stream.peek().is_op(close_op):
        try:
            items.append(parse_item(stream))
        except UnexpectedToken as exc:
            raise MalformedList(f"malformed {what} entry: {exc.message}", exc.span) from exc

        if stream.accept_op(','):
            continue
        token = stream.peek()
        if not token.is_op(close_op):
            raise MalformedList(
                f"expected ',' or '{close_op}' in {what}, found '{token.describe()}'", token.span
            )

    stream.next()
    return tuple(items)


def parse_type(stream: TokenStream) -> str:
    """
    Parse a type expression and return it as normalised text

    Accepts dotted names, subscripts (`Dict[str, int]`, `Callable[[int], str]`),
    unions with `|`, string and number literals, and `...`.
    """
    parts = [_parse_type_atom(stream)]
    while stream.accept_op('|'):
        parts.append(_parse_type_atom(stream))
    return ' | '.join(parts)


def _parse_type_atom(stream: TokenStream) -> str:
    token = stream.peek()

    if token.kind in (STRING, NUMBER):
        return stream.next().value

    if token.is_op('.'):
        for _ in range(3):
            expect_op(stream, '.', "in '...'")
        return '...'

    if token.is_op('['):
        return '[' + ', '.join(_parse_type_arguments(stream)) + ']'

    name = expect_name(stream, 'a type').value
    while stream.accept_op('.'):
        name += '.' + expect_name(stream, "a name after '.'").value

    if stream.peek().is_op('['):
        name += '[' + ', '.join(_parse_type_arguments(stream)) + ']'
    return name


def _parse_type_arguments(stream: TokenStream):
    opener = expect_op(stream, '[', 'to open type arguments')
    arguments = []
    while not stream.peek().is_op(']'):
        if stream.at_end():
            raise UnexpectedToken("unclosed '[' in type", opener.span)
        arguments.append(parse_type(stream))
        if not stream.accept_op(','):
            break
    expect_op(stream, ']', 'to close type arguments')
    return arguments


def parse_code_block(stream: TokenStream) -> str:
    """
    Capture a brace-delimited code block verbatim

    Braces are counted on tokens, so braces inside string literals do not
    affect nesting. The captured text is dedented and stripped of leading and
    trailing blank lines.
    """
    opener = expect_op(stream, '{', 'to open code block')
    depth = 1

    while True:
        token = stream.peek()
        if token.kind == EOF:
            raise UnexpectedToken("unclosed '{' in code block", opener.span)
        if token.kind == ERROR:
            raise UnexpectedToken(f"unexpected character '{token.value}' in code block", token.span)
        stream.next()
        if token.is_op('{'):
            depth += 1
        elif token.is_op('}'):
            depth -= 1
            if depth == 0:
                break

    return normalize_code(stream.slice(opener.span.end, token.span.offset))


def normalize_code(raw: str) -> str:
    # Text sharing a line with the opening brace is taken as-is; the lines
    # below it are dedented together
    first, _, rest = raw.partition('\n')
    lines = []
    if first.strip():
        lines.append(first.strip())
    lines.extend(textwrap.dedent(rest).split('\n'))
    lines = [line.rstrip() for line in lines]

    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return '\n'.join(lines)


def render_block(items, open_op: str = '{', close_op: str = '}') -> str:
    """Render items one per line with trailing commas, or `{}` when empty"""
    if not items:
        return open_op + close_op
    body = ''.join(textwrap.indent(item, INDENT) + ',\n' for item in items)
    return f'{open_op}\n{body}{close_op}'


@dataclass(frozen=True)
class Declaration:
    """One state or event: `Name` or `Name = PayloadType`"""
    name: str
    type: Optional[str] = None
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    @classmethod
    def parse(cls, stream: TokenStream) -> 'Declaration':
        token = expect_name(stream, 'a name')
        type_text = None
        if stream.accept_op('='):
            type_text = parse_type(stream)
        return cls(token.value, type_text, token.span)

    def render(self) -> str:
        if self.type is None:
            return self.name
        return f'{self.name} = {self.type}'


@dataclass(frozen=True)
class DeclarationList:
    """`Keyword { decl, decl, ... }`"""
    KEYWORD = ''
    ENTRY_KIND = ''

    entries: Tuple[Declaration, ...] = ()

    @classmethod
    def parse(cls, stream: TokenStream):
        expect_keyword(stream, cls.KEYWORD)
        entries = parse_list(stream, '{', '}', Declaration.parse, f'{cls.KEYWORD} list')
        return cls(entries)

    def render(self) -> str:
        return f'{self.KEYWORD} ' + render_block([entry.render() for entry in self.entries])

    def names(self) -> Tuple[str, ...]:
        return tuple(entry.name for entry in self.entries)

    def get(self, name: str) -> Optional[Declaration]:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)


@dataclass(frozen=True)
class States(DeclarationList):
    KEYWORD = STATES_KEYWORD
    ENTRY_KIND = 'state'


@dataclass(frozen=True)
class Events(DeclarationList):
    KEYWORD = EVENTS_KEYWORD
    ENTRY_KIND = 'event'


@dataclass(frozen=True)
class InitialState:
    """`InitialState ( Name )`"""
    name: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    @classmethod
    def parse(cls, stream: TokenStream) -> 'InitialState':
        expect_keyword(stream, INITIAL_STATE_KEYWORD)
        expect_op(stream, '(', f'after {INITIAL_STATE_KEYWORD}')
        token = expect_name(stream, 'the initial state name')
        expect_op(stream, ')', 'after the initial state name')
        return cls(token.value, token.span)

    def render(self) -> str:
        return f'{INITIAL_STATE_KEYWORD}({self.name})'


@dataclass(frozen=True)
class MachineContext:
    """`Context = Type;`"""
    type: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    @classmethod
    def parse(cls, stream: TokenStream) -> 'MachineContext':
        keyword = expect_keyword(stream, CONTEXT_KEYWORD)
        expect_op(stream, '=', f'after {CONTEXT_KEYWORD}')
        type_text = parse_type(stream)
        expect_op(stream, ';', 'after the context type')
        return cls(type_text, keyword.span)

    def render(self) -> str:
        return f'{CONTEXT_KEYWORD} = {self.type};'


@dataclass(frozen=True)
class TransitionPair:
    """`From => To` inside one event's transition list"""
    source: str
    target: str
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    @classmethod
    def parse(cls, stream: TokenStream) -> 'TransitionPair':
        source = expect_name(stream, 'a source state')
        expect_op(stream, '=>', f'after {source.value}')
        target = expect_name(stream, 'a destination state')
        return cls(source.value, target.value, source.span)

    def render(self) -> str:
        return f'{self.source} => {self.target}'


@dataclass(frozen=True)
class Transition:
    """
    `EVENT [ From => To, ... ] { code }?`

    `code` is None when no block follows the pair list and a (possibly empty)
    string when one does.
    """
    event: str
    pairs: Tuple[TransitionPair, ...] = ()
    code: Optional[str] = None
    span: Optional[Span] = field(default=None, compare=False, repr=False)

    @classmethod
    def parse(cls, stream: TokenStream) -> 'Transition':
        event = expect_name(stream, 'an event name')
        pairs = parse_list(stream, '[', ']', TransitionPair.parse, f'{event.value} transition list')
        code = None
        if stream.peek().is_op('{'):
            code = parse_code_block(stream)
        return cls(event.value, pairs, code, event.span)

    def render(self) -> str:
        pairs = ', '.join(pair.render() for pair in self.pairs)
        text = f'{self.event} [{pairs}]'
        if self.code is None:
            return text
        if not self.code:
            return text + ' {}'
        return f'{text} {{\n{textwrap.indent(self.code, INDENT)}\n}}'


@dataclass(frozen=True)
class Transitions:
    """
    Every transition block of the description

    `grouped` is True for the `Transitions { ... }` form and False for a flat
    sequence of blocks following the Events section.
    """
    items: Tuple[Transition, ...] = ()
    grouped: bool = True

    @classmethod
    def parse(cls, stream: TokenStream) -> 'Transitions':
        if stream.peek().is_name(TRANSITIONS_KEYWORD) and stream.peek(1).is_op('{'):
            stream.next()
            items = parse_list(stream, '{', '}', Transition.parse, f'{TRANSITIONS_KEYWORD} block')
            return cls(items, grouped=True)

        items = []
        while not stream.at_end():
            items.append(Transition.parse(stream))
        return cls(tuple(items), grouped=False)

    def render(self) -> str:
        rendered = [item.render() for item in self.items]
        if self.grouped:
            return f'{TRANSITIONS_KEYWORD} ' + render_block(rendered)
        return '\n\n'.join(rendered)

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)


@dataclass(frozen=True)
class Machine:
    """
    Root of a parsed description

    Sections appear in a fixed order: Context (optional), States,
    InitialState, Events, then the transitions.
    """
    states: States
    initial_state: InitialState
    events: Events
    transitions: Transitions
    context: Optional[MachineContext] = None

    @classmethod
    def parse(cls, stream: TokenStream) -> 'Machine':
        context = None
        if stream.peek().is_name(CONTEXT_KEYWORD):
            context = MachineContext.parse(stream)

        states = States.parse(stream)
        initial_state = InitialState.parse(stream)
        events = Events.parse(stream)
        transitions = Transitions.parse(stream)

        token = stream.peek()
        if token.kind != EOF:
            raise UnexpectedToken(f"unexpected '{token.describe()}' after the transitions", token.span)

        return cls(states, initial_state, events, transitions, context)

    def render(self) -> str:
        sections = []
        if self.context is not None:
            sections.append(self.context.render())
        sections.append(self.states.render())
        sections.append(self.initial_state.render())
        sections.append(self.events.render())
        if self.transitions.items or self.transitions.grouped:
            sections.append(self.transitions.render())
        return '\n\n'.join(sections) + '\n'
