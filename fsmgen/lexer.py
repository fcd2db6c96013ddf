"""
Tokenizer for state machine descriptions

Splits description text into names, numbers, string literals and operators.
Whitespace and `#` comments are skipped. Tokens keep their offsets into the
source so code blocks can later be sliced out verbatim.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

NAME = 'NAME'
NUMBER = 'NUMBER'
STRING = 'STRING'
OP = 'OP'
EOF = 'EOF'
ERROR = 'ERROR'

# Order matters: string prefixes must win over plain names, `=>` over `=`
TOKEN_PATTERNS = [
    ('COMMENT', r'#[^\n]*'),
    ('WS', r'\s+'),
    (STRING, r'(?:[rRbBuUfF]{1,2})?(?:\'\'\'[\s\S]*?\'\'\'|"""[\s\S]*?"""'
             r'|\'(?:\\.|[^\'\\\n])*\'|"(?:\\.|[^"\\\n])*")'),
    (NAME, r'[A-Za-z_][A-Za-z0-9_]*'),
    (NUMBER, r'\d[\d_]*(?:\.\d*)?(?:[eE][+-]?\d+)?'),
    (OP, r'=>|->|\*\*=?|//=?|<<=?|>>=?|[-+*/%@&|^<>!:=]=|[-+*/%@&|^~<>=.,:;()\[\]{}\\]'),
]

TOKEN_RE = re.compile('|'.join(f'(?P<{name}>{pattern})' for name, pattern in TOKEN_PATTERNS))


@dataclass(frozen=True)
class Span:
    """Position of a token: 1-based line/column plus 0-based [offset, end)"""
    line: int
    column: int
    offset: int
    end: int


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    span: Span

    def is_op(self, value: str) -> bool:
        return self.kind == OP and self.value == value

    def is_name(self, value: Optional[str] = None) -> bool:
        return self.kind == NAME and (value is None or self.value == value)

    def describe(self) -> str:
        """Human readable form used in error messages"""
        if self.kind == EOF:
            return 'end of input'
        return self.value


def tokenize(text: str) -> List[Token]:
    """
    Tokenize description text

    Args:
        text: Full description source

    Returns:
        List of tokens terminated by a single EOF token. A character no token
        pattern accepts (including the quote of an unterminated string) becomes
        a one-character ERROR token, so the grammar element reading it can
        report the error in its own terms.
    """
    tokens = []
    line = 1
    line_start = 0
    pos = 0

    while pos < len(text):
        match = TOKEN_RE.match(text, pos)
        if match is None:
            tokens.append(Token(ERROR, text[pos], Span(line, pos - line_start + 1, pos, pos + 1)))
            pos += 1
            continue

        kind = match.lastgroup
        value = match.group()
        if kind not in ('WS', 'COMMENT'):
            span = Span(line, pos - line_start + 1, pos, match.end())
            tokens.append(Token(kind, value, span))

        newlines = value.count('\n')
        if newlines:
            line += newlines
            line_start = pos + value.rindex('\n') + 1
        pos = match.end()

    tokens.append(Token(EOF, '', Span(line, pos - line_start + 1, pos, pos)))
    return tokens


class TokenStream:
    """
    Cursor over a token list with one token of lookahead

    Keeps the original text around so callers can slice raw source between
    two token offsets.
    """

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    def peek(self, ahead: int = 0) -> Token:
        index = min(self.pos + ahead, len(self.tokens) - 1)
        return self.tokens[index]

    def next(self) -> Token:
        token = self.peek()
        if token.kind != EOF:
            self.pos += 1
        return token

    def at_end(self) -> bool:
        return self.peek().kind == EOF

    def accept_op(self, value: str) -> Optional[Token]:
        """Consume the next token if it is the operator `value`"""
        if self.peek().is_op(value):
            return self.next()
        return None

    def slice(self, start: int, end: int) -> str:
        return self.text[start:end]
