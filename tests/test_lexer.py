"""Tests for fsmgen.lexer: tokenizer and token stream."""
from __future__ import annotations

from fsmgen.lexer import EOF, ERROR, NAME, OP, STRING, TokenStream, tokenize


class TestTokenize:
    def test_kinds_and_values(self) -> None:
        tokens = tokenize("Turn [Open => Close]")
        assert [(t.kind, t.value) for t in tokens] == [
            (NAME, "Turn"),
            (OP, "["),
            (NAME, "Open"),
            (OP, "=>"),
            (NAME, "Close"),
            (OP, "]"),
            (EOF, ""),
        ]

    def test_arrow_wins_over_equals(self) -> None:
        values = [t.value for t in tokenize("a=>b = c")]
        assert values == ["a", "=>", "b", "=", "c", ""]

    def test_comments_and_whitespace_skipped(self) -> None:
        tokens = tokenize("States # the states\n{ }")
        assert [t.value for t in tokens] == ["States", "{", "}", ""]

    def test_spans_track_lines_and_columns(self) -> None:
        tokens = tokenize("States {\n  Open\n}")
        open_token = tokens[2]
        assert open_token.value == "Open"
        assert open_token.span.line == 2
        assert open_token.span.column == 3
        assert open_token.span.offset == 11
        assert open_token.span.end == 15

    def test_string_is_one_token(self) -> None:
        tokens = tokenize("print('{ not a brace }')")
        assert tokens[2].kind == STRING
        assert tokens[2].value == "'{ not a brace }'"

    def test_prefixed_and_triple_quoted_strings(self) -> None:
        tokens = tokenize('f"{x}" """a\nb"""')
        assert [t.kind for t in tokens[:2]] == [STRING, STRING]
        assert tokens[2].span.line == 2

    def test_ends_with_eof(self) -> None:
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].kind == EOF
        assert tokens[0].describe() == "end of input"

    def test_unknown_character_becomes_error_token(self) -> None:
        tokens = tokenize("States { $ }")
        assert [(t.kind, t.value) for t in tokens[2:4]] == [(ERROR, "$"), (OP, "}")]
        assert tokens[2].span.column == 10
        assert tokens[2].describe() == "$"

    def test_unterminated_string_leaves_error_quote(self) -> None:
        tokens = tokenize("x = 'oops")
        assert (tokens[2].kind, tokens[2].value) == (ERROR, "'")
        assert (tokens[3].kind, tokens[3].value) == (NAME, "oops")


class TestTokenStream:
    def test_peek_does_not_consume(self) -> None:
        stream = TokenStream("A B")
        assert stream.peek().value == "A"
        assert stream.peek(1).value == "B"
        assert stream.next().value == "A"
        assert stream.next().value == "B"
        assert stream.at_end()

    def test_next_stays_on_eof(self) -> None:
        stream = TokenStream("A")
        stream.next()
        assert stream.next().kind == EOF
        assert stream.next().kind == EOF

    def test_accept_op(self) -> None:
        stream = TokenStream(", A")
        assert stream.accept_op(";") is None
        assert stream.accept_op(",") is not None
        assert stream.peek().value == "A"

    def test_slice_returns_raw_text(self) -> None:
        stream = TokenStream("{  raw  text }")
        opener = stream.next()
        assert stream.slice(opener.span.end, len(stream.text) - 1) == "  raw  text "
