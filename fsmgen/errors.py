"""
Errors raised while reading a state machine description

Every error carries the span of the offending token so the message can point
at the exact place in the description. Generation aborts on the first error;
no partial output is produced.
"""

from typing import Optional

from .lexer import Span


class SpecError(ValueError):
    """Base class for every error found in a state machine description"""

    def __init__(self, message: str, span: Optional[Span] = None, source_name: Optional[str] = None):
        self.message = message
        self.span = span
        self.source_name = source_name
        super().__init__(message)

    def __str__(self):
        location = []
        if self.source_name:
            location.append(self.source_name)
        if self.span is not None:
            location.append(f"{self.span.line}:{self.span.column}")
        if location:
            return f"{':'.join(location)}: {self.message}"
        return self.message


class SpecSyntaxError(SpecError):
    """The description does not follow the grammar"""


class ExpectedKeyword(SpecSyntaxError):
    """A section did not start with its keyword"""

    def __init__(self, keyword: str, found: str, span: Optional[Span] = None):
        self.keyword = keyword
        self.found = found
        super().__init__(f"expected keyword '{keyword}', found '{found}'", span)


class MalformedList(SpecSyntaxError):
    """An item or separator inside a delimited list is invalid"""


class UnexpectedToken(SpecSyntaxError):
    """A token appeared where the grammar does not allow it"""


class SpecValidationError(SpecError):
    """The description parses but cannot produce a valid machine"""


class DuplicateName(SpecValidationError):
    """A state or event name is declared twice"""


class UnknownName(SpecValidationError):
    """A reference to a state or event that was never declared"""


class ReservedName(SpecValidationError):
    """A declared name cannot be used as a Python identifier in generated code"""


class NameCollision(SpecValidationError):
    """Two different declarations derive the same generated name"""
