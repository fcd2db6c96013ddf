"""
fsmgen - declarative state machine compiler

Parses a state machine description and generates a Python module
implementing it.
"""

from .codegen import CodeGenerator, compile_text
from .errors import (
    DuplicateName,
    ExpectedKeyword,
    MalformedList,
    NameCollision,
    ReservedName,
    SpecError,
    SpecSyntaxError,
    SpecValidationError,
    UnexpectedToken,
    UnknownName,
)
from .fsm_parser import SpecParser
from .grammar import Machine
from .grouping import EventGroup, group_transitions
from .naming import NameKind, derive

__version__ = '0.1.0'
