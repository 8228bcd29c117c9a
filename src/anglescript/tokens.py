"""
Source positions, token types and grammar tables for anglescript.

A program is a sequence of bracketed statements:

    <int x = 1 + 2>
    <string s = "hi " + 'there'>
    <output(s + x)>

Every grammar rule is a pre-compiled regular expression held in a frozen
table, built once at import time.

Error code ranges:
- E1xx: Syntax errors
- E2xx: Type mismatches
- E3xx: Unknown references
- E4xx: Invalid operators
- E5xx: Unknown commands
- E6xx: Invalid construction
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Optional


class TokenType(Enum):
    """Token types found in expression text."""

    # --- Literals ---
    INT_LITERAL = auto()        # 42
    STRING_LITERAL = auto()     # "hello", 'hello'

    # --- Identifiers ---
    IDENTIFIER = auto()         # x, myVar2

    # --- Operators ---
    ASSIGN = auto()             # =
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *


class StatementKind(Enum):
    """The statement shapes the compiler recognizes, in matching order."""
    INT_DECLARATION = "int declaration"
    STRING_DECLARATION = "string declaration"
    COMMAND_CALL = "command call"


@dataclass(frozen=True)
class SourceLocation:
    """A position in the source text."""
    line: int       # 1-indexed
    column: int     # 1-indexed
    offset: int     # 0-indexed character offset

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """A range in the source text."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.line == self.end.line:
            return f"{self.start.line}:{self.start.column}-{self.end.column}"
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class Statement:
    """
    One statement cut out of the source.

    `text` is the content between the brackets, `index` its 0-based
    position among the statements of the program and `span` covers the
    content (brackets excluded).
    """
    text: str
    index: int
    span: Optional[SourceSpan] = None

    def __str__(self) -> str:
        return f"<{self.text}>"


@dataclass(frozen=True)
class Token:
    """A token of an expression (right-hand side or call argument)."""
    type: TokenType
    value: Any
    lexeme: str
    offset: int = 0     # 0-indexed offset inside the statement text

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.lexeme!r})"

    @property
    def is_operator(self) -> bool:
        return self.type in OPERATOR_TOKENS


OPERATOR_TOKENS = frozenset({
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.STAR,
})


# --- Grammar building blocks ---

NAME = r"[a-z][a-zA-Z0-9]*"
INT_LITERAL = r"[0-9]+"
STRING_LITERAL = r"\"[^\"]*\"|'[^']*'"
OPERATOR = r"[+\-*]"

_INT_OPERAND = rf"(?:{INT_LITERAL}|{NAME})"
_STRING_OPERAND = rf"(?:{STRING_LITERAL}|{NAME})"
_INLINE_OPERAND = rf"(?:{STRING_LITERAL}|{INT_LITERAL}|{NAME})"


def _expression(operand: str) -> str:
    return rf"{operand}(?:\s*{OPERATOR}\s*{operand})*"


class Patterns:
    """
    Frozen regular expressions for every grammar rule.

    Compiled with re.ASCII: whitespace and digits are ASCII only.
    """

    # Statement splitting: text strictly between '<' and the next '>'
    STATEMENT = re.compile(r"<([^<>]*)>")

    # Statement recognition (first match wins)
    INT_DECLARATION = re.compile(r"^\s*int\s", re.ASCII)
    STRING_DECLARATION = re.compile(r"^\s*string\s", re.ASCII)
    COMMAND_CALL = re.compile(rf"^\s*{NAME}\s*\(.*\)\s*$", re.DOTALL | re.ASCII)
    REASSIGNMENT = re.compile(rf"^\s*{NAME}\s*=", re.ASCII)

    # Full statement formats
    INT_DECLARATION_FORMAT = re.compile(
        rf"^\s*int\s+(?P<name>{NAME})\s*=\s*(?P<expr>{_expression(_INT_OPERAND)})\s*$",
        re.ASCII,
    )
    STRING_DECLARATION_FORMAT = re.compile(
        rf"^\s*string\s+(?P<name>{NAME})\s*=\s*(?P<expr>{_expression(_STRING_OPERAND)})\s*$",
        re.ASCII,
    )
    COMMAND_CALL_FORMAT = re.compile(
        rf"^\s*(?P<name>{NAME})\s*\((?P<expr>.*)\)\s*$", re.DOTALL | re.ASCII
    )
    INLINE_EXPRESSION_FORMAT = re.compile(
        rf"^\s*(?P<expr>{_expression(_INLINE_OPERAND)})\s*$", re.ASCII
    )

    # Single tokens
    NAME_TOKEN = re.compile(rf"^{NAME}\Z", re.ASCII)
    INT_TOKEN = re.compile(rf"^{INT_LITERAL}\Z", re.ASCII)

    # Expression tokenizer; quoted segments are kept whole
    EXPRESSION_TOKEN = re.compile(
        r"(?P<string>\"[^\"]*\"|'[^']*')"
        r"|(?P<operator>[+\-*=])"
        r"|(?P<word>[^\s+\-*=\"']+)"
        r"|(?P<quote>[\"'])",
        re.ASCII,
    )


RECOGNITION_ORDER = (
    (StatementKind.INT_DECLARATION, Patterns.INT_DECLARATION),
    (StatementKind.STRING_DECLARATION, Patterns.STRING_DECLARATION),
    (StatementKind.COMMAND_CALL, Patterns.COMMAND_CALL),
)

OPERATOR_TOKEN_TYPES = MappingProxyType({
    "=": TokenType.ASSIGN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
})


def recognize(text: str) -> Optional[StatementKind]:
    """Return the kind of the first grammar whose prefix matches `text`."""
    for kind, pattern in RECOGNITION_ORDER:
        if pattern.search(text):
            return kind
    return None


def is_name(text: str) -> bool:
    """Check if text matches the variable name grammar."""
    return Patterns.NAME_TOKEN.match(text) is not None


def strip_quotes(text: str) -> str:
    """Remove the enclosing quote characters of a string literal."""
    return text[1:-1]
