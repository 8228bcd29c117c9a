"""
Lexer for anglescript.

Two jobs:
- Splitting raw program text into bracketed statements. A statement is the
  text strictly between a '<' and the next '>'; anything outside brackets
  is discarded, so free text and comments can surround the program.
- Tokenizing expression text (the right-hand side of a declaration or the
  argument of a command call). Quoted segments are kept as single tokens so
  operators inside strings are not split.
"""

import logging
from typing import List, Optional, Iterator

from .tokens import (
    Token, TokenType, SourceLocation, SourceSpan, Statement, Patterns,
    OPERATOR_TOKEN_TYPES, is_name, strip_quotes,
)
from .errors import (
    error_invalid_operand,
    error_unterminated_string,
)

log = logging.getLogger(__name__)


class Lexer:
    """
    Statement splitter for anglescript source.

    Usage:
        lexer = Lexer(source_code)
        statements = lexer.split()

    Or for streaming:
        for statement in Lexer(source_code):
            process(statement)
    """

    def __init__(self, source: str, filename: Optional[str] = None):
        self.source = source
        self.filename = filename
        self._line_starts: Optional[List[int]] = None

    @property
    def line_starts(self) -> List[int]:
        """Offsets at which each line begins (lazy)."""
        if self._line_starts is None:
            starts = [0]
            for i, ch in enumerate(self.source):
                if ch == '\n':
                    starts.append(i + 1)
            self._line_starts = starts
        return self._line_starts

    def location(self, offset: int) -> SourceLocation:
        """Convert a character offset into a line/column location."""
        line = 0
        for i, start in enumerate(self.line_starts):
            if start > offset:
                break
            line = i
        column = offset - self.line_starts[line] + 1
        return SourceLocation(line + 1, column, offset)

    def __iter__(self) -> Iterator[Statement]:
        for index, match in enumerate(Patterns.STATEMENT.finditer(self.source)):
            start, end = match.span(1)
            span = SourceSpan(self.location(start), self.location(end))
            yield Statement(match.group(1), index, span)

    def split(self) -> List[Statement]:
        """Return every statement of the source, in order."""
        statements = list(self)
        log.debug("split %d statement(s)%s", len(statements),
                  f" from {self.filename}" if self.filename else "")
        return statements


def split_statements(source: str) -> List[Statement]:
    """Convenience function to split source text into statements."""
    return Lexer(source).split()


def tokenize(text: str, base_column: int = 1) -> List[Token]:
    """
    Tokenize expression text.

    `base_column` is the 1-indexed column of `text` inside its statement;
    error columns are reported relative to the statement.

    Raises StatementSyntaxError for an unterminated quote or a word that is
    neither an integer literal nor a variable name.
    """
    tokens: List[Token] = []
    for match in Patterns.EXPRESSION_TOKEN.finditer(text):
        lexeme = match.group(0)
        column = base_column + match.start()
        kind = match.lastgroup

        if kind == "string":
            tokens.append(Token(TokenType.STRING_LITERAL, strip_quotes(lexeme),
                                lexeme, column - 1))
        elif kind == "operator":
            tokens.append(Token(OPERATOR_TOKEN_TYPES[lexeme], lexeme,
                                lexeme, column - 1))
        elif kind == "quote":
            raise error_unterminated_string(column)
        elif Patterns.INT_TOKEN.match(lexeme):
            tokens.append(Token(TokenType.INT_LITERAL, int(lexeme),
                                lexeme, column - 1))
        elif is_name(lexeme):
            tokens.append(Token(TokenType.IDENTIFIER, lexeme,
                                lexeme, column - 1))
        else:
            raise error_invalid_operand(lexeme, column)
    return tokens
