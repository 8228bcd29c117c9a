"""
Engine exceptions and diagnostics.

Error code ranges:
- E1xx: Syntax errors
- E2xx: Type mismatches
- E3xx: Unknown references
- E4xx: Invalid operators
- E5xx: Unknown commands
- E6xx: Invalid construction
- E9xx: Internal errors
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import Patterns, SourceSpan, Statement


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E101, E301, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity = ErrorSeverity.ERROR
    statement: Optional[Statement] = None   # The statement being compiled
    column: Optional[int] = None    # 1-indexed column inside statement text
    length: int = 1                 # Width of the underline
    hints: List[str] = field(default_factory=list)

    @property
    def span(self) -> Optional[SourceSpan]:
        if self.statement is None:
            return None
        return self.statement.span

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: location: severity[code]: message
        header = f"{self.severity.value}[{self.code}]: {self.message}"
        if self.statement is not None:
            loc = f"statement {self.statement.index + 1}"
            if self.span is not None:
                loc += f" ({self.span.start})"
            header = f"{loc}: {header}"
        parts.append(header)

        # Statement text with caret
        if show_source and self.statement is not None:
            parts.append("  |")
            parts.append(f"  | <{self.statement.text}>")
            if self.column is not None:
                # +1 for the opening bracket
                parts.append(f"  | {' ' * self.column}{'^' * max(1, self.length)}")

        for hint in self.hints:
            parts.append(f"  = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        data = {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "hints": self.hints,
        }
        if self.statement is not None:
            data["statement"] = {
                "index": self.statement.index,
                "text": self.statement.text,
            }
            if self.column is not None:
                data["statement"]["column"] = self.column
        if self.span is not None:
            data["range"] = {
                "start": {
                    "line": self.span.start.line,
                    "column": self.span.start.column,
                    "offset": self.span.start.offset,
                },
                "end": {
                    "line": self.span.end.line,
                    "column": self.span.end.column,
                    "offset": self.span.end.offset,
                },
            }
        return data


class EngineError(Exception):
    """Base exception for compilation and execution errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    def attach(self, statement: Statement) -> "EngineError":
        """Attach the statement being processed, unless one is already set."""
        if self.diagnostic.statement is None:
            self.diagnostic.statement = statement
        return self

    def __str__(self) -> str:
        return self.diagnostic.format()


class StatementSyntaxError(EngineError):
    """Statement text does not match the grammar (E1xx)."""
    pass


class TypeMismatchError(EngineError):
    """Value or operator does not fit the cell type (E2xx)."""
    pass


class UnknownReferenceError(EngineError):
    """Named operand has no cell in the heap (E3xx)."""
    pass


class InvalidOperatorError(EngineError):
    """Operator is unknown to the evaluator (E4xx)."""
    pass


class UnknownCommandError(EngineError):
    """Call statement names an unregistered system command (E5xx)."""
    pass


class InvalidConstructionError(EngineError):
    """Abstract cell type instantiated directly (E6xx)."""
    pass


class InternalError(EngineError):
    """Unexpected failure inside the engine (E9xx)."""
    pass


# --- Syntax error codes ---

def error_invalid_statement(statement: Statement) -> StatementSyntaxError:
    """E101: Statement matches no grammar."""
    hints = []
    if Patterns.REASSIGNMENT.search(statement.text):
        hints.append("assigning to an existing variable is not supported; "
                     "declare it again with 'int' or 'string'")
    diag = Diagnostic(
        code="E101",
        message=f"invalid statement: <{statement.text}>",
        statement=statement,
        hints=hints,
    )
    return StatementSyntaxError(diag)


def error_malformed_declaration(kind: str, statement: Statement) -> StatementSyntaxError:
    """E102: Declaration prefix matched but the statement is malformed."""
    diag = Diagnostic(
        code="E102",
        message=f"malformed {kind}: <{statement.text}>",
        statement=statement,
        hints=["variable names start with a lowercase letter followed by "
               "letters or digits: x, count2, myName"],
    )
    return StatementSyntaxError(diag)


def error_malformed_call(statement: Statement) -> StatementSyntaxError:
    """E103: Command call has a malformed argument expression."""
    diag = Diagnostic(
        code="E103",
        message=f"malformed command call: <{statement.text}>",
        statement=statement,
        hints=["arguments are quoted strings, integers or variable names "
               "joined by '+'"],
    )
    return StatementSyntaxError(diag)


def error_invalid_operand(token: str, column: Optional[int] = None) -> StatementSyntaxError:
    """E104: Operand is neither a literal nor a variable name."""
    diag = Diagnostic(
        code="E104",
        message=f"invalid operand '{token}'",
        column=column,
        length=len(token),
    )
    return StatementSyntaxError(diag)


def error_unterminated_string(column: Optional[int] = None) -> StatementSyntaxError:
    """E105: Unterminated string literal."""
    diag = Diagnostic(
        code="E105",
        message="unterminated string literal",
        column=column,
        hints=["string literals must be closed with matching quotes"],
    )
    return StatementSyntaxError(diag)


def error_misplaced_operator(symbol: str, column: Optional[int] = None) -> StatementSyntaxError:
    """E106: Operator where an operand was expected (or vice versa)."""
    diag = Diagnostic(
        code="E106",
        message=f"unexpected '{symbol}'",
        column=column,
        length=len(symbol),
    )
    return StatementSyntaxError(diag)


# --- Type error codes ---

def error_type_mismatch(expected: str, value) -> TypeMismatchError:
    """E201: Value assigned to a cell has the wrong type."""
    diag = Diagnostic(
        code="E201",
        message=f"type mismatch: expected '{expected}', found "
                f"'{type(value).__name__}' ({value!r})",
    )
    return TypeMismatchError(diag)


def error_operator_not_supported(symbol: str, type_name: str) -> TypeMismatchError:
    """E202: Operator cannot be applied to this type."""
    hints = []
    if type_name == "string":
        hints.append("strings only support '+' (concatenation)")
    diag = Diagnostic(
        code="E202",
        message=f"operator '{symbol}' is not supported for {type_name}",
        hints=hints,
    )
    return TypeMismatchError(diag)


def error_reference_type(name: str, expected: str, found: str) -> TypeMismatchError:
    """E203: Referenced variable has the other type."""
    diag = Diagnostic(
        code="E203",
        message=f"variable '{name}' is {found}, expected {expected}",
    )
    return TypeMismatchError(diag)


# --- Reference error codes ---

def error_unknown_reference(name: str, column: Optional[int] = None) -> UnknownReferenceError:
    """E301: Named operand has not been declared."""
    diag = Diagnostic(
        code="E301",
        message=f"undefined variable '{name}'",
        column=column,
        length=len(name),
        hints=["variables must be declared in an earlier statement"],
    )
    return UnknownReferenceError(diag)


def error_invalid_memory_reference(identifier: str) -> UnknownReferenceError:
    """E302: No cell stored under this identifier."""
    diag = Diagnostic(
        code="E302",
        message=f"invalid memory reference: {identifier}",
    )
    return UnknownReferenceError(diag)


# --- Operator error codes ---

def error_invalid_operator(operator) -> InvalidOperatorError:
    """E401: Operator is not known to the evaluator."""
    diag = Diagnostic(
        code="E401",
        message=f"invalid operator supplied: {operator!r}",
    )
    return InvalidOperatorError(diag)


def error_invalid_operator_symbol(symbol: str) -> InvalidOperatorError:
    """E402: Operator symbol has no meaning."""
    diag = Diagnostic(
        code="E402",
        message=f"'{symbol}' is not a valid operation",
    )
    return InvalidOperatorError(diag)


# --- Command error codes ---

def error_unknown_command(name: str, known: List[str] = None) -> UnknownCommandError:
    """E501: Call names a command that does not exist."""
    hints = []
    if known:
        hints.append(f"available commands: {', '.join(sorted(known))}")
    diag = Diagnostic(
        code="E501",
        message=f"unknown command '{name}'",
        hints=hints,
    )
    return UnknownCommandError(diag)


# --- Construction error codes ---

def error_abstract_instantiation(class_name: str) -> InvalidConstructionError:
    """E601: Abstract base class instantiated directly."""
    diag = Diagnostic(
        code="E601",
        message=f"cannot instantiate abstract class '{class_name}'",
        hints=["use Integer or CharacterCollection"],
    )
    return InvalidConstructionError(diag)


# --- Internal error codes ---

def error_internal(exc: BaseException) -> InternalError:
    """E900: An unexpected Python exception escaped the engine."""
    diag = Diagnostic(
        code="E900",
        message=f"internal error: {type(exc).__name__}: {exc}",
    )
    return InternalError(diag)


class DiagnosticCollector:
    """Collects diagnostics reported by an engine."""

    def __init__(self, max_errors: int = 20):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic, dropping the oldest beyond the limit."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1
        if len(self.diagnostics) > self.max_errors:
            del self.diagnostics[0]

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def last(self) -> Optional[Diagnostic]:
        return self.diagnostics[-1] if self.diagnostics else None
