"""
Statement compiler for anglescript.

Turns statements into executable units. Recognition is ordered and the
first matching grammar wins:

1. `int <name> = <int-expr>`        integers or names joined by + - *
2. `string <name> = <string-expr>`  quoted text or names joined by +
3. `<command>(<inline-expr>)`       quoted text, integers or names joined by +

Declarations allocate their cell in the heap; later statements of the same
build refer to it by name. The compiler gets the heap injected and reads
and writes it directly.
"""

import logging
import re
from typing import Callable, Iterable, List, Optional

from .errors import (
    EngineError,
    error_invalid_statement,
    error_malformed_declaration,
    error_malformed_call,
    error_invalid_operand,
    error_unknown_reference,
    error_reference_type,
)
from .lexer import tokenize
from .runtime.callstack import CallStack
from .runtime.commands import CommandRegistry, get_command_registry
from .runtime.executable import Evaluator, ExecutableUnit
from .runtime.heap import Heap
from .runtime.operation import (
    LiteralOperand,
    Operand,
    OperationPair,
    ReferenceOperand,
    build_inline_chain,
    build_integer_chain,
    build_string_chain,
    create_int_pair,
    create_string_pair,
    pairs_from_tokens,
)
from .runtime.values import CharacterCollection, Integer, Pointer, make_cell
from .tokens import Patterns, Statement, StatementKind, Token, TokenType, recognize

log = logging.getLogger(__name__)


class StatementCompiler:
    """
    Compiles statements into executable units.

    Usage:
        heap = Heap()
        compiler = StatementCompiler(heap)
        unit = compiler.compile_statement(statement)

    Every failure raises an EngineError subclass with the offending
    statement attached to its diagnostic.
    """

    def __init__(self, heap: Heap, registry: Optional[CommandRegistry] = None):
        self.heap = heap
        self.registry = registry or get_command_registry()

    def compile(self, statements: Iterable[Statement],
                sink: Callable[[ExecutableUnit], None]) -> int:
        """
        Compile statements in order, passing each unit to `sink`.

        Stops at the first error, which propagates. Returns the number of
        statements compiled.
        """
        count = 0
        for statement in statements:
            sink(self.compile_statement(statement))
            count += 1
        return count

    def compile_into(self, statements: Iterable[Statement], call_stack: CallStack) -> int:
        """Compile statements straight into a call stack."""
        return self.compile(statements, call_stack.add)

    def compile_statement(self, statement: Statement) -> ExecutableUnit:
        """Compile a single statement into an executable unit."""
        try:
            kind = recognize(statement.text)
            if kind is StatementKind.INT_DECLARATION:
                unit = self._int_declaration(statement)
            elif kind is StatementKind.STRING_DECLARATION:
                unit = self._string_declaration(statement)
            elif kind is StatementKind.COMMAND_CALL:
                unit = self._command_call(statement)
            else:
                raise error_invalid_statement(statement)
        except EngineError as exc:
            exc.attach(statement)
            raise
        log.debug("compiled %s as %s", statement, kind.value)
        return unit

    # --- Declarations ---

    def _int_declaration(self, statement: Statement) -> ExecutableUnit:
        return self._declaration(
            statement,
            Patterns.INT_DECLARATION_FORMAT,
            StatementKind.INT_DECLARATION,
            Integer.type_name,
            create_int_pair,
            build_integer_chain,
        )

    def _string_declaration(self, statement: Statement) -> ExecutableUnit:
        return self._declaration(
            statement,
            Patterns.STRING_DECLARATION_FORMAT,
            StatementKind.STRING_DECLARATION,
            CharacterCollection.type_name,
            create_string_pair,
            build_string_chain,
        )

    def _declaration(self, statement: Statement, pattern: re.Pattern,
                     kind: StatementKind, type_name: str,
                     make_pair: Callable[[str, Operand], OperationPair],
                     build_chain: Callable[..., Evaluator]) -> ExecutableUnit:
        match = pattern.match(statement.text)
        if match is None:
            raise error_malformed_declaration(kind.value, statement)

        name = match.group("name")
        tokens = tokenize(match.group("expr"), match.start("expr") + 1)

        references: List[str] = []

        def make_operand(token: Token) -> Operand:
            if token.type == TokenType.IDENTIFIER:
                cell = self._resolve(token, type_name)
                references.append(cell.id)
                return ReferenceOperand(cell)
            if type_name == Integer.type_name and token.type == TokenType.INT_LITERAL:
                return LiteralOperand(token.value)
            if type_name == CharacterCollection.type_name and token.type == TokenType.STRING_LITERAL:
                return LiteralOperand(token.value)
            raise error_invalid_operand(token.lexeme, token.offset + 1)

        pairs = pairs_from_tokens(tokens, make_operand, make_pair)

        # Register only once every operand resolved, so a failed
        # declaration leaves no cell behind.
        dest = make_cell(type_name, name)
        self.heap.put(dest)

        return ExecutableUnit(
            [dest.id] + references,
            build_chain(dest, *pairs),
            statement,
        )

    # --- Command calls ---

    def _command_call(self, statement: Statement) -> ExecutableUnit:
        match = Patterns.COMMAND_CALL_FORMAT.match(statement.text)
        if match is None:
            raise error_malformed_call(statement)

        command_name = match.group("name")
        expr_offset = match.start("expr")
        inline = Patterns.INLINE_EXPRESSION_FORMAT.match(match.group("expr"))
        if inline is None:
            raise error_malformed_call(statement)

        tokens = tokenize(inline.group("expr"), expr_offset + inline.start("expr") + 1)

        references: List[str] = []

        def make_operand(token: Token) -> Operand:
            if token.type == TokenType.IDENTIFIER:
                cell = self._resolve(token)
                references.append(cell.id)
                return ReferenceOperand(cell)
            if token.type in (TokenType.INT_LITERAL, TokenType.STRING_LITERAL):
                return LiteralOperand(token.value)
            raise error_invalid_operand(token.lexeme, token.offset + 1)

        pairs = pairs_from_tokens(tokens, make_operand, create_string_pair)

        dest = CharacterCollection(id=f"transient:{statement.index}")
        inner = ExecutableUnit(
            [dest.id] + references,
            build_inline_chain(dest, *pairs),
            statement,
        )
        # Raises UnknownCommandError for unregistered names
        evaluator = self.registry.make(command_name, inner)
        return ExecutableUnit(inner.get_dependencies(), evaluator, statement)

    # --- Helpers ---

    def _resolve(self, token: Token, expected_type: Optional[str] = None) -> Pointer:
        """Find the cell a name token refers to."""
        cell = self.heap.find(token.value)
        if cell is None:
            raise error_unknown_reference(token.value, token.offset + 1)
        if expected_type is not None and cell.type_name != expected_type:
            raise error_reference_type(token.value, expected_type, cell.type_name)
        return cell


def compile_statements(statements: Iterable[Statement], heap: Heap,
                       call_stack: CallStack) -> int:
    """Compile statements into `call_stack`, declaring variables in `heap`."""
    return StatementCompiler(heap).compile_into(statements, call_stack)
