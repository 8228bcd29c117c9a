"""
Operation chains.

An operation chain is an ordered list of (operand, operator) pairs folded
left to right into an accumulator, whose final value is written to a
destination cell. There is no operator precedence: `2 + 3 * 4` is 20.

Operands are literals or references to cells. References are read when the
chain runs, not when it is built, so a cell changed between build and run
is seen with its new value.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, List, Sequence, Union

from .executable import Evaluator, UnitResult
from .values import Pointer, is_strict_integer, is_mathematical_integer
from ..errors import (
    error_invalid_operator,
    error_invalid_operator_symbol,
    error_operator_not_supported,
    error_type_mismatch,
    error_misplaced_operator,
)
from ..tokens import Token, TokenType


class Operator(Enum):
    """Operators an operation pair can carry."""
    EQUAL = 0
    ADD = 1
    SUBTRACT = 2
    MULTIPLY = 3


OPERATOR_SYMBOLS = MappingProxyType({
    "=": Operator.EQUAL,
    "+": Operator.ADD,
    "-": Operator.SUBTRACT,
    "*": Operator.MULTIPLY,
})

STRING_OPERATORS = frozenset({Operator.EQUAL, Operator.ADD})


@dataclass(frozen=True)
class LiteralOperand:
    """A constant operand."""
    value: Any

    def resolve(self) -> Any:
        return self.value


@dataclass(frozen=True)
class ReferenceOperand:
    """An operand read from a cell when the chain runs."""
    cell: Pointer

    def resolve(self) -> Any:
        return self.cell.get_value()

    @property
    def id(self) -> str:
        return self.cell.id


Operand = Union[LiteralOperand, ReferenceOperand]


@dataclass(frozen=True)
class OperationPair:
    """An operand together with the operator applied to it."""
    operand: Operand
    operator: Operator

    @property
    def value(self) -> Any:
        return self.operand.resolve()

    def get_value(self) -> Any:
        return self.operand.resolve()


def _operator_for(symbol: str) -> Operator:
    try:
        return OPERATOR_SYMBOLS[symbol]
    except KeyError:
        raise error_invalid_operator_symbol(symbol) from None


def create_int_pair(symbol: str, operand: Union[Operand, str, int]) -> OperationPair:
    """
    Create an integer operation pair.

    `operand` may be a ready operand, an int, or the text of an integer
    literal. Raises TypeMismatchError if a literal is not a strict integer
    and InvalidOperatorError for an unknown symbol.
    """
    operator = _operator_for(symbol)
    if isinstance(operand, (LiteralOperand, ReferenceOperand)):
        return OperationPair(operand, operator)
    if isinstance(operand, str):
        if not is_strict_integer(operand):
            raise error_type_mismatch("int", operand)
        return OperationPair(LiteralOperand(int(operand)), operator)
    if not is_mathematical_integer(operand):
        raise error_type_mismatch("int", operand)
    return OperationPair(LiteralOperand(int(operand)), operator)


def create_string_pair(symbol: str, operand: Union[Operand, str]) -> OperationPair:
    """
    Create a string operation pair.

    Only '=' and '+' apply to strings; '-' and '*' raise TypeMismatchError.
    """
    operator = _operator_for(symbol)
    if operator not in STRING_OPERATORS:
        raise error_operator_not_supported(symbol, "string")
    if isinstance(operand, (LiteralOperand, ReferenceOperand)):
        return OperationPair(operand, operator)
    return OperationPair(LiteralOperand(operand), operator)


def pairs_from_tokens(tokens: Sequence[Token],
                      make_operand: Callable[[Token], Operand],
                      make_pair: Callable[[str, Operand], OperationPair]) -> List[OperationPair]:
    """
    Turn an alternating operand/operator token stream into operation pairs.

    The first operand always gets '=' whatever precedes it; every operator
    token sets the operator of the operand that follows it.
    """
    pairs: List[OperationPair] = []
    symbol = "="
    expect_operand = True
    for token in tokens:
        if token.is_operator or token.type == TokenType.ASSIGN:
            if expect_operand:
                raise error_misplaced_operator(token.lexeme, token.offset + 1)
            symbol = token.lexeme
            expect_operand = True
            continue
        if not expect_operand:
            raise error_misplaced_operator(token.lexeme, token.offset + 1)
        pairs.append(make_pair("=" if not pairs else symbol, make_operand(token)))
        expect_operand = False
    if expect_operand and tokens:
        last = tokens[-1]
        raise error_misplaced_operator(last.lexeme, last.offset + 1)
    return pairs


def build_integer_chain(dest: Pointer, *pairs: OperationPair) -> Evaluator:
    """
    Return an evaluator writing the integer result of `pairs` into `dest`.

    The accumulator starts at 0; EQUAL replaces it, ADD/SUBTRACT/MULTIPLY
    combine. An unknown operator raises InvalidOperatorError when run.
    """
    def evaluate() -> UnitResult:
        final_value = 0
        for pair in pairs:
            operator = pair.operator
            if operator is Operator.EQUAL:
                final_value = pair.value
            elif operator is Operator.ADD:
                final_value += pair.value
            elif operator is Operator.SUBTRACT:
                final_value -= pair.value
            elif operator is Operator.MULTIPLY:
                final_value *= pair.value
            else:
                raise error_invalid_operator(operator)
        dest.set_value(final_value)
        return UnitResult(dest.get_value(), emit=False)

    return evaluate


def build_string_chain(dest: Pointer, *pairs: OperationPair) -> Evaluator:
    """
    Return an evaluator writing the concatenation of `pairs` into `dest`.

    The accumulator starts empty; only EQUAL and ADD are legal, anything
    else raises InvalidOperatorError when run.
    """
    def evaluate() -> UnitResult:
        final_value = ""
        for pair in pairs:
            operator = pair.operator
            if operator is Operator.EQUAL:
                final_value = pair.value
            elif operator is Operator.ADD:
                final_value += pair.value
            else:
                raise error_invalid_operator(operator)
        dest.set_value(final_value)
        return UnitResult(dest.get_value(), emit=False)

    return evaluate


def build_inline_chain(dest: Pointer, *pairs: OperationPair) -> Evaluator:
    """String chain whose operands are converted to text first."""
    def evaluate() -> UnitResult:
        final_value = ""
        for pair in pairs:
            operator = pair.operator
            if operator is Operator.EQUAL:
                final_value = str(pair.value)
            elif operator is Operator.ADD:
                final_value += str(pair.value)
            else:
                raise error_invalid_operator(operator)
        dest.set_value(final_value)
        return UnitResult(dest.get_value(), emit=False)

    return evaluate
