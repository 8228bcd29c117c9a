"""
anglescript runtime.

This module provides:
- Value cells: Integer and CharacterCollection behind the Pointer base
- Heap: the named-variable store
- Operation chains: operand/operator pairs folded into a destination cell
- System commands: built-ins invoked with call syntax
- ExecutableUnit and CallStack: compiled units and their run order
"""

from .values import (
    Pointer,
    Integer,
    CharacterCollection,
    CELL_TYPES,
    make_cell,
    derive_identifier,
    is_strict_integer,
    is_mathematical_integer,
)

from .heap import Heap

from .executable import (
    ExecutableUnit,
    UnitResult,
    Evaluator,
)

from .operation import (
    Operator,
    OPERATOR_SYMBOLS,
    LiteralOperand,
    ReferenceOperand,
    OperationPair,
    create_int_pair,
    create_string_pair,
    pairs_from_tokens,
    build_integer_chain,
    build_string_chain,
    build_inline_chain,
)

from .commands import (
    SystemCommand,
    CommandRegistry,
    get_command_registry,
    make_system_command,
)

from .callstack import CallStack

__all__ = [
    # Values
    'Pointer',
    'Integer',
    'CharacterCollection',
    'CELL_TYPES',
    'make_cell',
    'derive_identifier',
    'is_strict_integer',
    'is_mathematical_integer',

    # Heap
    'Heap',

    # Units
    'ExecutableUnit',
    'UnitResult',
    'Evaluator',

    # Operations
    'Operator',
    'OPERATOR_SYMBOLS',
    'LiteralOperand',
    'ReferenceOperand',
    'OperationPair',
    'create_int_pair',
    'create_string_pair',
    'pairs_from_tokens',
    'build_integer_chain',
    'build_string_chain',
    'build_inline_chain',

    # Commands
    'SystemCommand',
    'CommandRegistry',
    'get_command_registry',
    'make_system_command',

    # Call stack
    'CallStack',
]
