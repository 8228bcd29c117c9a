"""
anglescript: a small compiler and interpreter for bracketed scripts.

This module provides:
- Lexer: Splits source text into bracketed statements
- StatementCompiler: Builds executable units and declares variables
- Engine: Builds and runs programs, reporting output and errors
- Runtime: Value cells, heap, operation chains and call stack

Usage:
    from anglescript import Engine, NotificationKind

    engine = Engine()
    engine.add_listener(NotificationKind.OUTPUT, print)
    engine.add_listener(NotificationKind.ERROR, print)

    engine.build('''
        <int x = 3 + 4>
        <string s = "x is ">
        <output(s + x)>
    ''')
    engine.run()
    # Build started...
    # Build finished...
    # Executing...
    # Output: x is 7
    # Done executing...
"""

from .tokens import (
    Token,
    TokenType,
    StatementKind,
    SourceLocation,
    SourceSpan,
    Statement,
    Patterns,
    recognize,
)

from .lexer import (
    Lexer,
    split_statements,
    tokenize,
)

from .errors import (
    EngineError,
    StatementSyntaxError,
    TypeMismatchError,
    UnknownReferenceError,
    InvalidOperatorError,
    UnknownCommandError,
    InvalidConstructionError,
    InternalError,
    Diagnostic,
    DiagnosticCollector,
    ErrorSeverity,
    error_type_mismatch,
)

from .runtime import (
    Pointer,
    Integer,
    CharacterCollection,
    derive_identifier,
    Heap,
    ExecutableUnit,
    UnitResult,
    Operator,
    OperationPair,
    LiteralOperand,
    ReferenceOperand,
    build_integer_chain,
    build_string_chain,
    SystemCommand,
    CommandRegistry,
    get_command_registry,
    make_system_command,
    CallStack,
)

from .compiler import (
    StatementCompiler,
    compile_statements,
)

from .config import (
    EngineConfig,
    load_config,
)

from .engine import (
    Engine,
    EngineState,
    EngineResult,
    Notification,
    NotificationKind,
    compile_and_run,
)

__version__ = "0.1.0"

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'StatementKind',
    'SourceLocation',
    'SourceSpan',
    'Statement',
    'Patterns',
    'recognize',

    # Lexer
    'Lexer',
    'split_statements',
    'tokenize',

    # Errors
    'EngineError',
    'StatementSyntaxError',
    'TypeMismatchError',
    'UnknownReferenceError',
    'InvalidOperatorError',
    'UnknownCommandError',
    'InvalidConstructionError',
    'InternalError',
    'Diagnostic',
    'DiagnosticCollector',
    'ErrorSeverity',
    'error_type_mismatch',

    # Runtime
    'Pointer',
    'Integer',
    'CharacterCollection',
    'derive_identifier',
    'Heap',
    'ExecutableUnit',
    'UnitResult',
    'Operator',
    'OperationPair',
    'LiteralOperand',
    'ReferenceOperand',
    'build_integer_chain',
    'build_string_chain',
    'SystemCommand',
    'CommandRegistry',
    'get_command_registry',
    'make_system_command',
    'CallStack',

    # Compiler
    'StatementCompiler',
    'compile_statements',

    # Config
    'EngineConfig',
    'load_config',

    # Engine
    'Engine',
    'EngineState',
    'EngineResult',
    'Notification',
    'NotificationKind',
    'compile_and_run',
]
