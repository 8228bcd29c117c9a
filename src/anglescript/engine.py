"""
The anglescript engine.

Top-level orchestrator: `build(source)` splits the text into statements and
compiles them into the heap and call stack; `run()` executes the call stack.
Progress, program output and errors are delivered as notifications to the
registered listeners, synchronously and in registration order.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .compiler import StatementCompiler
from .config import EngineConfig
from .errors import Diagnostic, DiagnosticCollector, EngineError, error_internal
from .lexer import Lexer
from .runtime.callstack import CallStack
from .runtime.commands import CommandRegistry
from .runtime.heap import Heap
from .runtime.values import Pointer

log = logging.getLogger(__name__)


class NotificationKind(Enum):
    OUTPUT = "output"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A message emitted by the engine."""
    kind: NotificationKind
    message: str
    diagnostic: Optional[Diagnostic] = None


class EngineState(Enum):
    IDLE = "idle"
    BUILT = "built"
    RAN = "ran"


@dataclass
class EngineResult:
    """Result of a build or a run."""
    success: bool
    outputs: List[Any] = field(default_factory=list)
    diagnostic: Optional[Diagnostic] = None
    unit_count: int = 0

    @property
    def error_message(self) -> Optional[str]:
        if self.diagnostic is None:
            return None
        return self.diagnostic.message


Listener = Callable[[str], None]
Observer = Callable[[Notification], None]


class Engine:
    """
    Compiles and runs anglescript programs.

    Usage:
        engine = Engine()
        engine.add_listener(NotificationKind.OUTPUT, print)
        engine.add_listener(NotificationKind.ERROR, print)
        engine.build('<string s = "hello"><output(s)>')
        engine.run()

    The heap and call stack belong to the engine and change only during
    `build`. A failed build leaves whatever compiled before the failing
    statement in place.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 registry: Optional[CommandRegistry] = None):
        self.config = config or EngineConfig()
        self._heap = Heap()
        self._call_stack = CallStack()
        self._compiler = StatementCompiler(self._heap, registry)
        self._listeners: Dict[NotificationKind, List[Listener]] = {
            kind: [] for kind in NotificationKind
        }
        self._observers: List[Observer] = []
        self.diagnostics = DiagnosticCollector(self.config.max_diagnostics)
        self._state = EngineState.IDLE

    # --- Listeners ---

    def add_listener(self, kind: NotificationKind, callback: Listener) -> None:
        """Call `callback(message)` for every notification of `kind`."""
        self._listeners[kind].append(callback)

    def remove_listener(self, kind: NotificationKind, callback: Listener) -> None:
        if callback in self._listeners[kind]:
            self._listeners[kind].remove(callback)

    def add_observer(self, callback: Observer) -> None:
        """Call `callback(notification)` for every notification."""
        self._observers.append(callback)

    def remove_observer(self, callback: Observer) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self, notification: Notification) -> None:
        for listener in list(self._listeners[notification.kind]):
            listener(notification.message)
        for observer in list(self._observers):
            observer(notification)

    def _output(self, message: str) -> None:
        self._notify(Notification(NotificationKind.OUTPUT, message))

    def _error(self, error: EngineError) -> Diagnostic:
        diagnostic = error.diagnostic
        self.diagnostics.add(diagnostic)
        self._notify(Notification(
            NotificationKind.ERROR,
            diagnostic.format(self.config.show_source),
            diagnostic,
        ))
        return diagnostic

    # --- Commands ---

    def build(self, source: str) -> EngineResult:
        """
        Compile `source`, replacing the previous program.

        Stops at the first statement that fails to compile and reports it
        as an error notification.
        """
        self._output(self.config.build_started)
        self._heap.clear()
        self._call_stack.clear()
        self._state = EngineState.IDLE

        statements = Lexer(source).split()
        try:
            self._compiler.compile(statements, self._call_stack.add)
        except EngineError as exc:
            log.info("build failed: %s", exc.diagnostic.message)
            return EngineResult(False, diagnostic=self._error(exc),
                                unit_count=len(self._call_stack))
        except Exception as exc:
            log.exception("unexpected error during build")
            return EngineResult(False, diagnostic=self._error(error_internal(exc)),
                                unit_count=len(self._call_stack))

        self._state = EngineState.BUILT
        log.info("built %d unit(s), %d variable(s)",
                 len(self._call_stack), len(self._heap))
        self._output(self.config.build_finished)
        return EngineResult(True, unit_count=len(self._call_stack))

    def run(self) -> EngineResult:
        """Execute the compiled program, forwarding its output."""
        self._output(self.config.executing)
        outputs: List[Any] = []

        def emit(value: Any) -> None:
            outputs.append(value)
            self._output(self.config.format_output(value))

        try:
            self._call_stack.execute(emit)
        except EngineError as exc:
            self._state = EngineState.RAN
            log.info("run failed: %s", exc.diagnostic.message)
            return EngineResult(False, outputs, self._error(exc), len(self._call_stack))
        except Exception as exc:
            self._state = EngineState.RAN
            log.exception("unexpected error during run")
            return EngineResult(False, outputs, self._error(error_internal(exc)),
                                len(self._call_stack))

        self._state = EngineState.RAN
        log.info("ran %d unit(s), %d output(s)", len(self._call_stack), len(outputs))
        self._output(self.config.done_executing)
        return EngineResult(True, outputs, unit_count=len(self._call_stack))

    # --- Introspection ---

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def unit_count(self) -> int:
        return len(self._call_stack)

    @property
    def variable_count(self) -> int:
        return len(self._heap)

    def lookup(self, name: str) -> Optional[Pointer]:
        """Return a copy of the cell of variable `name`, or None."""
        cell = self._heap.find(name)
        if cell is None:
            return None
        return cell.pass_by_value(cell.id)

    def variables(self) -> Dict[str, Any]:
        """Return {name: value} of every declared variable."""
        return self._heap.snapshot()

    def cells(self) -> List[Pointer]:
        """Return copies of every cell, in declaration order."""
        return [cell.pass_by_value(cell.id) for cell in self._heap]

    def dependencies(self) -> List[List[str]]:
        """Return the dependency identifiers of every unit, in run order."""
        return [unit.get_dependencies() for unit in self._call_stack]


def compile_and_run(source: str, config: Optional[EngineConfig] = None,
                    listener: Optional[Observer] = None) -> EngineResult:
    """
    Build and run `source` on a fresh engine.

    Returns the build result if the build fails, otherwise the run result.
    """
    engine = Engine(config)
    if listener is not None:
        engine.add_observer(listener)
    result = engine.build(source)
    if not result.success:
        return result
    return engine.run()
