"""
The call stack: ordered list of executable units run per `run()`.
"""

import logging
from typing import Any, Callable, Iterator, List, Optional

from .executable import ExecutableUnit
from ..errors import EngineError

log = logging.getLogger(__name__)


class CallStack:
    """
    Executable units in compile order, run first in, first out.

    Any exception raised by a unit stops the remaining units; effects of
    units that already ran are kept.
    """

    def __init__(self):
        self._units: List[ExecutableUnit] = []

    def add(self, unit: ExecutableUnit) -> None:
        """Append a unit."""
        self._units.append(unit)
        log.debug("queued %r", unit)

    def clear(self) -> None:
        self._units = []

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[ExecutableUnit]:
        return iter(list(self._units))

    def execute(self, emit: Optional[Callable[[Any], None]] = None) -> List[Any]:
        """
        Run every unit once, in order.

        Each result marked for output is passed to `emit` as it happens.
        Returns the emitted values.
        """
        emitted = []
        for unit in self._units:
            try:
                result = unit.execute()
            except EngineError as exc:
                if unit.statement is not None:
                    exc.attach(unit.statement)
                raise
            if result.emit:
                emitted.append(result.value)
                if emit is not None:
                    emit(result.value)
        return emitted
