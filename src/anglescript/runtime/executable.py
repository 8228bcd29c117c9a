"""
Executable units: compiled, re-runnable computations.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ..tokens import Statement


@dataclass(frozen=True)
class UnitResult:
    """
    Result of running an executable unit.

    `emit` marks values that should be forwarded to the output.
    """
    value: Any
    emit: bool = False


Evaluator = Callable[[], UnitResult]


class ExecutableUnit:
    """
    One compiled evaluator plus the identifiers it depends on.

    The dependencies are kept for introspection; the evaluator already
    holds its cells directly.
    """

    def __init__(self, dependencies: List[str], operation: Evaluator,
                 statement: Optional[Statement] = None):
        self._dependencies = list(dependencies)
        self._operation = operation
        self.statement = statement

    def get_dependencies(self) -> List[str]:
        """Return a copy of the identifiers this unit depends on."""
        return list(self._dependencies)

    @property
    def dependencies(self) -> List[str]:
        return self.get_dependencies()

    def execute(self) -> UnitResult:
        """Run the evaluator and return its result."""
        return self._operation()

    def __call__(self) -> UnitResult:
        return self.execute()

    def __repr__(self) -> str:
        source = f" {self.statement}" if self.statement is not None else ""
        return f"ExecutableUnit({len(self._dependencies)} deps){source}"
