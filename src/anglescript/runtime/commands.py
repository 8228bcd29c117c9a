"""
System command registry.

System commands are the built-ins invoked with call syntax, `<output(s)>`.
Each one wraps the executable unit compiled from its inline argument and
returns a new evaluator.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .executable import Evaluator, ExecutableUnit, UnitResult
from ..errors import error_unknown_command


@dataclass
class SystemCommand:
    """A built-in command with its implementation."""
    name: str
    implementation: Callable[[ExecutableUnit], Evaluator]
    doc: str = ""


def _output(inner: ExecutableUnit) -> Evaluator:
    def evaluate() -> UnitResult:
        result = inner.execute()
        return UnitResult(result.value, emit=True)
    return evaluate


class CommandRegistry:
    """
    Registry of all system commands.

    Commands are registered by name and looked up while compiling call
    statements.
    """

    def __init__(self):
        self._commands: Dict[str, SystemCommand] = {}
        self._register_all()

    def get_command(self, name: str) -> Optional[SystemCommand]:
        """Look up a command by name."""
        return self._commands.get(name)

    def has_command(self, name: str) -> bool:
        return name in self._commands

    def register(self, command: SystemCommand) -> None:
        """Register a command."""
        self._commands[command.name] = command

    @property
    def names(self) -> List[str]:
        return sorted(self._commands)

    def _register_all(self) -> None:
        self.register(SystemCommand(
            name="output",
            implementation=_output,
            doc="Evaluate the argument and write it to the output.",
        ))

    def make(self, name: str, inner: ExecutableUnit) -> Evaluator:
        """
        Wrap `inner` with the named command.

        Raises UnknownCommandError if the name is not registered.
        """
        command = self.get_command(name)
        if command is None:
            raise error_unknown_command(name, self.names)
        return command.implementation(inner)


# Global registry instance
_registry: Optional[CommandRegistry] = None


def get_command_registry() -> CommandRegistry:
    """Get the global system command registry."""
    global _registry
    if _registry is None:
        _registry = CommandRegistry()
    return _registry


def make_system_command(name: str, inner: ExecutableUnit) -> Evaluator:
    """
    Return the evaluator of system command `name` wrapping `inner`.

    Raises UnknownCommandError if no such command exists.
    """
    return get_command_registry().make(name, inner)
