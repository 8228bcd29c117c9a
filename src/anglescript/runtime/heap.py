"""
The heap: named-variable store of the anglescript runtime.

Maps cell identifiers to cells. At most one cell exists per identifier;
putting a second cell with the same identifier replaces the first.
"""

import logging
from typing import Any, Dict, Iterator, Optional

from .values import Pointer, derive_identifier
from ..errors import error_invalid_memory_reference, error_unknown_reference

log = logging.getLogger(__name__)


class Heap:
    """Identifier to cell mapping, in insertion order."""

    def __init__(self):
        self._cells: Dict[str, Pointer] = {}

    def put(self, cell: Pointer) -> None:
        """Store a cell, overwriting any cell with the same identifier."""
        if cell.id in self._cells:
            log.debug("overwriting %r", self._cells[cell.id])
        self._cells[cell.id] = cell
        log.debug("allocated %r", cell)

    def remove(self, id: str) -> None:
        """Remove the cell with this identifier, if present."""
        self._cells.pop(id, None)

    def get(self, id: str) -> Pointer:
        """
        Return the cell stored under an identifier.

        Raises UnknownReferenceError if no such cell exists.
        """
        try:
            return self._cells[id]
        except KeyError:
            raise error_invalid_memory_reference(id) from None

    def lookup(self, name: str) -> Pointer:
        """
        Return the cell of a source-level variable name.

        Raises UnknownReferenceError if the variable was never declared.
        """
        cell = self._cells.get(derive_identifier(name))
        if cell is None:
            raise error_unknown_reference(name)
        return cell

    def find(self, name: str) -> Optional[Pointer]:
        """Like lookup, but returns None for unknown names."""
        return self._cells.get(derive_identifier(name))

    def clear(self) -> None:
        self._cells.clear()

    def contains(self, id: str) -> bool:
        return id in self._cells

    def __contains__(self, id: str) -> bool:
        return self.contains(id)

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[Pointer]:
        return iter(list(self._cells.values()))

    def snapshot(self) -> Dict[str, Any]:
        """Return {variable name: current value} for every cell."""
        return {
            (cell.name if cell.name is not None else cell.id): cell.get_value()
            for cell in self._cells.values()
        }
