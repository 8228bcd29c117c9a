"""
Value cells (pointers) for the anglescript runtime.

A cell is a typed, mutable storage location identified by a stable string
key. Two variants exist: Integer and CharacterCollection. Both share the
capability set of the Pointer base, which itself cannot be instantiated.
"""

import hashlib
import numbers
from typing import Any, Optional

from ..errors import error_abstract_instantiation, error_type_mismatch
from ..tokens import Patterns


def derive_identifier(name: str) -> str:
    """
    Derive the heap identifier of a source-level variable name.

    Uses a SHA-256 hash of the name, so the same name always maps to the
    same identifier.
    """
    return f"var:{hashlib.sha256(name.encode()).hexdigest()}"


def is_strict_integer(text: str) -> bool:
    """Check if text is a sign-free run of digits."""
    return isinstance(text, str) and Patterns.INT_TOKEN.match(text) is not None


def is_mathematical_integer(value: Any) -> bool:
    """Check if value is a number with no fractional part (bools excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Integral):
        return True
    if isinstance(value, numbers.Real):
        try:
            return float(value).is_integer()
        except (OverflowError, ValueError):
            return False
    return False


class Pointer:
    """
    Base of all value cells.

    Subclasses implement set_value, get_value and pass_by_value. Creating a
    Pointer directly raises InvalidConstructionError.
    """

    type_name = "pointer"

    def __init__(self, id: str, name: Optional[str] = None):
        if type(self) is Pointer:
            raise error_abstract_instantiation(Pointer.__name__)
        self._id = id
        self._name = name

    def get_id(self) -> str:
        """Return the unique identifier of the cell."""
        return self._id

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> Optional[str]:
        """Source-level variable name, None for transient cells."""
        return self._name

    @property
    def value(self) -> Any:
        return self.get_value()

    def set_value(self, new_value: Any) -> None:
        raise NotImplementedError("Method set_value not implemented.")

    def get_value(self) -> Any:
        raise NotImplementedError("Method get_value not implemented.")

    def pass_by_value(self, id: str) -> "Pointer":
        """Return an independent copy of the cell under a new identifier."""
        raise NotImplementedError("Method pass_by_value not implemented.")

    def __repr__(self) -> str:
        label = self._name if self._name is not None else self._id
        return f"{type(self).__name__}({label}={self.get_value()!r})"


class Integer(Pointer):
    """An integer cell."""

    type_name = "int"

    def __init__(self, value: Any = 0, id: str = "", name: Optional[str] = None):
        super().__init__(id, name)
        self._value = 0
        self.set_value(value)

    def set_value(self, new_value: Any) -> None:
        """
        Set a new integer value.

        Raises TypeMismatchError unless new_value is a mathematical integer;
        a float such as 3.0 is stored as 3.
        """
        if not is_mathematical_integer(new_value):
            raise error_type_mismatch(self.type_name, new_value)
        self._value = int(new_value)

    def get_value(self) -> int:
        return self._value

    def pass_by_value(self, id: str) -> "Integer":
        return Integer(self._value, id, self._name)


class CharacterCollection(Pointer):
    """A text cell."""

    type_name = "string"

    def __init__(self, value: Any = "", id: str = "", name: Optional[str] = None):
        super().__init__(id, name)
        self._value = ""
        self.set_value(value)

    def set_value(self, new_value: Any) -> None:
        """Set a new text value; raises TypeMismatchError for non-text."""
        if not isinstance(new_value, str):
            raise error_type_mismatch(self.type_name, new_value)
        self._value = new_value

    def get_value(self) -> str:
        return self._value

    def pass_by_value(self, id: str) -> "CharacterCollection":
        return CharacterCollection(self._value, id, self._name)


CELL_TYPES = {
    Integer.type_name: Integer,
    CharacterCollection.type_name: CharacterCollection,
}


def make_cell(type_name: str, name: str) -> Pointer:
    """Create a zero-valued cell of the given type for a variable name."""
    return CELL_TYPES[type_name](id=derive_identifier(name), name=name)
