"""Runtime value definitions and helpers for Glossa.

This module defines the runtime type system used by the Glossa interpreter.
Every value produced by evaluation is a `RuntimeValue` carrying one of a
closed set of kind tags. The helpers here check values against declared
types and render them for output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional


INTEGER = 'Integer'
REAL = 'Real'
NUMBER = 'Number'  # generic numeric tag produced by arithmetic
STRING = 'String'
BOOLEAN = 'Boolean'
ARRAY = 'Array'

NUMERIC_KINDS = (INTEGER, REAL, NUMBER)
DECLARABLE_TYPES = (INTEGER, REAL, STRING, BOOLEAN)

TRUE_LITERAL = 'ΑΛΗΘΗΣ'
FALSE_LITERAL = 'ΨΕΥΔΗΣ'


@dataclass
class ErrorVal:
    """Represents a Glossa error.

    Errors carry a name (the error category, e.g. 'TypeError'), a message
    and, where known, the source position they refer to.
    """
    name: str
    message: str
    line: Optional[int] = None
    column: Optional[int] = None

    def describe(self) -> str:
        text = f"{self.name}: {self.message}"
        if self.line is not None and self.column is not None:
            text += f" (line {self.line}, column {self.column})"
        elif self.line is not None:
            text += f" (line {self.line})"
        return text


@dataclass(frozen=True)
class RuntimeValue:
    """A tagged value produced by evaluation.

    `kind` is one of Integer, Real, Number, String, Boolean or Array. The
    value of an Array is the backing list of cells; an empty cell is None.
    """
    kind: str
    value: Any

    def __repr__(self) -> str:
        return f"{self.kind}({self.value!r})"

    # Convenience constructors
    @staticmethod
    def integer(value: int) -> 'RuntimeValue':
        return RuntimeValue(INTEGER, value)

    @staticmethod
    def real(value: float) -> 'RuntimeValue':
        return RuntimeValue(REAL, value)

    @staticmethod
    def number(value: Any) -> 'RuntimeValue':
        return RuntimeValue(NUMBER, value)

    @staticmethod
    def string(value: str) -> 'RuntimeValue':
        return RuntimeValue(STRING, value)

    @staticmethod
    def boolean(value: bool) -> 'RuntimeValue':
        return RuntimeValue(BOOLEAN, bool(value))

    @staticmethod
    def array(cells: List[Optional['RuntimeValue']]) -> 'RuntimeValue':
        return RuntimeValue(ARRAY, cells)

    def is_numeric(self) -> bool:
        return self.kind in NUMERIC_KINDS


def is_integral(number: Any) -> bool:
    """Return True if a Python number has no fractional part."""
    if isinstance(number, int):
        return True
    return isinstance(number, float) and number.is_integer()


def check_value(value: RuntimeValue, declared: str) -> bool:
    """Check whether a runtime value may be stored under a declared type.

    The generic Number tag is accepted for both Integer and Real. On a
    mismatch a Python TypeError is raised; the caller converts it into a
    Glossa runtime error.
    """
    if value.kind == declared:
        return True
    if value.kind == NUMBER and declared in (INTEGER, REAL):
        return True
    raise TypeError(f"expected {declared}, got {value.kind}")


def check_cell_value(value: RuntimeValue, element_type: str) -> RuntimeValue:
    """Check a value assigned to an array cell, returning the value to store.

    Array cells of a numeric element type accept any numeric value, which is
    stored under the generic Number tag.
    """
    if element_type in (INTEGER, REAL) and value.is_numeric():
        return RuntimeValue.number(value.value)
    if value.kind == element_type:
        return value
    raise TypeError(f"array element expected {element_type}, got {value.kind}")


def format_number(number: Any) -> str:
    """Render a number the way the language prints it.

    Integral floats print without a fractional part, so 6 / 2 prints as 3.
    """
    if isinstance(number, float):
        if number.is_integer() and abs(number) < 1e21:
            return str(int(number))
        return repr(number)
    return str(number)


def to_string(value: RuntimeValue) -> str:
    """Convert a runtime value to its printed form."""
    if value.kind == BOOLEAN:
        return TRUE_LITERAL if value.value else FALSE_LITERAL
    if value.is_numeric():
        return format_number(value.value)
    if value.kind == ARRAY:
        return '[' + ', '.join('?' if cell is None else to_string(cell) for cell in value.value) + ']'
    return str(value.value)
