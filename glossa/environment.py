from typing import Any, Dict, List, Optional

from glossa.ast import FunctionDecl, ProcedureDecl
from glossa.errors import GlossaRuntimeError
from glossa.types import (
    RuntimeValue, check_value, check_cell_value, is_integral,
)


class Environment:
    """A scope mapping names to variables, constants and arrays.

    Environments form a chain through `parent`. Lookups and assignments
    resolve a name in the nearest environment that binds it. Functions and
    procedures are only declared in the root environment.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.variables: Dict[str, RuntimeValue] = {}
        self.declared_types: Dict[str, str] = {}
        self.constants: Dict[str, RuntimeValue] = {}
        self.arrays: Dict[str, List[Optional[RuntimeValue]]] = {}
        self.functions: Dict[str, FunctionDecl] = {}
        self.procedures: Dict[str, ProcedureDecl] = {}

    def declares(self, name: str) -> bool:
        """True if this environment itself binds `name`."""
        return name in self.declared_types or name in self.constants

    def resolve(self, name: str) -> 'Environment':
        if self.declares(name):
            return self
        if self.parent:
            return self.parent.resolve(name)
        raise GlossaRuntimeError('NameError', f"'{name}' is not declared")

    def declare_variable(self, name: str, type_name: str, length: Optional[int] = None):
        if self.declares(name):
            raise GlossaRuntimeError('NameError', f"'{name}' is already declared")
        if length is not None:
            if length < 1:
                raise GlossaRuntimeError('ValueError', f"array '{name}' must have a positive size, got {length}")
            self.arrays[name] = [None] * length
        self.declared_types[name] = type_name

    def declare_constant(self, name: str, value: RuntimeValue):
        if self.declares(name):
            raise GlossaRuntimeError('NameError', f"'{name}' is already declared")
        self.constants[name] = value

    def declare_function(self, name: str, func: FunctionDecl):
        if self.parent is not None:
            raise GlossaRuntimeError('NameError', 'functions can only be declared in the global scope')
        if name in self.functions:
            raise GlossaRuntimeError('NameError', f"function '{name}' is already declared")
        self.functions[name] = func

    def declare_procedure(self, name: str, proc: ProcedureDecl):
        if self.parent is not None:
            raise GlossaRuntimeError('NameError', 'procedures can only be declared in the global scope')
        if name in self.procedures:
            raise GlossaRuntimeError('NameError', f"procedure '{name}' is already declared")
        self.procedures[name] = proc

    def assign_variable(self, name: str, value: RuntimeValue, index: Optional[RuntimeValue] = None) -> RuntimeValue:
        env = self.resolve(name)
        if name in env.constants:
            raise GlossaRuntimeError('TypeError', f"cannot assign to constant '{name}'")
        declared = env.declared_types[name]
        if index is not None:
            cells = env.arrays.get(name)
            if cells is None:
                raise GlossaRuntimeError('TypeError', f"'{name}' is not an array")
            position = self.cell_position(name, index, len(cells))
            try:
                value = check_cell_value(value, declared)
            except TypeError as e:
                raise GlossaRuntimeError('TypeError', f"cannot assign to {name}[{position}]: {e}")
            cells[position - 1] = value
            return value
        if name in env.arrays:
            raise GlossaRuntimeError('TypeError', f"array '{name}' must be assigned one element at a time")
        try:
            check_value(value, declared)
        except TypeError as e:
            raise GlossaRuntimeError('TypeError', f"cannot assign to '{name}': {e}")
        env.variables[name] = value
        return value

    def look_up_variable(self, name: str, index: Optional[RuntimeValue] = None) -> RuntimeValue:
        env = self.resolve(name)
        if name in env.constants:
            if index is not None:
                raise GlossaRuntimeError('TypeError', f"constant '{name}' cannot be indexed")
            return env.constants[name]
        cells = env.arrays.get(name)
        if index is not None:
            if cells is None:
                raise GlossaRuntimeError('TypeError', f"'{name}' is not an array")
            position = self.cell_position(name, index, len(cells))
            value = cells[position - 1]
            if value is None:
                raise GlossaRuntimeError('NameError', f"{name}[{position}] has not been assigned a value")
            return value
        if cells is not None:
            return RuntimeValue.array(cells)
        if name not in env.variables:
            raise GlossaRuntimeError('NameError', f"variable '{name}' has not been assigned a value")
        return env.variables[name]

    def look_up_variable_type(self, name: str) -> str:
        env = self.resolve(name)
        if name in env.constants:
            return env.constants[name].kind
        return env.declared_types[name]

    def is_constant(self, name: str) -> bool:
        return name in self.resolve(name).constants

    def has_value(self, name: str) -> bool:
        """True if `name` is a constant or an assigned scalar variable."""
        env = self.resolve(name)
        return name in env.constants or name in env.variables

    def look_up_function(self, name: str) -> FunctionDecl:
        if name in self.functions:
            return self.functions[name]
        if self.parent:
            return self.parent.look_up_function(name)
        raise GlossaRuntimeError('NameError', f"function '{name}' is not declared")

    def has_function(self, name: str) -> bool:
        if name in self.functions:
            return True
        return self.parent.has_function(name) if self.parent else False

    def look_up_procedure(self, name: str) -> Optional[ProcedureDecl]:
        if name in self.procedures:
            return self.procedures[name]
        if self.parent:
            return self.parent.look_up_procedure(name)
        return None

    def array_lookup(self, name: str) -> Optional[List[Optional[RuntimeValue]]]:
        """Return the backing list of array `name`, or None if it is not an array."""
        if self.declares(name):
            return self.arrays.get(name)
        if self.parent:
            return self.parent.array_lookup(name)
        return None

    def set_array_argument(self, name: str, contents: List[Optional[RuntimeValue]]):
        """Bind array `name` in this environment to an existing list."""
        if name not in self.arrays:
            raise GlossaRuntimeError('TypeError', f"'{name}' is not an array")
        self.arrays[name] = contents

    @staticmethod
    def cell_position(name: str, index: Any, length: int) -> int:
        if not isinstance(index, RuntimeValue) or not index.is_numeric() or not is_integral(index.value):
            raise GlossaRuntimeError('TypeError', f"index of '{name}' must be an integer")
        position = int(index.value)
        if position < 1 or position > length:
            raise GlossaRuntimeError('IndexError', f"index {position} is out of range for '{name}' (1..{length})")
        return position
