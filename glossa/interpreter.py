"""Interpreter for the Glossa language.

This module implements the evaluator: it walks a parsed `Program` against a
chain of `Environment` scopes, reading input lines from and writing output
lines to an I/O channel. Statements are run by `execute`, expressions are
computed by `evaluate`; every expression yields a `RuntimeValue`.

Functions and procedures run in a fresh child of the global environment.
Both bind their arguments when their body reaches ΑΡΧΗ, but they bind array
arguments differently: a function receives a copy of the caller's array, a
procedure shares the caller's array. After a procedure returns, the final
values of its scalar parameters are written back to the caller's variables.
"""

from __future__ import annotations

import math
import operator
import re
import sys
from typing import Callable, Dict, Iterable, List, Optional, Union

from .ast import (
    Program, StartStmt, VarDecl, DeclTarget, ConstDecl, IfStmt, ForStmt,
    WhileStmt, DoWhileStmt, FunctionDecl, ProcedureDecl, Assign, BinaryOp,
    UnaryOp, Ident, IntegerLiteral, RealLiteral, StringLiteral,
    BooleanLiteral, FunctionCall, ProcedureCall, PrintStmt, ReadStmt, Node,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import GlossaRuntimeError
from .parser import parse_program
from .std.io import IOChannel, BufferedIO, ConsoleIO
from .types import (
    RuntimeValue, INTEGER, REAL, NUMBER, STRING, BOOLEAN,
    format_number, is_integral, to_string,
)


RETURN_TYPES = {
    'ΑΚΕΡΑΙΑ': INTEGER,
    'ΠΡΑΓΜΑΤΙΚΗ': REAL,
    'ΑΛΦΑΡΙΘΜΗΤΙΚΗ': STRING,
    'ΛΟΓΙΚΗ': BOOLEAN,
}

LOGICAL_OPS = ('ΚΑΙ', 'Ή')

COMPARATORS = {
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
    '<>': operator.ne,
    '=': operator.eq,
}

ArrayCells = List[Optional[RuntimeValue]]

# ΔΙΑΒΑΣΕ accepts plain decimal notation only
INTEGER_INPUT = re.compile(r'[+-]?[0-9]+')
REAL_INPUT = re.compile(r'[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?')

# each Glossa call takes about a dozen Python frames
RECURSION_LIMIT = 10000


def copy_array(cells: ArrayCells) -> ArrayCells:
    """Binding strategy for function arguments."""
    return list(cells)


def alias_array(cells: ArrayCells) -> ArrayCells:
    """Binding strategy for procedure arguments."""
    return cells


def contains_io(statements: List[Node]) -> bool:
    """True if ΓΡΑΨΕ or ΔΙΑΒΑΣΕ appears anywhere in `statements`."""
    for stmt in statements:
        if isinstance(stmt, (PrintStmt, ReadStmt)):
            return True
        if isinstance(stmt, IfStmt):
            if contains_io(stmt.consequent):
                return True
            if isinstance(stmt.alternate, IfStmt):
                if contains_io([stmt.alternate]):
                    return True
            elif stmt.alternate is not None and contains_io(stmt.alternate):
                return True
        elif isinstance(stmt, (ForStmt, WhileStmt, DoWhileStmt)):
            if contains_io(stmt.body):
                return True
    return False


def remainder(a, b):
    # sign follows the dividend
    if isinstance(a, int) and isinstance(b, int):
        r = abs(a) % abs(b)
        return -r if a < 0 else r
    return math.fmod(a, b)


def floor_division(a, b):
    if isinstance(a, int) and isinstance(b, int):
        return a // b
    return math.floor(a / b)


class Interpreter:
    """Core interpreter that executes a Glossa Program."""
    def __init__(self, io: Optional[IOChannel] = None, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.global_env = Environment()
        self.io = io if io is not None else ConsoleIO()
        self.builtins: Dict[str, BuiltinFunction] = {}
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        self.load_standard_module()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Standard module loading
    def load_standard_module(self):
        # Built-in numeric functions: Α_Μ, Α_Τ, Τ_Ρ, ΗΜ, ΣΥΝ, ΕΦ, ΛΟΓ, Ε

        def numeric_arg(name: str, args: List[RuntimeValue]):
            value = args[0]
            if not value.is_numeric():
                raise GlossaRuntimeError('TypeError', f"{name} expects a number, got {value.kind}")
            return value.value

        def std_int_part(args: List[RuntimeValue]) -> RuntimeValue:
            return RuntimeValue.integer(int(numeric_arg('Α_Μ', args)))

        def std_abs(args: List[RuntimeValue]) -> RuntimeValue:
            return RuntimeValue.number(abs(numeric_arg('Α_Τ', args)))

        def std_sqrt(args: List[RuntimeValue]) -> RuntimeValue:
            x = numeric_arg('Τ_Ρ', args)
            if x < 0:
                raise GlossaRuntimeError('ValueError', f"Τ_Ρ of a negative number ({format_number(x)})")
            return RuntimeValue.number(math.sqrt(x))

        def std_sin(args: List[RuntimeValue]) -> RuntimeValue:
            return RuntimeValue.number(math.sin(math.radians(numeric_arg('ΗΜ', args))))

        def std_cos(args: List[RuntimeValue]) -> RuntimeValue:
            return RuntimeValue.number(math.cos(math.radians(numeric_arg('ΣΥΝ', args))))

        def std_tan(args: List[RuntimeValue]) -> RuntimeValue:
            return RuntimeValue.number(math.tan(math.radians(numeric_arg('ΕΦ', args))))

        def std_log(args: List[RuntimeValue]) -> RuntimeValue:
            x = numeric_arg('ΛΟΓ', args)
            if x <= 0:
                raise GlossaRuntimeError('ValueError', f"ΛΟΓ of a non-positive number ({format_number(x)})")
            return RuntimeValue.number(math.log(x))

        def std_exp(args: List[RuntimeValue]) -> RuntimeValue:
            return RuntimeValue.number(math.exp(numeric_arg('Ε', args)))

        self.builtins['Α_Μ'] = BuiltinFunction('Α_Μ', 1, INTEGER, std_int_part)
        self.builtins['Α_Τ'] = BuiltinFunction('Α_Τ', 1, NUMBER, std_abs)
        self.builtins['Τ_Ρ'] = BuiltinFunction('Τ_Ρ', 1, NUMBER, std_sqrt)
        self.builtins['ΗΜ'] = BuiltinFunction('ΗΜ', 1, NUMBER, std_sin)
        self.builtins['ΣΥΝ'] = BuiltinFunction('ΣΥΝ', 1, NUMBER, std_cos)
        self.builtins['ΕΦ'] = BuiltinFunction('ΕΦ', 1, NUMBER, std_tan)
        self.builtins['ΛΟΓ'] = BuiltinFunction('ΛΟΓ', 1, NUMBER, std_log)
        self.builtins['Ε'] = BuiltinFunction('Ε', 1, NUMBER, std_exp)

    # Public API
    def run(self, program: Program) -> List[str]:
        """Execute `program` against a fresh global environment.

        Returns the lines printed so far on the I/O channel.
        """
        self.global_env = Environment()
        for func in program.functions.values():
            self.global_env.declare_function(func.name, func)
        for proc in program.procedures.values():
            self.global_env.declare_procedure(proc.name, proc)
        if self.debug_level >= 1:
            self.debug(f"run program {program.name}")
        previous_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(previous_limit, RECURSION_LIMIT))
        try:
            self.execute_block(program.body, self.global_env)
        except RecursionError:
            raise GlossaRuntimeError('RecursionError', 'too many nested function or procedure calls')
        finally:
            sys.setrecursionlimit(previous_limit)
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None
        return self.io.output

    def execute_block(self, statements: List[Node], env: Environment):
        for stmt in statements:
            try:
                self.execute(stmt, env)
            except GlossaRuntimeError as ex:
                # locate the error at the innermost statement
                if ex.err.line is None and stmt.line:
                    ex.err.line = stmt.line
                raise

    def execute(self, node: Node, env: Environment):
        if isinstance(node, VarDecl):
            for target in node.targets:
                length = self.evaluate_length(target, env) if target.length is not None else None
                env.declare_variable(target.name, node.var_type, length)
                if self.debug_level >= 2:
                    suffix = f"[{length}]" if length is not None else ''
                    self.debug(f"declare {target.name}{suffix}: {node.var_type}")
            return
        if isinstance(node, ConstDecl):
            for entry in node.entries:
                value = self.evaluate(entry.value, env)
                env.declare_constant(entry.name, value)
                if self.debug_level >= 2:
                    self.debug(f"declare constant {entry.name} = {to_string(value)}")
            return
        if isinstance(node, StartStmt):
            # routine arguments are bound by call_function / call_procedure
            return
        if isinstance(node, IfStmt):
            self.execute_if(node, env)
            return
        if isinstance(node, ForStmt):
            self.execute_for(node, env)
            return
        if isinstance(node, WhileStmt):
            while self.condition_value(node.condition, env, 'ΟΣΟ'):
                self.execute_block(node.body, env)
            return
        if isinstance(node, DoWhileStmt):
            while True:
                self.execute_block(node.body, env)
                if self.condition_value(node.condition, env, 'ΜΕΧΡΙΣ_ΟΤΟΥ'):
                    break
            return
        if isinstance(node, PrintStmt):
            values = [self.evaluate(value, env) for value in node.values]
            self.io.emit(''.join(to_string(value) + ' ' for value in values))
            return
        if isinstance(node, ReadStmt):
            self.read_input(node, env)
            return
        if isinstance(node, ProcedureCall):
            self.call_procedure(node, env)
            return
        if isinstance(node, (Assign, FunctionCall)):
            self.evaluate(node, env)
            return
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def evaluate(self, node: Node, env: Environment) -> RuntimeValue:
        # Evaluate expression nodes
        if isinstance(node, IntegerLiteral):
            return RuntimeValue.integer(node.value)
        if isinstance(node, RealLiteral):
            return RuntimeValue.real(node.value)
        if isinstance(node, StringLiteral):
            return RuntimeValue.string(node.value)
        if isinstance(node, BooleanLiteral):
            return RuntimeValue.boolean(node.value)
        if isinstance(node, Ident):
            index = self.evaluate(node.index, env) if node.index is not None else None
            return env.look_up_variable(node.name, index)
        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            target = node.target
            index = self.evaluate(target.index, env) if target.index is not None else None
            env.assign_variable(target.name, value, index)
            if self.debug_level >= 2:
                self.debug(f"assign {target.name} = {to_string(value)}")
            return value
        if isinstance(node, BinaryOp):
            # right operand first
            right = self.evaluate(node.right, env)
            left = self.evaluate(node.left, env)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand, env)
            if node.op in ('-', '+'):
                if not operand.is_numeric():
                    raise GlossaRuntimeError('TypeError', f"unary {node.op} expects a number, got {operand.kind}")
                return RuntimeValue.number(-operand.value if node.op == '-' else operand.value)
            if operand.kind != BOOLEAN:
                raise GlossaRuntimeError('TypeError', f"{node.op} expects a Boolean, got {operand.kind}")
            return RuntimeValue.boolean(not operand.value)
        if isinstance(node, FunctionCall):
            return self.call_function(node, env)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def evaluate_length(self, target: DeclTarget, env: Environment) -> int:
        length = self.evaluate(target.length, env)
        if not length.is_numeric() or not is_integral(length.value):
            raise GlossaRuntimeError('TypeError', f"size of array '{target.name}' must be an integer")
        return int(length.value)

    def condition_value(self, node: Node, env: Environment, construct: str) -> bool:
        cond = self.evaluate(node, env)
        if cond.kind != BOOLEAN:
            raise GlossaRuntimeError('TypeError', f"the condition of {construct} must be a Boolean, got {cond.kind}")
        if self.debug_level >= 3:
            self.debug(f"{construct} condition -> {to_string(cond)}")
        return cond.value

    def execute_if(self, node: IfStmt, env: Environment):
        if self.condition_value(node.condition, env, 'ΑΝ'):
            self.execute_block(node.consequent, env)
        elif isinstance(node.alternate, IfStmt):
            self.execute_if(node.alternate, env)
        elif node.alternate is not None:
            self.execute_block(node.alternate, env)

    def execute_for(self, node: ForStmt, env: Environment):
        start = self.evaluate(node.start, env)
        end = self.evaluate(node.end, env)
        step = self.evaluate(node.step, env)
        for label, value in (('start', start), ('end', end), ('step', step)):
            if not value.is_numeric():
                raise GlossaRuntimeError('TypeError', f"the {label} value of ΓΙΑ must be a number, got {value.kind}")
        if step.value == 0:
            raise GlossaRuntimeError('ValueError', 'the step of ΓΙΑ cannot be zero')
        name = node.variable.name
        current = start.value
        env.assign_variable(name, RuntimeValue.number(current))
        while not ((step.value > 0 and current > end.value) or (step.value < 0 and current < end.value)):
            if self.debug_level >= 3:
                self.debug(f"ΓΙΑ {name} = {format_number(current)}")
            self.execute_block(node.body, env)
            # the body may have changed the loop variable
            current = env.look_up_variable(name).value + step.value
            env.assign_variable(name, RuntimeValue.number(current))

    def apply_binary_op(self, op: str, left: RuntimeValue, right: RuntimeValue) -> RuntimeValue:
        if op in LOGICAL_OPS:
            if left.kind != BOOLEAN or right.kind != BOOLEAN:
                raise GlossaRuntimeError('TypeError', f"{op} expects Boolean operands, got {left.kind} and {right.kind}")
            if op == 'ΚΑΙ':
                return RuntimeValue.boolean(left.value and right.value)
            return RuntimeValue.boolean(left.value or right.value)
        if op in COMPARATORS:
            return RuntimeValue.boolean(self.compare(op, left, right))
        if not (left.is_numeric() and right.is_numeric()):
            raise GlossaRuntimeError('TypeError', f"operator {op} expects numbers, got {left.kind} and {right.kind}")
        a, b = left.value, right.value
        if op == '+':
            return RuntimeValue.number(a + b)
        if op == '-':
            return RuntimeValue.number(a - b)
        if op == '*':
            return RuntimeValue.number(a * b)
        if op in ('/', 'MOD', 'DIV'):
            if b == 0:
                raise GlossaRuntimeError('ZeroDivisionError', f"division by zero ({format_number(a)} {op} {format_number(b)})")
            if op == '/':
                return RuntimeValue.number(a / b)
            if op == 'MOD':
                return RuntimeValue.number(remainder(a, b))
            return RuntimeValue.number(floor_division(a, b))
        if op == '^':
            try:
                return RuntimeValue.number(math.pow(a, b))
            except (ValueError, OverflowError):
                raise GlossaRuntimeError('ValueError', f"cannot compute {format_number(a)} ^ {format_number(b)}")
        raise GlossaRuntimeError('TypeError', f"unknown operator {op}")

    def compare(self, op: str, left: RuntimeValue, right: RuntimeValue) -> bool:
        same_kind = left.kind == right.kind and left.kind in (STRING, BOOLEAN)
        if same_kind or (left.is_numeric() and right.is_numeric()):
            return COMPARATORS[op](left.value, right.value)
        if op == '=':
            return False
        if op == '<>':
            return True
        raise GlossaRuntimeError('TypeError', f"cannot compare {left.kind} with {right.kind} using {op}")

    def read_input(self, node: ReadStmt, env: Environment):
        for target in node.targets:
            index = self.evaluate(target.index, env) if target.index is not None else None
            label = target.name if index is None else f"{target.name}[{to_string(index)}]"
            declared = env.look_up_variable_type(target.name)
            if declared == BOOLEAN:
                raise GlossaRuntimeError('InputError', f"cannot read a Boolean value into '{label}'")
            line = self.io.next_input_line()
            if line is None:
                raise GlossaRuntimeError('InputError', f"no input left for '{label}'")
            text = line.strip()
            if declared == INTEGER:
                if not INTEGER_INPUT.fullmatch(text):
                    raise GlossaRuntimeError('InputError', f"expected an integer for '{label}', got {text!r}")
                value = RuntimeValue.integer(int(text))
            elif declared == REAL:
                if not REAL_INPUT.fullmatch(text):
                    raise GlossaRuntimeError('InputError', f"expected a real number for '{label}', got {text!r}")
                value = RuntimeValue.real(float(text))
            else:
                value = RuntimeValue.string(text)
            env.assign_variable(target.name, value, index)
            if self.debug_level >= 2:
                self.debug(f"read {label} = {to_string(value)}")

    # Routine calls

    def call_function(self, node: FunctionCall, env: Environment) -> RuntimeValue:
        if not env.has_function(node.name) and node.name in self.builtins:
            return self.call_builtin(self.builtins[node.name], node, env)
        func = env.look_up_function(node.name)
        if len(func.params) != len(node.args):
            raise GlossaRuntimeError('CallError', f"function '{func.name}' takes {len(func.params)} arguments, {len(node.args)} given")
        if contains_io(func.body):
            raise GlossaRuntimeError('CallError', f"function '{func.name}' may not use ΓΡΑΨΕ or ΔΙΑΒΑΣΕ")
        return_type = RETURN_TYPES[func.return_type]
        if self.debug_level >= 1:
            self.debug(f"call function {func.name}")

        local = Environment(parent=self.global_env)
        local.declare_variable(func.name, return_type)
        self.execute_routine(func, node.args, env, local, copy_array)

        if not local.has_value(func.name):
            raise GlossaRuntimeError('CallError', f"function '{func.name}' did not assign a return value")
        result = local.look_up_variable(func.name)
        if result.kind == NUMBER:
            integral = is_integral(result.value)
            if (return_type == INTEGER and not integral) or (return_type == REAL and integral):
                raise GlossaRuntimeError(
                    'TypeError',
                    f"function '{func.name}' must return {return_type}, got {format_number(result.value)}",
                )
        return result

    def call_procedure(self, node: ProcedureCall, env: Environment):
        proc = env.look_up_procedure(node.name)
        if proc is None:
            raise GlossaRuntimeError('NameError', f"procedure '{node.name}' is not declared")
        if len(proc.params) != len(node.args):
            raise GlossaRuntimeError('CallError', f"procedure '{proc.name}' takes {len(proc.params)} arguments, {len(node.args)} given")
        if self.debug_level >= 1:
            self.debug(f"call procedure {proc.name}")

        local = Environment(parent=self.global_env)
        self.execute_routine(proc, node.args, env, local, alias_array)

        # write scalar parameters back to the caller's variables
        for param, arg in zip(proc.params, node.args):
            if local.array_lookup(param) is not None:
                continue
            if not isinstance(arg, Ident) or env.is_constant(arg.name):
                continue
            index = self.evaluate(arg.index, env) if arg.index is not None else None
            env.assign_variable(arg.name, local.look_up_variable(param), index)

    def call_builtin(self, builtin: BuiltinFunction, node: FunctionCall, env: Environment) -> RuntimeValue:
        if len(node.args) != builtin.arity:
            raise GlossaRuntimeError('CallError', f"{builtin.name} takes {builtin.arity} argument, {len(node.args)} given")
        args = [self.evaluate(arg, env) for arg in node.args]
        try:
            return builtin.fn(args)
        except (ValueError, OverflowError) as e:
            raise GlossaRuntimeError('ValueError', f"{builtin.name}: {e}")

    def execute_routine(self, routine: Union[FunctionDecl, ProcedureDecl], args: List[Node], caller_env: Environment,
                        local: Environment, array_binding: Callable[[ArrayCells], ArrayCells]):
        """Run a routine body, binding the arguments at its ΑΡΧΗ marker.

        Statements before ΑΡΧΗ (the local declarations) run first. A body
        without ΑΡΧΗ binds its arguments before the first statement.
        """
        body = routine.body
        start = next((i for i, stmt in enumerate(body) if isinstance(stmt, StartStmt)), None)
        if start is None:
            self.bind_arguments(routine, args, caller_env, local, array_binding)
            self.execute_block(body, local)
            return
        self.execute_block(body[:start], local)
        self.bind_arguments(routine, args, caller_env, local, array_binding)
        self.execute_block(body[start + 1:], local)

    def bind_arguments(self, routine: Union[FunctionDecl, ProcedureDecl], args: List[Node], caller_env: Environment,
                       local: Environment, array_binding: Callable[[ArrayCells], ArrayCells]):
        for position, (param, arg) in enumerate(zip(routine.params, args), start=1):
            if not local.declares(param):
                raise GlossaRuntimeError(
                    'NameError',
                    f"parameter '{param}' of '{routine.name}' must be declared in its variables section",
                )
            if local.array_lookup(param) is None:
                local.assign_variable(param, self.evaluate(arg, caller_env))
                continue
            cells = None
            if isinstance(arg, Ident) and arg.index is None:
                cells = caller_env.array_lookup(arg.name)
            if cells is None:
                raise GlossaRuntimeError('CallError', f"argument {position} of '{routine.name}' must be an array")
            element_type = local.look_up_variable_type(param)
            if caller_env.look_up_variable_type(arg.name) != element_type:
                raise GlossaRuntimeError(
                    'CallError',
                    f"argument {position} of '{routine.name}' must be an array of {element_type}",
                )
            local.set_array_argument(param, array_binding(cells))


def run_program(source: str, inputs: Optional[Iterable[str]] = None, debug_level: int = 0) -> List[str]:
    """Convenience function to parse and run a Glossa program from a source string.

    Input lines come from `inputs`; the printed lines are returned.
    """
    program = parse_program(source)
    interpreter = Interpreter(io=BufferedIO(inputs), debug_level=debug_level)
    return interpreter.run(program)


def run_file(file_path: str, inputs: Optional[Iterable[str]] = None, debug_level: int = 0) -> List[str]:
    """Parse and run a Glossa source file, returning the printed lines."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, inputs, debug_level)
