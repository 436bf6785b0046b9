"""Abstract Syntax Tree (AST) definitions for the Glossa language.

The AST classes defined in this module represent the syntactic structure
of parsed Glossa programs. They are shared by the parser, which builds them,
and the interpreter, which walks them. Each node corresponds to a construct
in the Glossa grammar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


@dataclass
class Node:
    """Base class for all AST nodes.

    `line` is the source line of the statement, filled in by the parser and
    used to locate runtime errors. It takes no part in comparisons.
    """
    line: int = field(default=0, init=False, repr=False, compare=False)


@dataclass
class Program(Node):
    name: str
    body: List[Node]
    functions: Dict[str, 'FunctionDecl'] = field(default_factory=dict)
    procedures: Dict[str, 'ProcedureDecl'] = field(default_factory=dict)


@dataclass
class StartStmt(Node):
    """The ΑΡΧΗ marker; a routine binds its arguments here."""
    pass


@dataclass
class DeclTarget(Node):
    name: str
    length: Optional[Node] = None  # array size expression


@dataclass
class VarDecl(Node):
    var_type: str  # 'Integer', 'Real', 'String' or 'Boolean'
    targets: List[DeclTarget]


@dataclass
class ConstEntry(Node):
    name: str
    value: Node


@dataclass
class ConstDecl(Node):
    entries: List[ConstEntry]


@dataclass
class IfStmt(Node):
    condition: Node
    consequent: List[Node]
    # ΑΛΛΙΩΣ branch as a statement list, ΑΛΛΙΩΣ_ΑΝ as a nested IfStmt
    alternate: Union[List[Node], 'IfStmt', None] = None


@dataclass
class ForStmt(Node):
    variable: 'Ident'
    start: Node
    end: Node
    step: Node
    body: List[Node]


@dataclass
class WhileStmt(Node):
    condition: Node
    body: List[Node]


@dataclass
class DoWhileStmt(Node):
    """ΑΡΧΗ_ΕΠΑΝΑΛΗΨΗΣ ... ΜΕΧΡΙΣ_ΟΤΟΥ: repeats until the condition holds."""
    condition: Node
    body: List[Node]


@dataclass
class FunctionDecl(Node):
    name: str
    params: List[str]
    return_type: str  # the keyword as written, e.g. 'ΑΚΕΡΑΙΑ'
    body: List[Node]


@dataclass
class ProcedureDecl(Node):
    name: str
    params: List[str]
    body: List[Node]


@dataclass
class Assign(Node):
    target: 'Ident'
    value: Node


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class Ident(Node):
    name: str
    index: Optional[Node] = None


@dataclass
class IntegerLiteral(Node):
    value: int


@dataclass
class RealLiteral(Node):
    value: float


@dataclass
class StringLiteral(Node):
    value: str


@dataclass
class BooleanLiteral(Node):
    value: bool


@dataclass
class FunctionCall(Node):
    name: str
    args: List[Node]


@dataclass
class ProcedureCall(Node):
    name: str
    args: List[Node]


@dataclass
class PrintStmt(Node):
    values: List[Node]


@dataclass
class ReadStmt(Node):
    targets: List[Ident]
