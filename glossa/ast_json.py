"""JSON serialization/deserialization for the Glossa AST.

This module converts between Glossa AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node becomes a dict
with a "type" key naming its class plus one key per dataclass field. Routine
tables are emitted in name order so that the same source always produces the
same dump. Source line numbers are not part of the tree and are not kept.
"""

from __future__ import annotations

import json
from dataclasses import fields
from typing import Any, Dict

from .ast import (
    Program,
    StartStmt,
    DeclTarget,
    VarDecl,
    ConstEntry,
    ConstDecl,
    IfStmt,
    ForStmt,
    WhileStmt,
    DoWhileStmt,
    FunctionDecl,
    ProcedureDecl,
    Assign,
    BinaryOp,
    UnaryOp,
    Ident,
    IntegerLiteral,
    RealLiteral,
    StringLiteral,
    BooleanLiteral,
    FunctionCall,
    ProcedureCall,
    PrintStmt,
    ReadStmt,
    Node,
)


NODE_CLASSES = {cls.__name__: cls for cls in (
    Program, StartStmt, DeclTarget, VarDecl, ConstEntry, ConstDecl,
    IfStmt, ForStmt, WhileStmt, DoWhileStmt, FunctionDecl, ProcedureDecl,
    Assign, BinaryOp, UnaryOp, Ident, IntegerLiteral, RealLiteral,
    StringLiteral, BooleanLiteral, FunctionCall, ProcedureCall,
    PrintStmt, ReadStmt,
)}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None:
        return None
    if isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(n) for n in node]

    # Routine tables
    if isinstance(node, Program):
        return {
            "type": "Program",
            "name": node.name,
            "body": ast_to_obj(node.body),
            "functions": [ast_to_obj(node.functions[k]) for k in sorted(node.functions)],
            "procedures": [ast_to_obj(node.procedures[k]) for k in sorted(node.procedures)],
        }

    # Node types
    if isinstance(node, Node) and type(node).__name__ in NODE_CLASSES:
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            if f.init:
                obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(o) for o in obj]
    if not isinstance(obj, dict):
        raise ValueError(f"Invalid AST object: {obj!r}")

    t = obj.get("type")
    if t == "Program":
        functions = [ast_from_obj(o) for o in obj.get("functions", [])]
        procedures = [ast_from_obj(o) for o in obj.get("procedures", [])]
        return Program(
            name=obj["name"],
            body=ast_from_obj(obj["body"]),
            functions={f.name: f for f in functions},
            procedures={p.name: p for p in procedures},
        )
    cls = NODE_CLASSES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {f.name: ast_from_obj(obj[f.name]) for f in fields(cls) if f.init and f.name in obj}
    if t == "RealLiteral":
        # JSON writes 2.0 back as 2.0, but a hand-written dump may say 2
        kwargs["value"] = float(kwargs["value"])
    return cls(**kwargs)


def dump_ast(program: Program) -> str:
    """Canonical JSON dump of a parsed program."""
    return json.dumps(ast_to_obj(program), ensure_ascii=False, indent=2)
