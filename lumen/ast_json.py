"""JSON serialization/deserialization for the Lumen AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding. Inferred function return types are
kept in the dump; resolved call symbols are not, since they point into the
analyzer's symbol table and are rebuilt by running the analyzer again.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Program, Block, VarDecl, Param, FunctionDecl, Assign, ExprStmt, Print,
    Return, If, While, Until, Binary, Logical, Unary, Call, Member, ArrayLit,
    Literal, Identifier,
)
from .types import TypeSpec


def typespec_to_obj(t: TypeSpec) -> Dict[str, Any]:
    return {"kind": t.kind, "args": [typespec_to_obj(a) for a in t.args]}


def typespec_from_obj(o: Dict[str, Any]) -> TypeSpec:
    return TypeSpec(o["kind"], tuple(typespec_from_obj(x) for x in o.get("args", [])))


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None
    if isinstance(node, (int, float, str, bool)):
        return node

    if isinstance(node, TypeSpec):
        return {"__type__": "TypeSpec", "value": typespec_to_obj(node)}

    if isinstance(node, Program):
        return {"type": "Program", "body": ast_to_obj(node.body)}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, VarDecl):
        return {
            "type": "VarDecl",
            "name": node.name,
            "declared_type": node.declared_type,
            "init": ast_to_obj(node.init),
        }
    if isinstance(node, Param):
        return {"type": "Param", "name": node.name, "type_name": node.type_name}
    if isinstance(node, FunctionDecl):
        return {
            "type": "FunctionDecl",
            "name": node.name,
            "params": [ast_to_obj(p) for p in node.params],
            "body": ast_to_obj(node.body),
            "return_type": ast_to_obj(node.return_type),
        }
    if isinstance(node, Assign):
        return {"type": "Assign", "target": node.target, "value": ast_to_obj(node.value)}
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, Print):
        return {"type": "Print", "expr": ast_to_obj(node.expr)}
    if isinstance(node, Return):
        return {"type": "Return", "expr": ast_to_obj(node.expr)}
    if isinstance(node, If):
        return {
            "type": "If",
            "test": ast_to_obj(node.test),
            "consequent": ast_to_obj(node.consequent),
            "alternate": ast_to_obj(node.alternate),
        }
    if isinstance(node, While):
        return {"type": "While", "test": ast_to_obj(node.test), "body": ast_to_obj(node.body)}
    if isinstance(node, Until):
        return {"type": "Until", "test": ast_to_obj(node.test), "body": ast_to_obj(node.body)}
    if isinstance(node, Binary):
        return {"type": "Binary", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, Logical):
        return {"type": "Logical", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, Unary):
        return {"type": "Unary", "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, Call):
        return {"type": "Call", "callee": node.callee, "args": [ast_to_obj(a) for a in node.args]}
    if isinstance(node, Member):
        return {"type": "Member", "object": ast_to_obj(node.object), "index": ast_to_obj(node.index)}
    if isinstance(node, ArrayLit):
        return {"type": "ArrayLit", "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, Literal):
        return {"type": "Literal", "kind": node.kind, "value": node.value}
    if isinstance(node, Identifier):
        return {"type": "Identifier", "name": node.name}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, dict) and obj.get("__type__") == "TypeSpec":
        return typespec_from_obj(obj["value"])
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Program":
        return Program(body=ast_from_obj(obj["body"]))
    if t == "Block":
        return Block(statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "VarDecl":
        return VarDecl(
            name=obj["name"],
            declared_type=obj.get("declared_type"),
            init=ast_from_obj(obj.get("init")),
        )
    if t == "Param":
        return Param(name=obj["name"], type_name=obj["type_name"])
    if t == "FunctionDecl":
        return FunctionDecl(
            name=obj["name"],
            params=[ast_from_obj(p) for p in obj["params"]],
            body=ast_from_obj(obj["body"]),
            return_type=ast_from_obj(obj.get("return_type")),
        )
    if t == "Assign":
        return Assign(target=obj["target"], value=ast_from_obj(obj["value"]))
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(obj["expr"]))
    if t == "Print":
        return Print(expr=ast_from_obj(obj["expr"]))
    if t == "Return":
        return Return(expr=ast_from_obj(obj["expr"]))
    if t == "If":
        return If(
            test=ast_from_obj(obj["test"]),
            consequent=ast_from_obj(obj["consequent"]),
            alternate=ast_from_obj(obj.get("alternate")),
        )
    if t == "While":
        return While(test=ast_from_obj(obj["test"]), body=ast_from_obj(obj["body"]))
    if t == "Until":
        return Until(test=ast_from_obj(obj["test"]), body=ast_from_obj(obj["body"]))
    if t == "Binary":
        return Binary(left=ast_from_obj(obj["left"]), op=obj["op"], right=ast_from_obj(obj["right"]))
    if t == "Logical":
        return Logical(left=ast_from_obj(obj["left"]), op=obj["op"], right=ast_from_obj(obj["right"]))
    if t == "Unary":
        return Unary(op=obj["op"], operand=ast_from_obj(obj["operand"]))
    if t == "Call":
        return Call(callee=obj["callee"], args=[ast_from_obj(a) for a in obj["args"]])
    if t == "Member":
        return Member(object=ast_from_obj(obj["object"]), index=ast_from_obj(obj["index"]))
    if t == "ArrayLit":
        return ArrayLit(elements=[ast_from_obj(e) for e in obj["elements"]])
    if t == "Literal":
        return Literal(kind=obj["kind"], value=obj["value"])
    if t == "Identifier":
        return Identifier(name=obj["name"])

    raise ValueError(f"Unknown AST node type: {t}")
