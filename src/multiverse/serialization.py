"""
Serialization helpers for analysis procedures (statement and expression trees).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
This module intentionally keeps serialization structure stable and explicit.

Literal values must be JSON/YAML scalars (None, bool, int, float, str).
Multiverse results are not serialized here.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from multiverse.expressions import (
    Expression,
    AttributeAccess,
    BinaryExpression,
    BinaryOperator,
    ChoiceValue,
    Comparison,
    ConditionalExpression,
    DictExpression,
    FunctionCall,
    Lambda,
    ListComprehension,
    ListExpression,
    Literal,
    Subscript,
    TupleExpression,
    UnaryExpression,
    UnaryOperator,
    VariableReference,
)
from multiverse.statements import (
    Statement,
    Assignment,
    AugmentedAssignment,
    Block,
    ChoiceMarker,
    Conditional,
    ExpressionStatement,
    Loop,
    MeasurementMarker,
    RecordMeasurement,
    WhileLoop,
)


def _exprs(items) -> list:
    return [expr_to_dict(e) for e in items]


def _exprs_from(items) -> tuple:
    return tuple(expr_from_dict(e) for e in items)


def expr_to_dict(expr: Expression) -> Any:
    if isinstance(expr, Literal):
        return {"type": "lit", "value": expr.value}
    if isinstance(expr, VariableReference):
        return {"type": "var", "name": expr.name}
    if isinstance(expr, BinaryExpression):
        return {
            "type": "binary",
            "operator": expr.operator.value,
            "left": expr_to_dict(expr.left),
            "right": expr_to_dict(expr.right),
        }
    if isinstance(expr, Comparison):
        return {
            "type": "compare",
            "operands": _exprs(expr.operands),
            "operators": [op.value for op in expr.operators],
        }
    if isinstance(expr, UnaryExpression):
        return {
            "type": "unary",
            "operator": expr.operator.value,
            "operand": expr_to_dict(expr.operand),
        }
    if isinstance(expr, FunctionCall):
        return {
            "type": "call",
            "function": expr_to_dict(expr.function),
            "arguments": _exprs(expr.arguments),
            "keywords": [{"name": k, "value": expr_to_dict(v)} for k, v in expr.keywords],
        }
    if isinstance(expr, AttributeAccess):
        return {"type": "attr", "value": expr_to_dict(expr.value), "attribute": expr.attribute}
    if isinstance(expr, Subscript):
        return {"type": "subscript", "value": expr_to_dict(expr.value), "index": expr_to_dict(expr.index)}
    if isinstance(expr, ListExpression):
        return {"type": "list", "elements": _exprs(expr.elements)}
    if isinstance(expr, TupleExpression):
        return {"type": "tuple", "elements": _exprs(expr.elements)}
    if isinstance(expr, DictExpression):
        return {"type": "dict", "keys": _exprs(expr.keys), "values": _exprs(expr.values)}
    if isinstance(expr, ConditionalExpression):
        return {
            "type": "ifexp",
            "test": expr_to_dict(expr.test),
            "body": expr_to_dict(expr.body),
            "orelse": expr_to_dict(expr.orelse),
        }
    if isinstance(expr, Lambda):
        return {"type": "lambda", "parameters": list(expr.parameters), "body": expr_to_dict(expr.body)}
    if isinstance(expr, ListComprehension):
        return {
            "type": "listcomp",
            "element": expr_to_dict(expr.element),
            "target": expr.target,
            "iterable": expr_to_dict(expr.iterable),
            "conditions": _exprs(expr.conditions),
        }
    if isinstance(expr, ChoiceValue):
        return {"type": "choice_value", "name": expr.name}
    raise TypeError(f"Unsupported Expression type: {type(expr)}")


def expr_from_dict(d: Any) -> Expression:
    t = d.get("type")
    if t == "lit":
        return Literal(d["value"])
    if t == "var":
        return VariableReference(d["name"])
    if t == "binary":
        return BinaryExpression(
            operator=BinaryOperator(d["operator"]),
            left=expr_from_dict(d["left"]),
            right=expr_from_dict(d["right"]),
        )
    if t == "compare":
        return Comparison(
            operands=_exprs_from(d["operands"]),
            operators=tuple(BinaryOperator(op) for op in d["operators"]),
        )
    if t == "unary":
        return UnaryExpression(operator=UnaryOperator(d["operator"]), operand=expr_from_dict(d["operand"]))
    if t == "call":
        return FunctionCall(
            function=expr_from_dict(d["function"]),
            arguments=_exprs_from(d.get("arguments", [])),
            keywords=tuple((k["name"], expr_from_dict(k["value"])) for k in d.get("keywords", [])),
        )
    if t == "attr":
        return AttributeAccess(expr_from_dict(d["value"]), d["attribute"])
    if t == "subscript":
        return Subscript(expr_from_dict(d["value"]), expr_from_dict(d["index"]))
    if t == "list":
        return ListExpression(_exprs_from(d.get("elements", [])))
    if t == "tuple":
        return TupleExpression(_exprs_from(d.get("elements", [])))
    if t == "dict":
        return DictExpression(keys=_exprs_from(d.get("keys", [])), values=_exprs_from(d.get("values", [])))
    if t == "ifexp":
        return ConditionalExpression(
            test=expr_from_dict(d["test"]),
            body=expr_from_dict(d["body"]),
            orelse=expr_from_dict(d["orelse"]),
        )
    if t == "lambda":
        return Lambda(tuple(d["parameters"]), expr_from_dict(d["body"]))
    if t == "listcomp":
        return ListComprehension(
            element=expr_from_dict(d["element"]),
            target=d["target"],
            iterable=expr_from_dict(d["iterable"]),
            conditions=_exprs_from(d.get("conditions", [])),
        )
    if t == "choice_value":
        return ChoiceValue(d["name"])
    raise TypeError(f"Unsupported expression dict type: {t}")


def statement_to_dict(s: Statement) -> Dict[str, Any]:
    if isinstance(s, Block):
        return {"type": "block", "statements": [statement_to_dict(x) for x in s.statements]}
    if isinstance(s, Assignment):
        return {"type": "assign", "target": s.target, "value": expr_to_dict(s.value)}
    if isinstance(s, AugmentedAssignment):
        return {
            "type": "augassign",
            "target": s.target,
            "operator": s.operator.value,
            "value": expr_to_dict(s.value),
        }
    if isinstance(s, ExpressionStatement):
        return {"type": "expr", "expression": expr_to_dict(s.expression)}
    if isinstance(s, Conditional):
        return {
            "type": "if",
            "test": expr_to_dict(s.test),
            "body": statement_to_dict(s.body),
            "orelse": statement_to_dict(s.orelse),
        }
    if isinstance(s, Loop):
        return {
            "type": "for",
            "target": s.target,
            "iterable": expr_to_dict(s.iterable),
            "body": statement_to_dict(s.body),
        }
    if isinstance(s, WhileLoop):
        return {"type": "while", "test": expr_to_dict(s.test), "body": statement_to_dict(s.body)}
    if isinstance(s, ChoiceMarker):
        return {"type": "choose", "declaration": statement_to_dict(s.declaration)}
    if isinstance(s, MeasurementMarker):
        return {"type": "measure", "declaration": statement_to_dict(s.declaration)}
    if isinstance(s, RecordMeasurement):
        return {"type": "record", "name": s.name}
    raise TypeError(f"Unsupported Statement type: {type(s)}")


def statement_from_dict(d: Dict[str, Any]) -> Statement:
    t = d.get("type")
    if t == "block":
        return Block(tuple(statement_from_dict(x) for x in d.get("statements", [])))
    if t == "assign":
        return Assignment(d["target"], expr_from_dict(d["value"]))
    if t == "augassign":
        return AugmentedAssignment(d["target"], BinaryOperator(d["operator"]), expr_from_dict(d["value"]))
    if t == "expr":
        return ExpressionStatement(expr_from_dict(d["expression"]))
    if t == "if":
        return Conditional(
            test=expr_from_dict(d["test"]),
            body=statement_from_dict(d["body"]),
            orelse=statement_from_dict(d["orelse"]) if d.get("orelse") else Block(),
        )
    if t == "for":
        return Loop(
            target=d["target"],
            iterable=expr_from_dict(d["iterable"]),
            body=statement_from_dict(d["body"]),
        )
    if t == "while":
        return WhileLoop(test=expr_from_dict(d["test"]), body=statement_from_dict(d["body"]))
    if t == "choose":
        return ChoiceMarker(statement_from_dict(d["declaration"]))
    if t == "measure":
        return MeasurementMarker(statement_from_dict(d["declaration"]))
    if t == "record":
        return RecordMeasurement(d["name"])
    raise TypeError(f"Unsupported statement dict type: {t}")


def tree_to_json(tree: Block) -> str:
    return json.dumps(statement_to_dict(tree), sort_keys=True)


def tree_from_json(s: str) -> Block:
    d = json.loads(s)
    return statement_from_dict(d)


def tree_to_yaml(tree: Block) -> str:
    return yaml.safe_dump(statement_to_dict(tree))


def tree_from_yaml(s: str) -> Block:
    d = yaml.safe_load(s)
    return statement_from_dict(d)
