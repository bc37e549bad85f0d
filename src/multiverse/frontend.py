"""
Source front end (Raw Python source → statement tree).

Converts the body of an analysis procedure, written as plain Python, into
the engine's statement tree.

Marker syntax:
    x = choose([1, 2])        choice x with possibilities [1, 2]
    y = measure(x + 3)        measurement y with value x + 3

Any other use of `choose(...)` or `measure(...)` as a statement (no
assignment, a tuple or subscript target, `op=`, zero or several
arguments) is kept as a malformed marker; the scanner rejects it with the
matching ConstructionError, so every declaration problem is reported the
same way. A marker nested inside a larger expression raises ParseError.

Supported subset:
    statements:  name = expr, name op= expr (in place, like Python),
                 expr, if/elif/else, for name in expr, while, pass
    expressions: constants, names, arithmetic/boolean/comparison operators
                 (including `is`/`is not` and chained comparisons, whose
                 operands are evaluated once), calls with positional and
                 keyword arguments, attribute access, subscripts,
                 list/tuple/dict displays, conditional expressions, lambdas
                 with positional parameters, list comprehensions with one
                 `for` clause

Anything else raises ParseError.
"""

import ast
import textwrap
from typing import List, Optional

from multiverse.expressions import (
    Expression,
    AttributeAccess,
    BinaryExpression,
    BinaryOperator,
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
    Assignment,
    AugmentedAssignment,
    Block,
    ChoiceMarker,
    Conditional,
    ExpressionStatement,
    Loop,
    MeasurementMarker,
    Statement,
    WhileLoop,
)


CHOOSE = "choose"
MEASURE = "measure"


class ParseError(Exception):
    """Raised when source cannot be converted to a statement tree."""
    pass


_BINARY_OPERATORS = {
    ast.Add: BinaryOperator.ADD,
    ast.Sub: BinaryOperator.SUBTRACT,
    ast.Mult: BinaryOperator.MULTIPLY,
    ast.Div: BinaryOperator.DIVIDE,
    ast.FloorDiv: BinaryOperator.FLOOR_DIVIDE,
    ast.Mod: BinaryOperator.MODULO,
    ast.Pow: BinaryOperator.POWER,
}

_COMPARISON_OPERATORS = {
    ast.Eq: BinaryOperator.EQUALS,
    ast.NotEq: BinaryOperator.NOT_EQUALS,
    ast.Gt: BinaryOperator.GREATER_THAN,
    ast.GtE: BinaryOperator.GREATER_EQUAL,
    ast.Lt: BinaryOperator.LESS_THAN,
    ast.LtE: BinaryOperator.LESS_EQUAL,
    ast.In: BinaryOperator.IN,
    ast.NotIn: BinaryOperator.NOT_IN,
    ast.Is: BinaryOperator.IS,
    ast.IsNot: BinaryOperator.IS_NOT,
}

_UNARY_OPERATORS = {
    ast.Not: UnaryOperator.NOT,
    ast.USub: UnaryOperator.NEGATE,
    ast.UAdd: UnaryOperator.POSITIVE,
}


def _unsupported(node: ast.AST, what: str = "") -> ParseError:
    what = what or type(node).__name__
    line = getattr(node, "lineno", None)
    where = f" on line {line}" if line is not None else ""
    return ParseError(f"Unsupported {what}{where}")


def _marker_call(node: ast.AST) -> Optional[str]:
    """Return 'choose'/'measure' if `node` is a call to a marker."""
    if isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
        if node.func.id in (CHOOSE, MEASURE):
            return node.func.id
    return None


def _single_argument(call: ast.Call) -> Optional[ast.AST]:
    if len(call.args) == 1 and not call.keywords and not isinstance(call.args[0], ast.Starred):
        return call.args[0]
    return None


def _wrap_marker(kind: str, declaration: Statement) -> Statement:
    if kind == CHOOSE:
        return ChoiceMarker(declaration)
    return MeasurementMarker(declaration)


def _malformed_marker(kind: str, call: ast.Call) -> Statement:
    """Keep the whole marker call as an expression statement; the scanner rejects it."""
    return _wrap_marker(kind, ExpressionStatement(_convert_call(call)))


def _convert_call(node: ast.Call) -> FunctionCall:
    if any(isinstance(a, ast.Starred) for a in node.args):
        raise _unsupported(node, "starred argument")
    if any(k.arg is None for k in node.keywords):
        raise _unsupported(node, "** argument")
    return FunctionCall(
        function=convert_expression(node.func),
        arguments=tuple(convert_expression(a) for a in node.args),
        keywords=tuple((k.arg, convert_expression(k.value)) for k in node.keywords),
    )


def convert_expression(node: ast.AST) -> Expression:
    """Convert one Python expression node."""
    if isinstance(node, ast.Constant):
        return Literal(node.value)

    if isinstance(node, ast.Name):
        return VariableReference(node.id)

    if isinstance(node, ast.BinOp):
        operator = _BINARY_OPERATORS.get(type(node.op))
        if operator is None:
            raise _unsupported(node, f"operator {type(node.op).__name__}")
        return BinaryExpression(operator, convert_expression(node.left), convert_expression(node.right))

    if isinstance(node, ast.BoolOp):
        operator = BinaryOperator.AND if isinstance(node.op, ast.And) else BinaryOperator.OR
        values = [convert_expression(v) for v in node.values]
        result = values[0]
        for value in values[1:]:
            result = BinaryExpression(operator, result, value)
        return result

    if isinstance(node, ast.Compare):
        operators = []
        for op in node.ops:
            operator = _COMPARISON_OPERATORS.get(type(op))
            if operator is None:
                raise _unsupported(node, f"comparison {type(op).__name__}")
            operators.append(operator)
        left = convert_expression(node.left)
        comparators = [convert_expression(c) for c in node.comparators]
        if len(operators) == 1:
            return BinaryExpression(operators[0], left, comparators[0])
        return Comparison(tuple([left] + comparators), tuple(operators))

    if isinstance(node, ast.UnaryOp):
        operator = _UNARY_OPERATORS.get(type(node.op))
        if operator is None:
            raise _unsupported(node, f"operator {type(node.op).__name__}")
        return UnaryExpression(operator, convert_expression(node.operand))

    if isinstance(node, ast.Call):
        if _marker_call(node):
            raise ParseError(
                f"{node.func.id}() must be the whole right-hand side of an "
                f"assignment statement (line {node.lineno})"
            )
        return _convert_call(node)

    if isinstance(node, ast.Attribute):
        return AttributeAccess(convert_expression(node.value), node.attr)

    if isinstance(node, ast.Subscript):
        if isinstance(node.slice, ast.Slice):
            raise _unsupported(node, "slice")
        return Subscript(convert_expression(node.value), convert_expression(node.slice))

    if isinstance(node, ast.List):
        return ListExpression(tuple(convert_expression(e) for e in node.elts))

    if isinstance(node, ast.Tuple):
        return TupleExpression(tuple(convert_expression(e) for e in node.elts))

    if isinstance(node, ast.Dict):
        if any(k is None for k in node.keys):
            raise _unsupported(node, "dict unpacking")
        return DictExpression(
            keys=tuple(convert_expression(k) for k in node.keys),
            values=tuple(convert_expression(v) for v in node.values),
        )

    if isinstance(node, ast.IfExp):
        return ConditionalExpression(
            test=convert_expression(node.test),
            body=convert_expression(node.body),
            orelse=convert_expression(node.orelse),
        )

    if isinstance(node, ast.Lambda):
        args = node.args
        if (args.vararg or args.kwarg or args.kwonlyargs or args.defaults
                or getattr(args, "posonlyargs", [])):
            raise _unsupported(node, "lambda signature")
        return Lambda(tuple(a.arg for a in args.args), convert_expression(node.body))

    if isinstance(node, ast.ListComp):
        if len(node.generators) != 1:
            raise _unsupported(node, "comprehension with several for clauses")
        generator = node.generators[0]
        if not isinstance(generator.target, ast.Name) or generator.is_async:
            raise _unsupported(node, "comprehension target")
        return ListComprehension(
            element=convert_expression(node.elt),
            target=generator.target.id,
            iterable=convert_expression(generator.iter),
            conditions=tuple(convert_expression(c) for c in generator.ifs),
        )

    raise _unsupported(node)


def _single_name_target(node: ast.Assign) -> str:
    if len(node.targets) != 1 or not isinstance(node.targets[0], ast.Name):
        raise _unsupported(node, "assignment target (only a single name is allowed)")
    return node.targets[0].id


def convert_statement(node: ast.stmt) -> Statement:
    """Convert one Python statement node."""
    if isinstance(node, ast.Assign):
        kind = _marker_call(node.value)
        if kind:
            argument = _single_argument(node.value)
            if argument is None or len(node.targets) != 1 or not isinstance(node.targets[0], ast.Name):
                return _malformed_marker(kind, node.value)
            return _wrap_marker(kind, Assignment(node.targets[0].id, convert_expression(argument)))
        return Assignment(_single_name_target(node), convert_expression(node.value))

    if isinstance(node, ast.AugAssign):
        kind = _marker_call(node.value)
        if kind:
            return _malformed_marker(kind, node.value)
        if not isinstance(node.target, ast.Name):
            raise _unsupported(node, "augmented assignment target")
        operator = _BINARY_OPERATORS.get(type(node.op))
        if operator is None:
            raise _unsupported(node, f"operator {type(node.op).__name__}")
        return AugmentedAssignment(node.target.id, operator, convert_expression(node.value))

    if isinstance(node, ast.Expr):
        kind = _marker_call(node.value)
        if kind:
            return _malformed_marker(kind, node.value)
        return ExpressionStatement(convert_expression(node.value))

    if isinstance(node, ast.If):
        return Conditional(
            test=convert_expression(node.test),
            body=convert_body(node.body),
            orelse=convert_body(node.orelse),
        )

    if isinstance(node, ast.For):
        if not isinstance(node.target, ast.Name):
            raise _unsupported(node, "loop target (only a single name is allowed)")
        if node.orelse:
            raise _unsupported(node, "for/else")
        return Loop(
            target=node.target.id,
            iterable=convert_expression(node.iter),
            body=convert_body(node.body),
        )

    if isinstance(node, ast.While):
        if node.orelse:
            raise _unsupported(node, "while/else")
        return WhileLoop(test=convert_expression(node.test), body=convert_body(node.body))

    if isinstance(node, ast.Pass):
        return Block()

    raise _unsupported(node, f"statement {type(node).__name__}")


def convert_body(nodes: List[ast.stmt]) -> Block:
    return Block(tuple(convert_statement(n) for n in nodes))


def parse_procedure(source: str) -> Block:
    """
    Parse the body of an analysis procedure.

    Args:
        source: Python statements (common indentation is removed)

    Returns:
        Block (the analysis tree)

    Raises:
        ParseError: If the source is not valid Python or uses an
            unsupported construct
    """
    try:
        module = ast.parse(textwrap.dedent(source))
    except SyntaxError as e:
        raise ParseError(f"Invalid Python source on line {e.lineno}: {e.msg}") from e
    return convert_body(module.body)


__all__ = [
    "CHOOSE",
    "MEASURE",
    "ParseError",
    "convert_expression",
    "convert_statement",
    "parse_procedure",
]
