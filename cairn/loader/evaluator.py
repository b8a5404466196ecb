"""
Evaluates a fully crawled document graph into plain Python values.

Records evaluate to dicts, arrays to lists, functions to `Closure` objects.
Imports are looked up in the context's import table and evaluated once per
resolved path for the lifetime of the evaluator.
"""

from collections import ChainMap
from dataclasses import dataclass
from typing import Any, Dict, List, Set

from cairn.config import OPERATOR_SYMBOLS, VALUE_TYPE_NAMES
from cairn.exceptions import ErrorCode, EvaluationError, InternalLoaderError
from cairn.parser.classes import *
from cairn.positions import span_to_range

from .context import Document, LoadContext


@dataclass
class Closure:
    params: List[str]
    body: ASTNode
    env: ChainMap
    document: Document


def type_name(value: Any) -> str:
    return VALUE_TYPE_NAMES.get(type(value).__name__, type(value).__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def deep_merge(left: Dict[str, Any], right: Dict[str, Any]) -> Dict[str, Any]:
    """Merges two records; nested records merge recursively and `right` wins elsewhere."""
    merged = dict(left)
    for key, value in right.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Evaluator:
    def __init__(self, context: LoadContext):
        self.context = context
        self._values: Dict[str, Any] = {}
        self._in_progress: Set[str] = set()

    def evaluate(self, path: str) -> Any:
        """Evaluates the document cached under `path`."""
        if path in self._values:
            return self._values[path]

        document = self.context.cache.get(path)
        if document is None:
            raise InternalLoaderError(f"Document '{path}' is not in the cache.")
        if path in self._in_progress:
            raise EvaluationError(ErrorCode.INFINITE_RECURSION, path=path, document=path)

        self._in_progress.add(path)
        try:
            value = self._eval(document.tree, ChainMap(), document)
        finally:
            self._in_progress.discard(path)

        self._values[path] = value
        return value

    def _error(self, code: ErrorCode, node: ASTNode, document: Document, **kwargs) -> EvaluationError:
        location = span_to_range(document.text, node.span) if node.span else None
        return EvaluationError(code, path=document.path, range=location, **kwargs)

    def _eval(self, node: ASTNode, env: ChainMap, document: Document) -> Any:
        if isinstance(node, (NumberLiteral, StringLiteral, BooleanLiteral, Constant)):
            return node.value
        if isinstance(node, NullLiteral):
            return None

        if isinstance(node, Identifier):
            if node.name not in env:
                raise self._error(ErrorCode.UNBOUND_IDENTIFIER, node, document, name=node.name)
            return env[node.name]

        if isinstance(node, RecordLiteral):
            record = {}
            for field_node in node.fields:
                if field_node.name in record:
                    raise self._error(ErrorCode.DUPLICATE_FIELD, field_node, document, name=field_node.name)
                record[field_node.name] = self._eval(field_node.value, env, document)
            return record

        if isinstance(node, ArrayLiteral):
            return [self._eval(item, env, document) for item in node.items]

        if isinstance(node, Import):
            return self.evaluate(self.context.resolved_import(document.path, node.span))

        if isinstance(node, Let):
            value = self._eval(node.value, env, document)
            return self._eval(node.body, env.new_child({node.name: value}), document)

        if isinstance(node, Function):
            return Closure(params=node.params, body=node.body, env=env, document=document)

        if isinstance(node, Call):
            return self._eval_call(node, env, document)

        if isinstance(node, Conditional):
            condition = self._eval(node.condition, env, document)
            if not isinstance(condition, bool):
                raise self._error(ErrorCode.CONDITION_NOT_BOOLEAN, node.condition, document, provided=type_name(condition))
            branch = node.then_expr if condition else node.else_expr
            return self._eval(branch, env, document)

        if isinstance(node, FieldAccess):
            target = self._eval(node.target, env, document)
            if not isinstance(target, dict):
                raise self._error(ErrorCode.FIELD_ACCESS_ON_NON_RECORD, node, document, name=node.field, provided=type_name(target))
            if node.field not in target:
                raise self._error(ErrorCode.MISSING_FIELD, node, document, name=node.field)
            return target[node.field]

        if isinstance(node, UnaryOp):
            return self._eval_unary(node, env, document)

        if isinstance(node, BinaryOp):
            return self._eval_binary(node, env, document)

        raise InternalLoaderError(f"Unknown syntax node '{type(node).__name__}'.")

    def _eval_call(self, node: Call, env: ChainMap, document: Document) -> Any:
        function = self._eval(node.function, env, document)
        if not isinstance(function, Closure):
            raise self._error(ErrorCode.NOT_A_FUNCTION, node, document, provided=type_name(function))
        if len(node.args) != len(function.params):
            raise self._error(ErrorCode.ARGUMENT_COUNT_MISMATCH, node, document, expected=len(function.params), provided=len(node.args))

        args = [self._eval(arg, env, document) for arg in node.args]
        scope = function.env.new_child(dict(zip(function.params, args)))
        return self._eval(function.body, scope, function.document)

    def _eval_unary(self, node: UnaryOp, env: ChainMap, document: Document) -> Any:
        operand = self._eval(node.operand, env, document)
        if node.op == "negate" and _is_number(operand):
            return -operand
        if node.op == "not" and isinstance(operand, bool):
            return not operand
        raise self._error(ErrorCode.UNARY_TYPE_MISMATCH, node, document, op=OPERATOR_SYMBOLS[node.op], provided=type_name(operand))

    def _eval_binary(self, node: BinaryOp, env: ChainMap, document: Document) -> Any:
        op = node.op

        # --- Short-circuiting logical operators ---
        if op in ("and", "or"):
            left = self._eval(node.left, env, document)
            if not isinstance(left, bool):
                raise self._error(ErrorCode.LOGICAL_OPERAND_NOT_BOOLEAN, node.left, document, op=OPERATOR_SYMBOLS[op], provided=type_name(left))
            if (op == "and" and not left) or (op == "or" and left):
                return left
            right = self._eval(node.right, env, document)
            if not isinstance(right, bool):
                raise self._error(ErrorCode.LOGICAL_OPERAND_NOT_BOOLEAN, node.right, document, op=OPERATOR_SYMBOLS[op], provided=type_name(right))
            return right

        left = self._eval(node.left, env, document)
        right = self._eval(node.right, env, document)

        if op == "eq":
            return type_name(left) == type_name(right) and left == right
        if op == "ne":
            return not (type_name(left) == type_name(right) and left == right)

        if op == "merge" and isinstance(left, dict) and isinstance(right, dict):
            return deep_merge(left, right)

        if op == "concat" and type(left) is type(right) and isinstance(left, (str, list)):
            return left + right

        if op in ("lt", "le", "gt", "ge"):
            comparable = (_is_number(left) and _is_number(right)) or (isinstance(left, str) and isinstance(right, str))
            if comparable:
                return {"lt": left < right, "le": left <= right, "gt": left > right, "ge": left >= right}[op]

        if _is_number(left) and _is_number(right):
            if op == "add":
                return left + right
            if op == "subtract":
                return left - right
            if op == "multiply":
                return left * right
            if op in ("divide", "modulo"):
                if right == 0:
                    raise self._error(ErrorCode.DIVISION_BY_ZERO, node, document)
                if op == "modulo":
                    return left % right
                if isinstance(left, int) and isinstance(right, int) and left % right == 0:
                    return left // right
                return left / right

        raise self._error(
            ErrorCode.OPERATOR_TYPE_MISMATCH,
            node,
            document,
            op=OPERATOR_SYMBOLS[op],
            left_type=type_name(left),
            right_type=type_name(right),
        )
