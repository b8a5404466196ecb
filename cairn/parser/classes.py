"""
Defines the data structures for the syntax tree produced by the parser stage.

Each node carries an optional `Span` of codepoint offsets into the text of the
document that owns it. Nodes built from structured-data documents (JSON, YAML)
have no span.
"""

from dataclasses import dataclass, fields
from typing import Any, Iterator, List, Optional, Union

# --- Core Data Structures ---


@dataclass(frozen=True)
class Span:
    """A half-open range of codepoint offsets in the owning document's text."""

    start: int
    end: int


@dataclass
class ASTNode:
    """A base class for all syntax tree nodes."""

    span: Optional[Span]


# --- Literals and Identifiers ---


@dataclass
class NumberLiteral(ASTNode):
    value: Union[int, float]


@dataclass
class StringLiteral(ASTNode):
    value: str


@dataclass
class BooleanLiteral(ASTNode):
    value: bool


@dataclass
class NullLiteral(ASTNode):
    pass


@dataclass
class Constant(ASTNode):
    """An already decoded value, e.g. the whole content of a JSON document."""

    value: Any


@dataclass
class Identifier(ASTNode):
    name: str


# --- Compound Expressions ---


@dataclass
class RecordField(ASTNode):
    name: str
    value: "Expression"


@dataclass
class RecordLiteral(ASTNode):
    fields: List[RecordField]


@dataclass
class ArrayLiteral(ASTNode):
    items: List["Expression"]


@dataclass
class Import(ASTNode):
    path: str


@dataclass
class Let(ASTNode):
    name: str
    value: "Expression"
    body: "Expression"


@dataclass
class Function(ASTNode):
    params: List[str]
    body: "Expression"


@dataclass
class Conditional(ASTNode):
    condition: "Expression"
    then_expr: "Expression"
    else_expr: "Expression"


@dataclass
class BinaryOp(ASTNode):
    op: str
    left: "Expression"
    right: "Expression"


@dataclass
class UnaryOp(ASTNode):
    op: str
    operand: "Expression"


@dataclass
class FieldAccess(ASTNode):
    target: "Expression"
    field: str


@dataclass
class Call(ASTNode):
    function: "Expression"
    args: List["Expression"]


Expression = Union[
    NumberLiteral,
    StringLiteral,
    BooleanLiteral,
    NullLiteral,
    Constant,
    Identifier,
    RecordLiteral,
    ArrayLiteral,
    Import,
    Let,
    Function,
    Conditional,
    BinaryOp,
    UnaryOp,
    FieldAccess,
    Call,
]


def iter_nodes(node: ASTNode) -> Iterator[ASTNode]:
    """
    Walks the tree top-down. Children are visited in field declaration order,
    which follows source order for every node type.
    """
    yield node
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, ASTNode):
            yield from iter_nodes(value)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, ASTNode):
                    yield from iter_nodes(item)
