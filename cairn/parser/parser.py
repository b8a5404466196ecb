import json
from importlib.resources import files as pkg_files

from lark import Lark, LarkError, Token, Transformer
from lark.exceptions import VisitError

from cairn.config import BINARY_OPERATORS, UNARY_OPERATORS
from cairn.exceptions import CairnError, ErrorCode, ParseError
from cairn.positions import offset_to_range

from .classes import *
from .helpers import translate_lark_error

# The path is relative to the 'cairn.parser' subpackage
cairn_grammar = (pkg_files("cairn.parser") / "cairn.lark").read_text(encoding="utf-8")

# LALR with the contextual lexer keeps the keyword/NAME and '-' collisions unambiguous.
LARK_PARSER = Lark(cairn_grammar, start="start", parser="lalr")


class CairnTransformer(Transformer):
    """
    Transforms the Lark parse tree into the dataclass syntax tree.
    Terminal callbacks turn tokens into leaf nodes; rule callbacks run bottom-up
    and compute each node's span from the first and last positioned child.
    """

    def __init__(self, source: str, file_path: str):
        self.source = source
        self.file_path = file_path
        super().__init__()

    # --- Helper methods for creating spans ---
    def _create_span_from_token(self, token: Token) -> Span:
        return Span(token.start_pos, token.end_pos)

    def _get_span_from_items(self, items: list) -> Optional[Span]:
        """Calculates a Span that covers a list of tokens and/or nodes."""
        positioned = [item for item in items if isinstance(item, Token) or (isinstance(item, ASTNode) and item.span)]
        if not positioned:
            return None

        first, last = positioned[0], positioned[-1]
        start = first.start_pos if isinstance(first, Token) else first.span.start
        end = last.end_pos if isinstance(last, Token) else last.span.end
        return Span(start, end)

    def _nodes(self, items: list) -> list:
        """Drops punctuation tokens and empty optional slots."""
        return [item for item in items if item is not None and not isinstance(item, Token)]

    def _build_infix_tree(self, items):
        """Builds a left-associative tree for an `operand (OP operand)*` sequence."""
        tree, i = items[0], 1
        while i < len(items):
            op, right = items[i], items[i + 1]
            span = self._get_span_from_items([tree, right])
            tree = BinaryOp(span=span, op=BINARY_OPERATORS[op.value], left=tree, right=right)
            i += 2
        return tree

    # --- Terminal Transformations ---
    def STRING(self, s: Token):
        try:
            value = json.loads(s.value, strict=False)
        except json.JSONDecodeError:
            raise ParseError(
                ErrorCode.SYNTAX_INVALID_ESCAPE,
                path=self.file_path,
                range=offset_to_range(self.source, s.start_pos),
                escape=s.value,
            )
        return StringLiteral(span=self._create_span_from_token(s), value=value)

    def NUMBER(self, n: Token):
        val = n.value
        num = float(val) if "." in val or "e" in val.lower() else int(val)
        return NumberLiteral(span=self._create_span_from_token(n), value=num)

    def TRUE(self, t: Token):
        return BooleanLiteral(span=self._create_span_from_token(t), value=True)

    def FALSE(self, f: Token):
        return BooleanLiteral(span=self._create_span_from_token(f), value=False)

    def NULL(self, n: Token):
        return NullLiteral(span=self._create_span_from_token(n))

    def NAME(self, c: Token):
        return Identifier(span=self._create_span_from_token(c), name=c.value)

    # --- Rule Transformations ---
    def start(self, items):
        return items[0]

    def merge_expr(self, items):
        return self._build_infix_tree(items)

    def or_expr(self, items):
        return self._build_infix_tree(items)

    def and_expr(self, items):
        return self._build_infix_tree(items)

    def compare_expr(self, items):
        return self._build_infix_tree(items)

    def sum_expr(self, items):
        return self._build_infix_tree(items)

    def product_expr(self, items):
        return self._build_infix_tree(items)

    def unary(self, items):
        op, operand = items
        return UnaryOp(span=self._get_span_from_items(items), op=UNARY_OPERATORS[op.value], operand=operand)

    def field_access(self, items):
        target, name_node = items
        name = name_node.name if isinstance(name_node, Identifier) else name_node.value
        return FieldAccess(span=self._get_span_from_items(items), target=target, field=name)

    def call(self, items):
        function, *args = self._nodes(items)
        return Call(span=self._get_span_from_items(items), function=function, args=args)

    def import_expr(self, items):
        _, path_literal = items
        return Import(span=self._get_span_from_items(items), path=path_literal.value)

    def let_expr(self, items):
        _let_token, name_ident, value, body = items
        return Let(span=self._get_span_from_items(items), name=name_ident.name, value=value, body=body)

    def fun_expr(self, items):
        body = items[-1]
        params = [p.name for p in items[1:-1]]
        return Function(span=self._get_span_from_items(items), params=params, body=body)

    def if_expr(self, items):
        _if_token, condition, then_expr, else_expr = items
        return Conditional(span=self._get_span_from_items(items), condition=condition, then_expr=then_expr, else_expr=else_expr)

    def field(self, items):
        name_node, value = items
        name = name_node.name if isinstance(name_node, Identifier) else name_node.value
        return RecordField(span=self._get_span_from_items(items), name=name, value=value)

    def record(self, items):
        return RecordLiteral(span=self._get_span_from_items(items), fields=self._nodes(items))

    def array(self, items):
        return ArrayLiteral(span=self._get_span_from_items(items), items=self._nodes(items))


def parse_cairn(source: str, file_path: str = "<string>") -> ASTNode:
    """Parses Cairn source text into a syntax tree."""
    try:
        parse_tree = LARK_PARSER.parse(source)
        return CairnTransformer(source=source, file_path=file_path).transform(parse_tree)
    except VisitError as e:
        if isinstance(e.orig_exc, CairnError):
            raise e.orig_exc from e
        raise
    except LarkError as e:
        raise translate_lark_error(e, source, file_path) from e
