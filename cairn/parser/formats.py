"""
Content-format selection and per-format parsing.

Structured-data documents (JSON, YAML) decode to a single `Constant` node and
never contain imports. Everything else goes through the Cairn grammar.
"""

import json
from enum import Enum

import yaml

from cairn.config import STRUCTURED_FORMAT_SUFFIXES
from cairn.exceptions import ErrorCode, ParseError
from cairn.positions import offset_to_range

from .classes import ASTNode, Constant
from .parser import parse_cairn


class DocumentFormat(Enum):
    CAIRN = "cairn"
    JSON = "json"
    YAML = "yaml"


def detect_format(resolved_path: str) -> DocumentFormat:
    """Selects the format from the suffix of a resolved path."""
    lowered = resolved_path.lower()
    for suffix, format_name in STRUCTURED_FORMAT_SUFFIXES.items():
        if lowered.endswith(suffix):
            return DocumentFormat(format_name)
    return DocumentFormat.CAIRN


def _parse_json(text: str, path: str) -> ASTNode:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(ErrorCode.INVALID_JSON, path=path, range=offset_to_range(text, e.pos), details=e.msg, raw=str(e)) from e
    return Constant(span=None, value=value)


def _parse_yaml(text: str, path: str) -> ASTNode:
    try:
        value = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        location = offset_to_range(text, mark.index) if mark is not None else None
        raise ParseError(ErrorCode.INVALID_YAML, path=path, range=location, details=getattr(e, "problem", None) or str(e), raw=str(e)) from e
    return Constant(span=None, value=value)


def parse_document(text: str, path: str, document_format: DocumentFormat) -> ASTNode:
    if document_format is DocumentFormat.JSON:
        return _parse_json(text, path)
    if document_format is DocumentFormat.YAML:
        return _parse_yaml(text, path)
    return parse_cairn(text, file_path=path)
