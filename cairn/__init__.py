"""Loads Cairn configuration documents and their imports into plain Python values."""

from cairn.exceptions import (
    CairnError,
    EncodingError,
    ErrorCode,
    EvaluationError,
    FetchError,
    ParseError,
    ResolutionError,
    SerializationError,
)
from cairn.loader.pipeline import load_config, load_config_sync
from cairn.positions import PositionMapper, Utf16Position, Utf16Range
from cairn.resolver.bridge import ResolverBridge
from cairn.resolver.filesystem import FileSystemResolver
from cairn.resolver.memory import MemoryResolver

__version__ = "0.1.0"
