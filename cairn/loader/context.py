"""
The state owned by one load: the document cache, the import table and the
resolver. A `LoadContext` is created per top-level load and dropped when the
load ends, successfully or not.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from cairn.exceptions import InternalLoaderError
from cairn.parser.classes import ASTNode, Span
from cairn.parser.formats import DocumentFormat
from cairn.resolver.bridge import ResolverBridge


@dataclass(frozen=True)
class Document:
    path: str
    text: str
    tree: ASTNode
    file_id: int
    format: DocumentFormat


class DocumentCache:
    """Resolved path -> Document. A path is inserted at most once."""

    def __init__(self):
        self._documents: Dict[str, Document] = {}

    def add(self, path: str, text: str, tree: ASTNode, document_format: DocumentFormat) -> Document:
        if path in self._documents:
            raise InternalLoaderError(f"Document '{path}' was inserted into the cache twice.")
        document = Document(path=path, text=text, tree=tree, file_id=len(self._documents), format=document_format)
        self._documents[path] = document
        return document

    def get(self, path: str) -> Optional[Document]:
        return self._documents.get(path)

    def __contains__(self, path: str) -> bool:
        return path in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[str]:
        return iter(self._documents)


@dataclass
class LoadContext:
    resolver: ResolverBridge
    cache: DocumentCache = field(default_factory=DocumentCache)
    # (importing document, span of the import node) -> resolved path
    import_table: Dict[Tuple[str, Optional[Span]], str] = field(default_factory=dict)

    def resolved_import(self, owner_path: str, span: Optional[Span]) -> str:
        try:
            return self.import_table[(owner_path, span)]
        except KeyError:
            raise InternalLoaderError(f"Import at {span} in '{owner_path}' was never resolved.")
