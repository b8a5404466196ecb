"""
Language server for Cairn documents.

Every open, change or save loads the document together with its imports and
publishes the failure (if any) at the UTF-16 range the loader computed, plus
any notice a resolver reported through its diagnostic sink.
"""

import logging
import os
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Set

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_SAVE,
    TEXT_DOCUMENT_DOCUMENT_LINK,
    Diagnostic,
    DiagnosticSeverity,
    DocumentLink,
    Position,
    Range,
)
from pygls.server import LanguageServer

from cairn.exceptions import CairnError
from cairn.loader.pipeline import load_config
from cairn.positions import SENTINEL_RANGE, Utf16Range
from cairn.resolver.filesystem import FileSystemResolver, ImportLink, _uri_to_path

logger = logging.getLogger(__name__)

server = LanguageServer("cairn-server", "v1")

# Import links found by the last load of each document, for textDocument/documentLink.
_links: Dict[str, List[ImportLink]] = {}

# Paths that received diagnostics from the last load of each document.
_reported_paths: Dict[str, Set[str]] = {}


def _path_to_uri(path: str) -> str:
    """Converts a platform-specific file path to a file URI."""
    return Path(path).as_uri()


def _to_lsp_range(utf16_range: Optional[Utf16Range]) -> Range:
    utf16_range = utf16_range or SENTINEL_RANGE
    return Range(
        start=Position(line=utf16_range.start.line, character=utf16_range.start.character),
        end=Position(line=utf16_range.end.line, character=utf16_range.end.character),
    )


class LanguageServerResolver(FileSystemResolver):
    """
    File-system resolution that reads open documents from the editor instead of
    disk, and turns reported notices into LSP warnings.
    """

    def __init__(self, overlays: Dict[str, str], root: Optional[str] = None):
        super().__init__(root=root)
        self.overlays = overlays
        self.published: Dict[str, List[Diagnostic]] = defaultdict(list)

    async def fetch_text(self, resolved_path):
        if resolved_path in self.overlays:
            return self.overlays[resolved_path]
        return await super().fetch_text(resolved_path)

    def report_diagnostic(self, message, path, start_line, start_char, end_line, end_char):
        super().report_diagnostic(message, path, start_line, start_char, end_line, end_char)
        self.published[path].append(
            Diagnostic(
                range=Range(start=Position(line=start_line, character=start_char), end=Position(line=end_line, character=end_char)),
                message=message,
                severity=DiagnosticSeverity.Warning,
                source="cairn",
            )
        )


async def validate_document(uri: str, source: str) -> Dict[str, List[Diagnostic]]:
    """Loads the document at `uri` and returns the diagnostics to publish, by path."""
    path = _uri_to_path(uri)
    resolver = LanguageServerResolver({path: source}, root=os.path.dirname(path))

    try:
        await load_config(resolver, path)
    except CairnError as e:
        resolver.published[e.path or path].append(
            Diagnostic(
                range=_to_lsp_range(e.range),
                message=e.code.value.format(**e.details),
                severity=DiagnosticSeverity.Error,
                source="cairn",
            )
        )

    _links[uri] = [link for link in resolver.links if link.source_path == path]
    diagnostics = dict(resolver.published)
    diagnostics.setdefault(path, [])
    # Clear whatever the previous load reported on documents that are now clean.
    for previous_path in _reported_paths.get(uri, set()):
        diagnostics.setdefault(previous_path, [])
    _reported_paths[uri] = {p for p, items in diagnostics.items() if items}
    return diagnostics


async def _validate(ls: LanguageServer, uri: str):
    document = ls.workspace.get_text_document(uri)
    diagnostics = await validate_document(uri, document.source)
    for path, items in diagnostics.items():
        ls.publish_diagnostics(_path_to_uri(path), items)


@server.feature(TEXT_DOCUMENT_DID_OPEN)
async def did_open(ls, params):
    await _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
async def did_change(ls, params):
    await _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_SAVE)
async def did_save(ls, params):
    await _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DOCUMENT_LINK)
def document_links(ls, params):
    return [DocumentLink(range=_to_lsp_range(link.range), target=_path_to_uri(link.target_path)) for link in _links.get(params.text_document.uri, [])]


def start_server():
    server.start_io()


if __name__ == "__main__":
    start_server()
