import asyncio
import logging
import os
import re
from typing import List, Optional
from urllib.parse import unquote, urlparse

from pydantic import BaseModel

from cairn.exceptions import ErrorCode, FetchError, ResolutionError
from cairn.positions import Utf16Position, Utf16Range

from .bridge import ResolverBridge

logger = logging.getLogger(__name__)

# Anything with a scheme of two or more letters; single letters are Windows drives.
URI_SCHEME_REGEX = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]+:")


class ImportLink(BaseModel):
    """An import the resolver has seen, with the range of the import in its source document."""

    source_path: Optional[str]
    target_path: str
    range: Utf16Range


class HostDiagnostic(BaseModel):
    message: str
    path: str
    range: Utf16Range


def _uri_to_path(uri: str) -> str:
    """Converts a file URI to a platform-specific file path."""
    parsed = urlparse(uri)
    return os.path.abspath(unquote(parsed.path))


def _make_range(start_line: int, start_char: int, end_line: int, end_char: int) -> Utf16Range:
    return Utf16Range(
        start=Utf16Position(line=start_line, character=start_char),
        end=Utf16Position(line=end_line, character=end_char),
    )


class FileSystemResolver(ResolverBridge):
    """
    Resolves imports against the local file system.
    Relative imports are joined to the directory of the importing document; a
    document without a base path resolves against `root` (default: the cwd).
    """

    def __init__(self, root: Optional[str] = None):
        self.root = os.path.abspath(root or os.getcwd())
        self.links: List[ImportLink] = []
        self.diagnostics: List[HostDiagnostic] = []

    def resolve(self, unresolved_path, start_line, start_char, end_line, end_char, base_path):
        if unresolved_path.startswith("file:"):
            target = _uri_to_path(unresolved_path)
        elif URI_SCHEME_REGEX.match(unresolved_path):
            raise ResolutionError(ErrorCode.INVALID_FILE_URI, import_path=unresolved_path)
        elif os.path.isabs(unresolved_path):
            target = unresolved_path
        else:
            base_dir = os.path.dirname(base_path) if base_path else self.root
            target = os.path.join(base_dir, unresolved_path)

        resolved_path = os.path.abspath(target)
        if not os.path.isfile(resolved_path):
            raise ResolutionError(ErrorCode.IMPORT_FILE_NOT_FOUND, import_path=unresolved_path)

        self.links.append(
            ImportLink(
                source_path=base_path,
                target_path=resolved_path,
                range=_make_range(start_line, start_char, end_line, end_char),
            )
        )
        logger.debug("Resolved '%s' from '%s' to '%s'", unresolved_path, base_path, resolved_path)
        return resolved_path

    async def fetch_text(self, resolved_path):
        try:
            content = await asyncio.to_thread(self._read_bytes, resolved_path)
        except OSError as e:
            raise FetchError(ErrorCode.CANNOT_READ_FILE, path=resolved_path, resolved_path=resolved_path) from e

        try:
            # 'utf-8-sig' strips a leading BOM and is otherwise strict utf-8.
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FetchError(ErrorCode.FILE_NOT_UTF8, path=resolved_path, resolved_path=resolved_path) from e

    def report_diagnostic(self, message, path, start_line, start_char, end_line, end_char):
        self.diagnostics.append(HostDiagnostic(message=message, path=path, range=_make_range(start_line, start_char, end_line, end_char)))
        logger.warning("%s:%d:%d: %s", path, start_line + 1, start_char + 1, message)

    @staticmethod
    def _read_bytes(path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()
