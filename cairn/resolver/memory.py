import asyncio
import posixpath
from typing import Dict, List, Optional, Tuple

from cairn.exceptions import ErrorCode, FetchError, ResolutionError

from .bridge import ResolverBridge


class MemoryResolver(ResolverBridge):
    """
    Serves documents from a dictionary of POSIX-style paths.
    Every call is recorded so tests (and embedders) can check exactly what the
    loader asked the host for.
    """

    def __init__(self, files: Dict[str, str]):
        self.files = dict(files)
        self.resolve_calls: List[Tuple[str, int, int, int, int, Optional[str]]] = []
        self.fetch_calls: List[str] = []
        self.diagnostics: List[Tuple[str, str, int, int, int, int]] = []

    def resolve(self, unresolved_path, start_line, start_char, end_line, end_char, base_path):
        self.resolve_calls.append((unresolved_path, start_line, start_char, end_line, end_char, base_path))

        if posixpath.isabs(unresolved_path) or not base_path:
            target = unresolved_path
        else:
            target = posixpath.join(posixpath.dirname(base_path), unresolved_path)
        resolved_path = posixpath.normpath(target)

        if resolved_path not in self.files:
            raise ResolutionError(ErrorCode.IMPORT_FILE_NOT_FOUND, import_path=unresolved_path)
        return resolved_path

    async def fetch_text(self, resolved_path):
        self.fetch_calls.append(resolved_path)
        # Give control back to the event loop, as a real host would while doing I/O.
        await asyncio.sleep(0)

        try:
            return self.files[resolved_path]
        except KeyError:
            raise FetchError(ErrorCode.CANNOT_FETCH_TEXT, path=resolved_path, resolved_path=resolved_path, reason="no such document")

    def report_diagnostic(self, message, path, start_line, start_char, end_line, end_char):
        self.diagnostics.append((message, path, start_line, start_char, end_line, end_char))
