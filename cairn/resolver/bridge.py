import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class ResolverBridge(ABC):
    """
    The capabilities a host lends to the loader.

    This class is the boundary between the loader's pure logic and the outside
    world (file system, network, editor). All positions are 0-indexed UTF-16
    `(line, character)` pairs. The loader calls these methods strictly one at a
    time and never issues another call while `fetch_text` is outstanding.
    """

    @abstractmethod
    def resolve(
        self,
        unresolved_path: str,
        start_line: int,
        start_char: int,
        end_line: int,
        end_char: int,
        base_path: Optional[str],
    ) -> str:
        """
        Maps an import string, as written in the document at `base_path`, to a
        resolved path. Raises `ResolutionError` when that is not possible.
        """

    @abstractmethod
    async def fetch_text(self, resolved_path: str) -> str:
        """Returns the source text of a resolved path. Raises `FetchError` on failure."""

    def report_diagnostic(
        self,
        message: str,
        path: str,
        start_line: int,
        start_char: int,
        end_line: int,
        end_char: int,
    ) -> None:
        """Fire-and-forget sink for non-fatal notices. Hosts may override it."""
        logger.info("%s:%d:%d: %s", path, start_line + 1, start_char + 1, message)
