import logging
from typing import List

from cairn.exceptions import CairnError, EncodingError, ErrorCode, FetchError, ResolutionError
from cairn.parser.classes import ASTNode, Import, iter_nodes
from cairn.parser.formats import detect_format, parse_document
from cairn.positions import PositionMapper

from .context import Document, LoadContext

logger = logging.getLogger(__name__)


def collect_imports(tree: ASTNode) -> List[Import]:
    """Returns the import nodes of a tree in top-down source order."""
    return [node for node in iter_nodes(tree) if isinstance(node, Import)]


class ImportGraphCrawler:
    """
    Loads every document reachable from an entry path into the context's cache.

    The worklist holds resolved paths that still need to be fetched, parsed and
    scanned. A resolved path is pushed only if it is not yet a cache key, so each
    reachable document is fetched exactly once. Processing order does not affect
    the result: a document's content depends only on its resolved path.
    """

    def __init__(self, context: LoadContext):
        self.context = context

    async def crawl(self, entry_path: str) -> None:
        to_parse = [entry_path]

        while to_parse:
            resolved_path = to_parse.pop()
            # A path can be queued twice before its first fetch; the cache decides.
            if resolved_path in self.context.cache:
                continue
            document = await self._load_document(resolved_path)
            to_parse.extend(self._resolve_imports(document))

        logger.debug("Crawl from '%s' finished with %d document(s)", entry_path, len(self.context.cache))

    async def _load_document(self, resolved_path: str) -> Document:
        document_format = detect_format(resolved_path)
        logger.debug("Fetching '%s' as %s", resolved_path, document_format.value)

        # The single suspension point of a load.
        try:
            text = await self.context.resolver.fetch_text(resolved_path)
        except CairnError as e:
            raise e.locate(resolved_path)
        except Exception as e:
            raise FetchError(ErrorCode.CANNOT_FETCH_TEXT, path=resolved_path, resolved_path=resolved_path, reason=str(e)) from e

        tree = parse_document(text, resolved_path, document_format)
        return self.context.cache.add(resolved_path, text, tree, document_format)

    def _resolve_imports(self, document: Document) -> List[str]:
        """Resolves the imports of one document, returning the paths not cached yet."""
        mapper = PositionMapper(document.text)
        discovered = []

        for node in collect_imports(document.tree):
            location = mapper.span_to_range(node.span)

            try:
                node.path.encode("utf-8")
            except UnicodeEncodeError as e:
                raise EncodingError(ErrorCode.IMPORT_PATH_NOT_UTF8, path=document.path, range=location, import_path=node.path) from e

            try:
                resolved_path = self.context.resolver.resolve(node.path, *location.as_tuple(), document.path)
            except CairnError as e:
                raise e.locate(document.path, location)
            except Exception as e:
                raise ResolutionError(
                    ErrorCode.CANNOT_RESOLVE_IMPORT,
                    path=document.path,
                    range=location,
                    import_path=node.path,
                    reason=str(e),
                ) from e

            self.context.import_table[(document.path, node.span)] = resolved_path
            logger.debug("'%s' imports '%s' as '%s'", document.path, node.path, resolved_path)

            if resolved_path not in self.context.cache:
                discovered.append(resolved_path)

        return discovered
