import asyncio
import logging
from typing import Any

from cairn.resolver.bridge import ResolverBridge

from .context import LoadContext
from .crawler import ImportGraphCrawler
from .evaluator import Evaluator
from .serializer import to_host_value

logger = logging.getLogger(__name__)


class LoadPipeline:
    """
    Orchestrates one load: crawl the import graph, evaluate the entry document,
    serialize the result. The load context stays available for inspection.
    """

    def __init__(self, resolver: ResolverBridge, entry_path: str):
        self.entry_path = entry_path
        self.context = LoadContext(resolver=resolver)

    async def run(self) -> Any:
        await ImportGraphCrawler(self.context).crawl(self.entry_path)
        value = Evaluator(self.context).evaluate(self.entry_path)
        result = to_host_value(value)
        logger.debug("Loaded '%s' (%d document(s))", self.entry_path, len(self.context.cache))
        return result


async def load_config(resolver: ResolverBridge, entry_path: str) -> Any:
    """
    High-level entry point: loads `entry_path` and everything it imports through
    `resolver`, returning the evaluated value as plain Python data.

    Raises a single `CairnError` subclass if any stage fails.
    """
    return await LoadPipeline(resolver, entry_path).run()


def load_config_sync(resolver: ResolverBridge, entry_path: str) -> Any:
    """Runs `load_config` on a fresh event loop."""
    return asyncio.run(load_config(resolver, entry_path))
