"""
Refresh-on-expiry cache for the aggregated knowledge base.

Holds at most one KnowledgeDocument. A request that finds the slot empty or
stale blocks on a refresh; concurrent requests that arrive while that refresh
is running await the same in-flight task instead of starting their own
(single-flight). A failed refresh leaves the stored document untouched and the
next request tries again.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnowledgeDocument:
    """Aggregated knowledge text and the clock reading at which it was produced."""

    text: str
    created_at: float


# a returned KnowledgeDocument is re-stamped with the cache clock
RefreshFn = Callable[[], Awaitable[Union[str, KnowledgeDocument]]]


class KnowledgeCache:
    """Process-wide slot for one KnowledgeDocument with a fixed expiry window."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._document: KnowledgeDocument | None = None
        self._pending: asyncio.Task | None = None

    def peek(self) -> KnowledgeDocument | None:
        """Return the stored document (fresh or stale) without refreshing."""
        return self._document

    def age(self) -> float | None:
        """Seconds since the stored document was produced, or None when empty."""
        if self._document is None:
            return None
        return self._clock() - self._document.created_at

    def is_fresh(self) -> bool:
        age = self.age()
        return age is not None and age < self.ttl_seconds

    async def get(self, refresh: RefreshFn) -> KnowledgeDocument:
        """
        Return the cached document, refreshing it first when missing or expired.

        Args:
            refresh: Coroutine function producing the new knowledge text (or a
                KnowledgeDocument, whose timestamp is replaced).

        Raises:
            Whatever refresh raises; the stored document is not modified.
        """
        document = self._document
        if document is not None and self.is_fresh():
            logger.info("[knowledge_cache:get] hit age=%.1fs", self.age())
            return document

        pending = self._pending
        if pending is None or pending.done() or pending.get_loop() is not asyncio.get_running_loop():
            logger.info(
                "[knowledge_cache:get] %s, starting refresh",
                "miss" if document is None else "stale",
            )
            pending = asyncio.ensure_future(self._refresh(refresh))
            pending.add_done_callback(self._on_refresh_done)
            self._pending = pending
        else:
            logger.info("[knowledge_cache:get] joining in-flight refresh")
        # shield: a cancelled waiter must not cancel the refresh other requests share
        return await asyncio.shield(pending)

    async def _refresh(self, refresh: RefreshFn) -> KnowledgeDocument:
        started = self._clock()
        result = await refresh()
        text = result.text if isinstance(result, KnowledgeDocument) else result
        document = KnowledgeDocument(text=text, created_at=self._clock())
        self._document = document
        logger.info(
            "[knowledge_cache:refresh] OUT chars=%d took=%.2fs",
            len(text),
            document.created_at - started,
        )
        return document

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        if self._pending is task:
            self._pending = None
        if not task.cancelled() and task.exception() is not None:
            logger.warning("[knowledge_cache:refresh] failed: %s", task.exception())
