"""
Knowledge base: wire Drive aggregation into the refresh-on-expiry cache.
"""

import logging
from typing import Any, Callable

from app.core.config import Settings
from app.core.errors import EmptyKnowledgeBaseError
from app.core.knowledge_cache import KnowledgeCache, KnowledgeDocument
from app.services.aggregation_service import DriveSource, collect_segments, join_segments

logger = logging.getLogger(__name__)

DriveFactory = Callable[[dict[str, Any]], DriveSource]

EMPTY_KNOWLEDGE_MESSAGE = "Could not retrieve content from Google Drive."


async def load_knowledge_base(settings: Settings, drive_factory: DriveFactory) -> str:
    """
    Build the knowledge text from the configured folder.

    Raises:
        ConfigurationError: If the Drive client cannot be built.
        UpstreamFetchError: If the folder cannot be listed.
        EmptyKnowledgeBaseError: If the folder is empty or no file yielded text
            (failed, unsupported, or blank such as a scanned PDF).
    """
    drive = drive_factory(settings.drive_credentials)
    segments = await collect_segments(drive, settings.drive_folder_id)
    if not any(s.has_text for s in segments):
        logger.warning(
            "[knowledge:load] folder=%s produced no usable text (files=%d)",
            settings.drive_folder_id,
            len(segments),
        )
        raise EmptyKnowledgeBaseError(EMPTY_KNOWLEDGE_MESSAGE)
    return join_segments(segments)


async def get_knowledge(
    cache: KnowledgeCache,
    settings: Settings,
    drive_factory: DriveFactory,
) -> KnowledgeDocument:
    """Cached knowledge document, rebuilt from Drive when missing or expired."""

    async def refresh() -> str:
        return await load_knowledge_base(settings, drive_factory)

    return await cache.get(refresh)
