"""
API handlers: read request data, call services, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Request-shape validation and
dependency providers live here so services stay free of FastAPI/HTTP types.
"""

import logging
from typing import Any, Callable

from fastapi import Request
from pydantic import ValidationError

from app.agent.llm import GeminiClient
from app.core.config import Settings, get_settings
from app.core.errors import InvalidRequestError
from app.core.knowledge_cache import KnowledgeCache
from app.schemas.ask import AskRequest, AskResponse, ChatRequest, KnowledgeStatus, SingleQuestionRequest
from app.services.answer_service import ContentGenerator, answer
from app.services.drive_client import DriveClient
from app.services.knowledge_service import DriveFactory, get_knowledge

logger = logging.getLogger(__name__)

LlmFactory = Callable[[Settings], ContentGenerator]


# --- Dependencies (overridden in tests) ---

def get_knowledge_cache(request: Request) -> KnowledgeCache:
    return request.app.state.knowledge_cache


def get_drive_factory() -> DriveFactory:
    return DriveClient.from_credentials


def get_llm_factory() -> LlmFactory:
    return lambda settings: GeminiClient(settings.gemini_api_key, model=settings.gemini_model)


# --- Request shape ---

def parse_ask_request(body: Any) -> AskRequest:
    """
    Pick the request variant by which field is present, then validate it.

    Exactly one of userQuestion / chatHistory must be given.
    """
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object.")
    has_question = "userQuestion" in body
    has_history = "chatHistory" in body
    if has_question and has_history:
        raise InvalidRequestError("Send either userQuestion or chatHistory, not both.")
    if has_history:
        try:
            return ChatRequest.model_validate(body)
        except ValidationError as e:
            raise InvalidRequestError("Invalid chat history provided.") from e
    if has_question:
        try:
            return SingleQuestionRequest.model_validate(body)
        except ValidationError as e:
            raise InvalidRequestError("Please ask a question.") from e
    raise InvalidRequestError("Request must include userQuestion or chatHistory.")


async def handle_ask(
    body: Any,
    cache: KnowledgeCache,
    drive_factory: DriveFactory,
    llm_factory: LlmFactory,
) -> AskResponse:
    """
    idle → checking cache → (refreshing) → answering → responding.

    Any AppError ends the request; nothing is retried.
    """
    settings = get_settings()
    request = parse_ask_request(body)
    document = await get_knowledge(cache, settings, drive_factory)
    return await answer(request, document.text, llm_factory(settings))


def knowledge_status(cache: KnowledgeCache) -> KnowledgeStatus:
    document = cache.peek()
    return KnowledgeStatus(
        cached=document is not None,
        fresh=cache.is_fresh(),
        age_seconds=cache.age(),
        ttl_seconds=cache.ttl_seconds,
        chars=len(document.text) if document else 0,
    )
