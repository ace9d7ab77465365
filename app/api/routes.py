"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.handlers import (
    LlmFactory,
    get_drive_factory,
    get_knowledge_cache,
    get_llm_factory,
    handle_ask,
    knowledge_status,
)
from app.core.errors import AppError, InvalidRequestError
from app.core.knowledge_cache import KnowledgeCache
from app.schemas.ask import AskResponse, ErrorResponse, KnowledgeStatus
from app.services.knowledge_service import DriveFactory

logger = logging.getLogger(__name__)
router = APIRouter()

ASK_PATHS = ("/api/ask", "/api/ask-gemini")


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Courses Guide backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


@router.get(
    "/api/knowledge/status",
    response_model=KnowledgeStatus,
    tags=["system"],
    summary="Knowledge base cache status",
)
def get_knowledge_status(cache: KnowledgeCache = Depends(get_knowledge_cache)) -> KnowledgeStatus:
    return knowledge_status(cache)


# --- Ask ---

@router.post(
    ASK_PATHS[0],
    response_model=AskResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["ask"],
    summary="Ask a question or continue a chat",
    description=(
        "Body is either {userQuestion} or {chatHistory: [{role, parts: [{text}]}]}. "
        "Answers are grounded in the documents of the configured Drive folder."
    ),
)
@router.post(ASK_PATHS[1], response_model=AskResponse, response_model_exclude_none=True, include_in_schema=False)
async def post_ask(
    request: Request,
    cache: KnowledgeCache = Depends(get_knowledge_cache),
    drive_factory: DriveFactory = Depends(get_drive_factory),
    llm_factory: LlmFactory = Depends(get_llm_factory),
) -> AskResponse:
    try:
        body = await request.json()
    except ValueError as e:
        raise InvalidRequestError("Request body must be valid JSON.") from e
    try:
        return await handle_ask(body, cache, drive_factory, llm_factory)
    except AppError as e:
        if e.status_code >= 500:
            logger.error("Ask failed: %s: %s", e.__class__.__name__, e.message)
        raise
    except Exception as e:
        logger.exception("Ask failed")
        raise AppError(str(e) or "An internal server error occurred.") from e


@router.api_route(
    ASK_PATHS[0],
    methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
@router.api_route(
    ASK_PATHS[1],
    methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def ask_method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"error": "Method Not Allowed"},
        headers={"Allow": "POST"},
    )
