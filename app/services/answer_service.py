"""
Answer service: ground the model in the knowledge text and shape its reply.

Responsibility: Build the Gemini request for a single question or a chat, call
the model, and map the first candidate into the API response. Empty replies are
errors; safety-filtered ones get their own message.
"""

import logging
from typing import Any, Protocol

from app.core.errors import EmptyModelResponseError
from app.schemas.ask import AskRequest, AskResponse, Candidate, ChatRequest, Content, Part

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "I'm sorry, I don't have information on that."

SYSTEM_PROMPT_TEMPLATE = (
    "You are a helpful university course assistant named 'Courses Guide'. "
    "Your job is to answer student questions based ONLY on the provided course information. "
    'If the answer is not found, you must say "{fallback}" '
    "Do not make up answers. Here is the course information:\n\n---\n{knowledge}\n---"
)

# finishReason / blockReason values Gemini uses for filtered output
SAFETY_REASONS = frozenset({"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"})


class ContentGenerator(Protocol):
    async def generate_content(self, contents: list[dict[str, Any]]) -> dict[str, Any]: ...


def build_instruction(knowledge: str) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(fallback=FALLBACK_ANSWER, knowledge=knowledge)


def build_contents(request: AskRequest, knowledge: str) -> list[dict[str, Any]]:
    """
    Gemini `contents` for the request.

    Single question: one user turn holding the instruction and the question.
    Chat: the instruction as the first user turn, then the client's history as-is.
    """
    instruction = build_instruction(knowledge)
    if isinstance(request, ChatRequest):
        history = [turn.model_dump() for turn in request.chat_history]
        return [{"role": "user", "parts": [{"text": instruction}]}, *history]
    return [
        {
            "role": "user",
            "parts": [{"text": f"{instruction}\n\nQuestion: {request.user_question}"}],
        }
    ]


def extract_reply(data: dict[str, Any]) -> Candidate:
    """
    First candidate of a Gemini reply.

    Raises:
        EmptyModelResponseError: If the reply carries no text. safety_blocked is
            set when the prompt or the candidate was filtered.
    """
    block_reason = (data.get("promptFeedback") or {}).get("blockReason")
    candidates = data.get("candidates") or []
    first = candidates[0] if candidates and isinstance(candidates[0], dict) else {}
    finish_reason = first.get("finishReason")
    content = first.get("content") or {}

    texts = [
        p["text"]
        for p in content.get("parts") or []
        if isinstance(p, dict) and isinstance(p.get("text"), str)
    ]
    if not any(t.strip() for t in texts):
        safety_blocked = bool(block_reason) or finish_reason in SAFETY_REASONS
        logger.warning(
            "[answer:extract_reply] empty reply blockReason=%s finishReason=%s",
            block_reason,
            finish_reason,
        )
        raise EmptyModelResponseError(
            safety_blocked=safety_blocked, reason=block_reason or finish_reason
        )
    return Candidate(
        content=Content(role=content.get("role") or "model", parts=[Part(text=t) for t in texts]),
        finishReason=finish_reason,
    )


async def answer(request: AskRequest, knowledge: str, client: ContentGenerator) -> AskResponse:
    """Ask the model and return its reply in the candidates[0].content shape."""
    contents = build_contents(request, knowledge)
    logger.info(
        "[answer] IN  kind=%s turns=%d knowledge_chars=%d", request.kind, len(contents), len(knowledge)
    )
    data = await client.generate_content(contents)
    candidate = extract_reply(data)
    response = AskResponse(candidates=[candidate])
    logger.info("[answer] OUT reply_len=%d", len(response.text))
    return response
