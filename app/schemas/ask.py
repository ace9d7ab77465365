"""Schemas for the ask endpoint.

Field names follow the Gemini wire format (camelCase) because existing browser
clients read the reply as candidates[0].content.parts[0].text.
"""

from typing import Literal, Union

from pydantic import BaseModel, Field, field_validator


class Part(BaseModel):
    text: str = ""


class ChatTurn(BaseModel):
    """One turn of a conversation: who spoke and what they said."""

    role: Literal["user", "model"] = Field(
        ..., description="'user' or 'model' (the assistant); 'assistant' is accepted as 'model'."
    )
    parts: list[Part] = Field(..., min_length=1)

    @field_validator("role", mode="before")
    @classmethod
    def _assistant_is_model(cls, value: object) -> object:
        # Gemini only knows "model" for the assistant side
        return "model" if value == "assistant" else value

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts)


class SingleQuestionRequest(BaseModel):
    """Single-shot question."""

    kind: Literal["single"] = "single"
    user_question: str = Field(..., alias="userQuestion", min_length=1)

    @field_validator("user_question")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("userQuestion must not be blank")
        return value.strip()


class ChatRequest(BaseModel):
    """Multi-turn chat. The client resubmits the full history on every call."""

    kind: Literal["chat"] = "chat"
    chat_history: list[ChatTurn] = Field(..., alias="chatHistory", min_length=1)


AskRequest = Union[SingleQuestionRequest, ChatRequest]


class Content(BaseModel):
    role: str = "model"
    parts: list[Part]


class Candidate(BaseModel):
    content: Content
    finishReason: str | None = None


class AskResponse(BaseModel):
    """Response for POST /api/ask, shaped like a Gemini reply."""

    candidates: list[Candidate]

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.candidates[0].content.parts)


class ErrorResponse(BaseModel):
    error: str


class KnowledgeStatus(BaseModel):
    """Response for GET /api/knowledge/status."""

    cached: bool
    fresh: bool
    age_seconds: float | None = None
    ttl_seconds: float
    chars: int = 0
