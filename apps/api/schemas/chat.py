"""Chat schemas for request validation and response serialization."""

from typing import Literal

from pydantic import BaseModel, model_validator

from apps.api.schemas.base import BaseSchema


# ── Request Schemas ────────────────────────────────────

class MessagePart(BaseModel):
    """One part of an AI-SDK style UI message. Only text parts carry content."""
    type: str
    text: str | None = None


class ChatMessageIn(BaseModel):
    """A message from the client.

    Accepts plain `{"role", "content"}` messages as well as the
    `{"role", "parts": [{"type": "text", "text": ...}]}` shape sent by
    the chat widget.
    """
    role: Literal["system", "user", "assistant"]
    content: str | None = None
    parts: list[MessagePart] | None = None

    @model_validator(mode="after")
    def _require_text(self) -> "ChatMessageIn":
        if self.content is None and self.parts is None:
            raise ValueError("message needs either content or parts")
        return self

    @property
    def text(self) -> str:
        if self.content is not None:
            return self.content
        return "".join(p.text or "" for p in self.parts or [] if p.type == "text")


class ChatRequest(BaseModel):
    """Body of POST /chat.

    The AI SDK transport also sends `id`, `trigger` and `messageId`; they are ignored.
    """
    messages: list[ChatMessageIn]
    stream: bool = True
    format: Literal["ui", "text"] = "ui"     # Stream framing, ignored when stream is false


# ── Response Schemas ───────────────────────────────────

class ChatReply(BaseSchema):
    """Non-streaming chat answer."""
    message: str
    model: str
    finish_reason: str = ""
