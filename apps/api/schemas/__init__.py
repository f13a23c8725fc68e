from apps.api.schemas.base import BaseSchema, BaseResponse
from apps.api.schemas.document import (
    DocumentWrite, DocumentRecord, RetrievedChunk, DocumentPage, DocumentCursorPage,
)
from apps.api.schemas.chat import ChatMessageIn, ChatRequest, ChatReply, MessagePart


__all__ = [
    # Base
    "BaseSchema", "BaseResponse",
    # Document
    "DocumentWrite", "DocumentRecord", "RetrievedChunk", "DocumentPage", "DocumentCursorPage",
    # Chat
    "ChatMessageIn", "ChatRequest", "ChatReply", "MessagePart",
]
