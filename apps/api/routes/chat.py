"""Chat route — retrieval-augmented chat over the stored documents.

The client sends the whole conversation every time; nothing is persisted.
Three response shapes:
- default: AI SDK UI message stream (SSE), what the chat widget's useChat reads
- "format": "text": the answer streamed as plain text
- "stream": false: one JSON object
"""

from adapters import Message
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from apps.api.dependencies import get_chat_service
from apps.api.schemas.chat import ChatReply, ChatRequest
from apps.api.services.chat_service import ChatService
from apps.api.streaming import UI_MESSAGE_STREAM_HEADERS, ui_message_stream

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatReply)
async def chat(
    body: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
):
    """Answer the latest user message using the most relevant chunks as context.

    Returns 400 if `messages` is not an array of messages, 502 if the
    embedding or chat provider fails before the answer starts.
    """
    messages = [Message(role=m.role, content=m.text) for m in body.messages]

    if not body.stream:
        response = await chat_service.complete(messages)
        return ChatReply(
            message=response.content,
            model=response.model,
            finish_reason=response.finish_reason,
        )

    tokens = await chat_service.stream(messages)
    if body.format == "text":
        return StreamingResponse(tokens, media_type="text/plain; charset=utf-8")

    return StreamingResponse(
        ui_message_stream(tokens),
        media_type="text/event-stream",
        headers=UI_MESSAGE_STREAM_HEADERS,
    )
