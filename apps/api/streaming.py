"""AI SDK UI message stream — the wire format `useChat` reads.

The chat widget and the admin assistant both talk to /api/chat through the
AI SDK's DefaultChatTransport, which expects Server-Sent Events carrying
JSON parts and the `x-vercel-ai-ui-message-stream: v1` header:

    data: {"type": "start", "messageId": "msg-..."}
    data: {"type": "text-start", "id": "text-..."}
    data: {"type": "text-delta", "id": "text-...", "delta": "Hel"}
    data: {"type": "text-end", "id": "text-..."}
    data: {"type": "finish"}
    data: [DONE]
"""

import json
import uuid
from typing import AsyncGenerator

UI_MESSAGE_STREAM_HEADERS = {
    "x-vercel-ai-ui-message-stream": "v1",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def sse_event(payload: dict | str) -> str:
    data = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {data}\n\n"


async def ui_message_stream(
    tokens: AsyncGenerator[str, None],
    message_id: str | None = None,
) -> AsyncGenerator[str, None]:
    """Wrap a stream of text pieces as one assistant message with one text part."""
    message_id = message_id or f"msg-{uuid.uuid4().hex}"
    text_id = f"text-{uuid.uuid4().hex[:12]}"

    try:
        yield sse_event({"type": "start", "messageId": message_id})
        yield sse_event({"type": "text-start", "id": text_id})
        async for token in tokens:
            yield sse_event({"type": "text-delta", "id": text_id, "delta": token})
        yield sse_event({"type": "text-end", "id": text_id})
        yield sse_event({"type": "finish"})
        yield sse_event("[DONE]")
    finally:
        await tokens.aclose()
