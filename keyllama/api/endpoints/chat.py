"""
Chat API endpoint for the editor sidebar.

Relays the user's message to the language model with the session as context.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from datetime import datetime
import logging

from ..deps import get_tracker
from ...services.session_engine.tracker import SessionTracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


# --- REQUEST/RESPONSE MODELS ---

class ChatRequest(BaseModel):
    """Message typed into the chat sidebar"""
    message: str = Field(
        ...,
        description="User's message",
        min_length=1,
        max_length=2000,
    )


class ChatResponse(BaseModel):
    """AI reply (or the relay's error message)"""
    message: str = Field(..., description="AI-generated reply")
    timestamp: datetime = Field(default_factory=datetime.now)


# --- ENDPOINTS ---

@router.post("/ask", response_model=ChatResponse)
async def ask(request: ChatRequest, tracker: SessionTracker = Depends(get_tracker)):
    """
    Ask the assistant a question.

    Failures are recovered by the tracker and come back as an error message,
    never as an HTTP error.
    """
    logger.info(f"Chat request - Message length: {len(request.message)}")
    reply = await tracker.ask(request.message)
    return ChatResponse(message=reply)
