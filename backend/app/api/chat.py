"""
API endpoint for the shopping assistant

Endpoint:
- POST /api/agent/chat - Answer a shopper's message, surfacing matching products

Author: MinkenWorld
Date: 2025-11-03
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, timezone
import logging

from app.core.config import settings
from app.core.rate_limit import chat_rate_limit
from app.domain.product import ProductSummary
from app.services.shopping_chat_service import ShoppingAssistantTimeout, get_chat_service

logger = logging.getLogger(__name__)

# ============================================================================
# ROUTER
# ============================================================================

router = APIRouter(prefix="/api/agent", tags=["shopping-assistant"])


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class ChatMessage(BaseModel):
    """A single message in the conversation history"""
    role: str
    content: str = ""


class ChatRequest(BaseModel):
    """Request body for chat endpoint"""
    message: Optional[str] = Field(None, max_length=2000, description="Shopper's message")
    history: List[ChatMessage] = Field(default=[], description="Conversation history")


class ChatResponse(BaseModel):
    """Response from chat endpoint; `products` is omitted when no tool surfaced any"""
    content: str
    products: Optional[List[ProductSummary]] = None


# ============================================================================
# ENDPOINT: POST /api/agent/chat
# ============================================================================

@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_unset=True,
    dependencies=[Depends(chat_rate_limit)]
)
async def chat(request: ChatRequest):
    """
    Answer a shopper's message using the marketplace catalog.

    The assistant can:
    - Search products ("grey pants", "apartments in Kilimani")
    - List categories
    - Show everything on sale

    Args:
        request: ChatRequest with message and optional history

    Returns:
        ChatResponse with the answer and any products found by tools
    """
    if not request.message or not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    try:
        chat_service = get_chat_service()
    except ValueError as e:
        logger.error(f"Configuration error: {str(e)}")
        raise HTTPException(
            status_code=503,
            detail="Shopping assistant not configured. Please contact administrator."
        )

    history = [{"role": msg.role, "content": msg.content} for msg in request.history]

    try:
        logger.info(f"Chat request received: {request.message[:50]}...")

        result = await chat_service.process_query(
            message=request.message,
            history=history
        )

    except ShoppingAssistantTimeout as e:
        logger.error(f"Chat timeout: {str(e)}")
        raise HTTPException(
            status_code=504,
            detail="The shopping assistant took too long to answer. Please try again."
        )

    except Exception as e:
        logger.error(f"Chat error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to process request"
        )

    if not result.products:
        return ChatResponse(content=result.content)

    return ChatResponse(
        content=result.content,
        # Dumped cards carry every field, so null description/handle survive exclude_unset
        products=[ProductSummary(**p).model_dump() for p in result.products]
    )


# ============================================================================
# ENDPOINT: GET /api/agent/chat/health
# ============================================================================

@router.get("/chat/health")
async def chat_health():
    """
    Health check for the shopping assistant.

    Returns service status and configuration info.
    """
    return {
        "status": "healthy" if settings.assistant_configured else "not_configured",
        "api_key_configured": settings.assistant_configured,
        "model": settings.CLAUDE_MODEL,
        "max_tool_iterations": settings.MAX_TOOL_ITERATIONS,
        "timeout_seconds": settings.AGENT_TIMEOUT_SECONDS,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
