# app/api/v1/routes/chatbot.py
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_llm_client
from app.core.auth import User
from app.core.database import get_async_session
from app.core.errors import ExternalServiceError
from app.schemas.chatbot import ChatError, ChatRequest, ChatResponse
from app.services.llm_client import LLMClient
from app.services.tool_orchestrator import ToolOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chatbot"])

ASSISTANT_UNAVAILABLE = "The assistant is not available right now, please try again in a moment"

@router.post("/chat", response_model=ChatResponse, responses={502: {"model": ChatError}})
async def chat(
    chat_request: ChatRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    llm: LLMClient = Depends(get_llm_client),
):
    """
    One assistant turn. The assistant can record and delete operations,
    create goals and debts and add contributions or payments for the
    authenticated user; any user id sent in the body is ignored.
    """
    orchestrator = ToolOrchestrator(db, user, llm=llm)
    history = [m.model_dump() for m in chat_request.messages]
    try:
        reply = await orchestrator.respond(history)
    except ExternalServiceError as e:
        logger.error(f"Chat turn failed for user {orchestrator.executor.user_id}: {e.message}")
        return JSONResponse(status_code=e.http_status, content={"error": ASSISTANT_UNAVAILABLE})
    return ChatResponse(message=reply)
