# app/api/deps.py
from typing import Any, Dict, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import jwt
import uuid

from app.core.database import get_async_session
from app.core.auth import TOKEN_AUDIENCE, User
from app.core.config import settings
from app.schemas.actions import ActionResult
from app.services.action_executor import ActionExecutor
from app.services.llm_client import LLMClient

# Security schemes
optional_security = HTTPBearer(auto_error=False)

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> User:
    """
    Resolve the calling user from the bearer token.

    The token is looked up in the Authorization header first and then in the
    ``access_token`` cookie. This is the only source of the owner id used to
    scope reads and writes.
    """
    token = credentials.credentials if credentials and credentials.credentials else None

    if not token:
        token = request.cookies.get("access_token")
        # Remove "Bearer " prefix if present in cookie
        if token and token.startswith("Bearer "):
            token = token[7:]

    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=TOKEN_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    user_id_str = payload.get("sub")
    if not user_id_str:
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_id = uuid.UUID(str(user_id_str))
    except ValueError:
        raise _unauthorized("Invalid user ID format in token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()

    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise _unauthorized("Inactive user")

    return user

async def get_action_executor(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionExecutor:
    return ActionExecutor(db, user.id)

def get_llm_client() -> LLMClient:
    return LLMClient()

def unwrap(result: ActionResult) -> Dict[str, Any]:
    """Data of a successful action, or the HTTP error the UI shows for a failed one."""
    if not result.success:
        detail: Dict[str, Any] = {"code": result.code, "error": result.error}
        if result.details:
            detail["details"] = result.details
        raise HTTPException(status_code=result.http_status, detail=detail)
    return result.data or {}
