"""
Token endpoints: exchange username/password for a signed bearer token.
"""

from fastapi import APIRouter, Depends, Request, Response, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.api.v1.deps import get_db
from tableside.core.config import settings
from tableside.core.security import create_access_token
from tableside.schemas.token import MessageResponse, Token, TokenRequest
from tableside.services import users as user_service

# Rate limiter: keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/token", tags=["token"])


@router.post("", response_model=Token, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.TOKEN_RATE_LIMIT)
async def create_token(
    request: Request,
    response: Response,
    body: TokenRequest,
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Authenticate with username/password. Also sets an HttpOnly cookie."""
    user = await user_service.authenticate_user(db, body.username, body.password)
    token, _expires_at = create_access_token(user.id, user.role)

    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,  # Set to True in HTTPS production
        samesite="strict",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return Token(token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear the auth cookie."""
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")
