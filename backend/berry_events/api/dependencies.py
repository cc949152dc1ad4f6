import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ..core.config import settings, COOKIE_DOMAIN
from ..database import get_db

logger = logging.getLogger(__name__)

# Identity is issued elsewhere; this API only verifies the token and reads `sub`.
bearer_scheme = HTTPBearer(auto_error=False)


def _user_id_from_token(token: Optional[str]) -> Optional[int]:
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        logger.info("Ignoring invalid access token")
        return None
    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        return None


def get_optional_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[int]:
    token = credentials.credentials if credentials else request.cookies.get("access_token")
    return _user_id_from_token(token)


def get_current_user_id(user_id: Optional[int] = Depends(get_optional_user_id)) -> int:
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


@dataclass
class CartOwner:
    user_id: Optional[int] = None
    session_token: Optional[str] = None


def get_cart_owner(
    request: Request,
    user_id: Optional[int] = Depends(get_optional_user_id),
) -> CartOwner:
    """Signed-in users own carts by id; guests by the cart session cookie."""
    if user_id is not None:
        return CartOwner(user_id=user_id)
    return CartOwner(session_token=request.cookies.get(settings.CART_SESSION_COOKIE) or None)


def set_cart_cookie(response: Response, value: str) -> None:
    response.set_cookie(
        key=settings.CART_SESSION_COOKIE,
        value=value,
        domain=COOKIE_DOMAIN or None,
        path="/",
        secure=settings.COOKIE_SECURE,
        httponly=True,
        samesite="lax",
        max_age=settings.CART_SESSION_TTL_DAYS * 24 * 60 * 60,
    )


__all__ = [
    "CartOwner",
    "get_cart_owner",
    "get_current_user_id",
    "get_db",
    "get_optional_user_id",
    "set_cart_cookie",
]
