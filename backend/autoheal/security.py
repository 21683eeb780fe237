from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Depends, Response
from fastapi.security import APIKeyCookie
from jose import JWTError, jwt

from autoheal.config import get_settings
from autoheal.exceptions import AuthError
from autoheal.models.user import User
from autoheal.schemas.user import MAX_PASSWORD_BYTES
from autoheal.storage import Storage, get_storage

settings = get_settings()

session_cookie = APIKeyCookie(name=settings.session_cookie_name, auto_error=False)

ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    secret = plain_password.encode("utf-8")
    # Could never have been registered, so it cannot match
    if len(secret) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(secret, hashed_password.encode("utf-8"))


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """Signed session token for a user id."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    claims = {"sub": subject, "exp": datetime.now(timezone.utc) + expires_delta}
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def decode_session_token(token: str | None) -> str | None:
    """Return the user id carried by a session token, or None if it is unusable."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")


def start_session(response: Response, user: User) -> None:
    token = create_access_token(str(user.id))
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def end_session(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


async def get_optional_user(
    token: str | None = Depends(session_cookie),
    storage: Storage = Depends(get_storage),
) -> User | None:
    """Resolve the session cookie to a user.

    A missing, expired, tampered or orphaned session all come back as None.
    """
    user_id = decode_session_token(token)
    if user_id is None:
        return None
    return await storage.get_user(user_id)


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthError("Not authenticated")
    return user
