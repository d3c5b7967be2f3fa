import logging
import secrets
from datetime import datetime, timedelta, UTC

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import delete
from sqlmodel import Session, select

from practice_tracker.configs import settings
from practice_tracker.models import User, UserRole, RefreshToken
from practice_tracker.schemas.user_schema import UserResponse
from practice_tracker.utils.errors import (
    AuthError, ForbiddenError, InvalidCredentials, InvalidToken, TokenExpired, TokenNotFound,
)
from practice_tracker.utils.utils import utcnow

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

# bcrypt hash of a random string, compared against when the username is unknown
# so both login failure paths take the same time
_DUMMY_HASH = pwd_context.hash(secrets.token_urlsafe(16))


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def authenticate_user(db_session: Session, username: str, password: str) -> User:
    statement = select(User).where(User.username == username)
    user = db_session.exec(statement).first()
    if not user:
        verify_password(password, _DUMMY_HASH)
        raise InvalidCredentials()
    if not verify_password(password, user.password):
        raise InvalidCredentials()
    return user


def access_token_lifetime() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    to_encode = {
        "sub": user.username,
        "id": user.id,
        "role": user.role.value if isinstance(user.role, UserRole) else user.role,
        "type": "access",
        "exp": datetime.now(UTC) + (expires_delta or access_token_lifetime()),
    }
    return jwt.encode(to_encode, settings.JWT_ACCESS_SECRET, algorithm=ALGORITHM)


def create_refresh_token(db_session: Session, user: User, remember_me: bool = False) -> str:
    """Issue a refresh token and persist it, replacing the user's earlier ones."""
    days = settings.REMEMBER_ME_REFRESH_TOKEN_EXPIRE_DAYS if remember_me else settings.REFRESH_TOKEN_EXPIRE_DAYS
    expires_at = utcnow() + timedelta(days=days)
    to_encode = {
        "sub": user.username,
        "id": user.id,
        "type": "refresh",
        # distinguishes two tokens issued to the same user within one second
        "jti": secrets.token_hex(8),
        "exp": expires_at.replace(tzinfo=UTC),
    }
    token = jwt.encode(to_encode, settings.JWT_REFRESH_SECRET, algorithm=ALGORITHM)

    db_session.exec(delete(RefreshToken).where(RefreshToken.user_id == user.id))
    db_session.add(RefreshToken(user_id=user.id, token=token, expires_at=expires_at))
    db_session.commit()
    return token


def verify_refresh_token(db_session: Session, token: str) -> User:
    """Return the owner of a stored, unexpired refresh token."""
    try:
        # expiry is checked against the stored row so expired rows get cleaned up
        payload = jwt.decode(token, settings.JWT_REFRESH_SECRET, algorithms=[ALGORITHM],
                             options={"verify_exp": False})
    except JWTError:
        raise InvalidToken()
    if payload.get("type") != "refresh":
        raise InvalidToken()

    stored = db_session.exec(select(RefreshToken).where(RefreshToken.token == token)).first()
    if not stored:
        raise TokenNotFound()
    if stored.expires_at < utcnow():
        db_session.delete(stored)
        db_session.commit()
        raise TokenExpired()

    user = db_session.get(User, stored.user_id)
    if not user:
        raise TokenNotFound()
    return user


def revoke_refresh_token(db_session: Session, token: str) -> None:
    db_session.exec(delete(RefreshToken).where(RefreshToken.token == token))
    db_session.commit()


def get_current_user(token: str | None = Depends(oauth2_scheme)) -> UserResponse:
    if not token:
        raise AuthError("Not authenticated")
    try:
        payload = jwt.decode(token, settings.JWT_ACCESS_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        raise AuthError()
    if payload.get("type") != "access" or payload.get("id") is None:
        raise AuthError()
    return UserResponse.model_validate({
        "id": payload.get("id"),
        "username": payload.get("sub"),
        "role": payload.get("role"),
    })


def require_admin(current_user: UserResponse = Depends(get_current_user)) -> UserResponse:
    if current_user.role != UserRole.admin:
        raise ForbiddenError("Admin access required")
    return current_user


def ensure_self_or_admin(current_user: UserResponse, user_id: int) -> None:
    if current_user.role != UserRole.admin and current_user.id != user_id:
        raise ForbiddenError("You can only access your own account")
