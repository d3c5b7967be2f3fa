from fastapi import Depends, APIRouter, status
from sqlmodel import Session

from practice_tracker.auth.auth_handler import (
    access_token_lifetime, authenticate_user, create_access_token, create_refresh_token, get_current_user,
    revoke_refresh_token, verify_refresh_token,
)
from practice_tracker.configs.database import get_db
from practice_tracker.schemas.token import AccessToken, LoginRequest, LogoutResponse, RefreshRequest, Token
from practice_tracker.schemas.user_schema import RegisterRequest, UserCreateRequest, UserResponse
from practice_tracker.services import user_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, session: Session = Depends(get_db)):
    user = authenticate_user(session, credentials.username, credentials.password)
    return Token(
        access_token=create_access_token(user),
        refresh_token=create_refresh_token(session, user, credentials.remember_me),
        expires_in=int(access_token_lifetime().total_seconds()),
        user=UserResponse.from_user(user),
    )


@router.post("/refresh", response_model=AccessToken)
def refresh_token(body: RefreshRequest, session: Session = Depends(get_db)):
    user = verify_refresh_token(session, body.refresh_token)
    return AccessToken(
        access_token=create_access_token(user),
        expires_in=int(access_token_lifetime().total_seconds()),
        user=UserResponse.from_user(user),
    )


@router.post("/logout", response_model=LogoutResponse)
def logout(body: RefreshRequest, session: Session = Depends(get_db)):
    revoke_refresh_token(session, body.refresh_token)
    return LogoutResponse()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, session: Session = Depends(get_db)):
    return user_service.create_user(UserCreateRequest(**body.model_dump()), session)


@router.get("/me", response_model=UserResponse)
def read_users_me(current_user: UserResponse = Depends(get_current_user), session: Session = Depends(get_db)):
    return user_service.get_user_model(current_user.id, session)
