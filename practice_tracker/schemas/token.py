from pydantic import Field

from practice_tracker.schemas.base import CamelModel
from practice_tracker.schemas.user_schema import UserResponse


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    remember_me: bool = False


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class Token(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class AccessToken(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class LogoutResponse(CamelModel):
    success: bool = True
    message: str = "Logged out successfully"
