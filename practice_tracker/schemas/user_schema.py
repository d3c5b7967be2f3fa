from datetime import datetime
from typing import Optional

from pydantic import Field

from practice_tracker.models import UserRole, User
from practice_tracker.schemas.base import CamelModel


class UserCreateRequest(CamelModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)
    role: UserRole = UserRole.user
    full_name: Optional[str] = None
    leetcode_username: Optional[str] = None
    geeksforgeeks_username: Optional[str] = None


class RegisterRequest(CamelModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=6)
    full_name: Optional[str] = None
    leetcode_username: Optional[str] = None
    geeksforgeeks_username: Optional[str] = None


class UserUpdateRequest(CamelModel):
    full_name: Optional[str] = None
    leetcode_username: Optional[str] = None
    geeksforgeeks_username: Optional[str] = None


class UserResponse(CamelModel):
    id: int
    username: str
    role: UserRole
    full_name: Optional[str] = None
    leetcode_username: Optional[str] = None
    geeksforgeeks_username: Optional[str] = None
    created_at: Optional[datetime] = None

    @staticmethod
    def from_user(user: User | None) -> Optional['UserResponse']:
        if user is None:
            return None
        return UserResponse.model_validate(user, from_attributes=True)


class DifficultyBreakdown(CamelModel):
    easy: int = 0
    medium: int = 0
    hard: int = 0


class TypeBreakdown(CamelModel):
    homework: int = 0
    classwork: int = 0


class UserStatsResponse(CamelModel):
    user_id: int
    total: int
    solved: int
    unsolved: int
    percentage: int
    solved_by_difficulty: DifficultyBreakdown
    solved_by_type: TypeBreakdown
