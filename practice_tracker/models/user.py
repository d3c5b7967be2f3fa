from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from practice_tracker.utils.utils import utcnow


class UserRole(str, Enum):
    admin = "admin"
    user = "user"


class User(SQLModel, table=True):
    """User model represents a user in the system."""
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=50)
    password: str = Field(exclude=True)
    role: UserRole = Field(default=UserRole.user)
    full_name: Optional[str] = Field(default=None, max_length=100)
    leetcode_username: Optional[str] = Field(default=None, max_length=50)
    geeksforgeeks_username: Optional[str] = Field(default=None, max_length=50)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))
