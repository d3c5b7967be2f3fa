from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from practice_tracker.utils.utils import get_platform, utcnow, Platform


class QuestionType(str, Enum):
    homework = "homework"
    classwork = "classwork"


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class Question(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    link: str
    type: QuestionType
    difficulty: Difficulty
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))

    @property
    def platform(self) -> Platform:
        return get_platform(self.link)
