from datetime import datetime

from pydantic import Field

from practice_tracker.models import QuestionType, Difficulty
from practice_tracker.schemas.base import CamelModel
from practice_tracker.utils.utils import Platform


class QuestionRequest(CamelModel):
    """Body of question create and update; every field is required."""
    name: str = Field(min_length=1, max_length=255)
    link: str = Field(min_length=1)
    type: QuestionType
    difficulty: Difficulty


class QuestionResponse(CamelModel):
    id: int
    name: str
    link: str
    type: QuestionType
    difficulty: Difficulty
    platform: Platform
    created_at: datetime


class QuestionMutationResponse(CamelModel):
    success: bool = True
    id: int
    message: str
