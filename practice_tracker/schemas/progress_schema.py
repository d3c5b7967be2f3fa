from datetime import datetime
from enum import Enum
from typing import Optional

from practice_tracker.schemas.base import CamelModel


class ProgressUpdateRequest(CamelModel):
    user_id: int
    question_id: int
    is_solved: bool
    notes: Optional[str] = None


class ProgressResponse(CamelModel):
    question_id: int
    is_solved: bool
    solved_at: Optional[datetime] = None
    notes: Optional[str] = None


class ProgressUpdateResponse(CamelModel):
    success: bool = True
    message: str = "Progress updated"
    progress: ProgressResponse


class LeaderboardPeriod(str, Enum):
    daily = "daily"
    weekly = "weekly"
    all_time = "all-time"


class LeaderboardEntry(CamelModel):
    id: int
    username: str
    full_name: Optional[str] = None
    solved_count: int
    success_rate: float
    rank: int
