from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field


class UserProgress(SQLModel, table=True):
    """Solved flag of one user for one question; at most one row per pair."""
    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "question_id", name="uq_user_progress_user_question"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True, ondelete="CASCADE")
    question_id: int = Field(foreign_key="question.id", index=True, ondelete="CASCADE")
    is_solved: bool = Field(default=False)
    solved_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=False))
    notes: Optional[str] = None
