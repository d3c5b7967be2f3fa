import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from practice_tracker.models import Question, User, UserProgress, UserRole
from practice_tracker.schemas.progress_schema import LeaderboardEntry, LeaderboardPeriod
from practice_tracker.utils.errors import NotFoundError
from practice_tracker.utils.utils import utcnow

logger = logging.getLogger(__name__)

LEADERBOARD_LIMIT = 50


def list_progress(db: Session, user_id: int) -> List[UserProgress]:
    statement = select(UserProgress).where(UserProgress.user_id == user_id).order_by(UserProgress.question_id)
    return db.exec(statement).all()


def get_progress(db: Session, user_id: int, question_id: int) -> Optional[UserProgress]:
    statement = select(UserProgress).where(
        (UserProgress.user_id == user_id) & (UserProgress.question_id == question_id)
    )
    return db.exec(statement).first()


def upsert_progress(db: Session, user_id: int, question_id: int, is_solved: bool,
                    solved_at: Optional[datetime] = None, notes: Optional[str] = None) -> UserProgress:
    """Insert or replace the (user, question) row; the latest report wins."""
    solved_at = solved_at or utcnow()
    progress = get_progress(db, user_id, question_id)
    if progress is None:
        progress = UserProgress(user_id=user_id, question_id=question_id)
    progress.is_solved = is_solved
    progress.solved_at = solved_at
    if notes is not None:
        progress.notes = notes
    db.add(progress)
    try:
        db.commit()
    except IntegrityError:
        # another writer inserted the pair first, overwrite its row
        db.rollback()
        progress = get_progress(db, user_id, question_id)
        progress.is_solved = is_solved
        progress.solved_at = solved_at
        if notes is not None:
            progress.notes = notes
        db.add(progress)
        db.commit()
    db.refresh(progress)
    return progress


def set_progress(db: Session, user_id: int, question_id: int, is_solved: bool,
                 notes: Optional[str] = None) -> UserProgress:
    if not db.get(User, user_id):
        raise NotFoundError("User not found")
    if not db.get(Question, question_id):
        raise NotFoundError("Question not found")
    return upsert_progress(db, user_id, question_id, is_solved, notes=notes)


def _period_start(period: LeaderboardPeriod) -> Optional[datetime]:
    today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    if period == LeaderboardPeriod.daily:
        return today
    if period == LeaderboardPeriod.weekly:
        return today - timedelta(days=7)
    return None


def get_leaderboard(db: Session, period: LeaderboardPeriod = LeaderboardPeriod.all_time) -> List[LeaderboardEntry]:
    join_on = and_(UserProgress.user_id == User.id, UserProgress.is_solved == True)  # noqa: E712
    since = _period_start(period)
    if since is not None:
        join_on = and_(join_on, UserProgress.solved_at >= since)

    solved_count = func.count(UserProgress.question_id)
    statement = (
        select(User.id, User.username, User.full_name, solved_count.label("solved_count"))
        .select_from(User)
        .outerjoin(UserProgress, join_on)
        .where(User.role == UserRole.user)
        .group_by(User.id, User.username, User.full_name)
        .order_by(solved_count.desc(), User.username.asc())
        .limit(LEADERBOARD_LIMIT)
    )
    rows = db.exec(statement).all()
    total_questions = db.exec(select(func.count(Question.id))).one()

    leaderboard = []
    for index, (user_id, username, full_name, count) in enumerate(rows):
        success_rate = round(count / total_questions * 100, 2) if total_questions else 0
        leaderboard.append(LeaderboardEntry(
            id=user_id,
            username=username,
            full_name=full_name,
            solved_count=count,
            success_rate=success_rate,
            rank=index + 1,
        ))
    return leaderboard
