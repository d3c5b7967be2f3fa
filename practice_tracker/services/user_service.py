import logging
from collections import Counter
from typing import Optional, List

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from practice_tracker.auth.auth_handler import get_password_hash
from practice_tracker.models import User, UserRole, Question, UserProgress
from practice_tracker.schemas.user_schema import (
    UserCreateRequest, UserResponse, UserUpdateRequest, UserStatsResponse, DifficultyBreakdown, TypeBreakdown,
)
from practice_tracker.utils.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def create_user(user_req: UserCreateRequest, db: Session) -> UserResponse:
    if get_user_by_username(user_req.username, db):
        raise ConflictError("Username already exists")
    data = user_req.model_dump()
    data["password"] = get_password_hash(user_req.password)
    user = User(**data)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Username already exists")
    db.refresh(user)
    logger.info("Created user %s (%s)", user.username, user.role.value)
    return UserResponse.from_user(user)


def get_user_model(user_id: int, db: Session) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def get_user(user_id: int, db: Session) -> Optional[UserResponse]:
    return UserResponse.from_user(db.get(User, user_id))


def get_user_by_username(username: str, db: Session) -> Optional[UserResponse]:
    statement = select(User).where(User.username == username)
    result = db.exec(statement).first()
    return UserResponse.from_user(result)


def list_users(db: Session, role: Optional[UserRole] = None) -> List[UserResponse]:
    statement = select(User).order_by(User.username)
    if role is not None:
        statement = statement.where(User.role == role)
    users = db.exec(statement).all()
    return [UserResponse.from_user(user) for user in users]


def update_profile(user_id: int, update_req: UserUpdateRequest, db: Session) -> UserResponse:
    user = get_user_model(user_id, db)
    for key, value in update_req.model_dump(exclude_unset=True).items():
        # blank platform usernames clear the field
        if isinstance(value, str):
            value = value.strip() or None
        setattr(user, key, value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return UserResponse.from_user(user)


def get_user_stats(user_id: int, db: Session) -> UserStatsResponse:
    """Dashboard numbers: overall progress plus solved counts per difficulty and type."""
    get_user_model(user_id, db)
    questions = db.exec(select(Question)).all()
    solved_ids = set(db.exec(
        select(UserProgress.question_id).where(UserProgress.user_id == user_id, UserProgress.is_solved == True)  # noqa: E712
    ).all())

    solved_questions = [q for q in questions if q.id in solved_ids]
    by_difficulty = Counter(q.difficulty.value for q in solved_questions)
    by_type = Counter(q.type.value for q in solved_questions)

    total, solved = len(questions), len(solved_questions)
    return UserStatsResponse(
        user_id=user_id,
        total=total,
        solved=solved,
        unsolved=total - solved,
        percentage=round(solved / total * 100) if total else 0,
        solved_by_difficulty=DifficultyBreakdown(**by_difficulty),
        solved_by_type=TypeBreakdown(**by_type),
    )
