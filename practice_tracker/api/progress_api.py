from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from practice_tracker.auth.auth_handler import ensure_self_or_admin, get_current_user
from practice_tracker.configs.database import get_db
from practice_tracker.schemas.progress_schema import (
    LeaderboardEntry, LeaderboardPeriod, ProgressResponse, ProgressUpdateRequest, ProgressUpdateResponse,
)
from practice_tracker.schemas.user_schema import UserResponse
from practice_tracker.services import progress_service

router = APIRouter(prefix="/api", tags=["progress"])


@router.get("/progress/{user_id}", response_model=List[ProgressResponse])
def get_progress(user_id: int, db: Session = Depends(get_db)):
    return progress_service.list_progress(db, user_id)


@router.post("/progress", response_model=ProgressUpdateResponse)
def update_progress(body: ProgressUpdateRequest, db: Session = Depends(get_db),
                    current_user: UserResponse = Depends(get_current_user)):
    ensure_self_or_admin(current_user, body.user_id)
    progress = progress_service.set_progress(db, body.user_id, body.question_id, body.is_solved, body.notes)
    return ProgressUpdateResponse(progress=ProgressResponse.model_validate(progress))


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
def get_leaderboard(period: LeaderboardPeriod = LeaderboardPeriod.all_time, db: Session = Depends(get_db)):
    return progress_service.get_leaderboard(db, period)
