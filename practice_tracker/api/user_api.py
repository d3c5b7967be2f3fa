from typing import List

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from practice_tracker.auth.auth_handler import ensure_self_or_admin, get_current_user, require_admin
from practice_tracker.configs.database import get_db
from practice_tracker.schemas.progress_schema import ProgressResponse
from practice_tracker.schemas.user_schema import UserCreateRequest, UserResponse, UserStatsResponse, UserUpdateRequest
from practice_tracker.services import progress_service, user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user_req: UserCreateRequest, db: Session = Depends(get_db), _admin=Depends(require_admin)):
    return user_service.create_user(user_req, db)


@router.get("", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db), _admin=Depends(require_admin)):
    return user_service.list_users(db)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_user_model(user_id, db)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: int, update_req: UserUpdateRequest, db: Session = Depends(get_db),
                current_user: UserResponse = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return user_service.update_profile(user_id, update_req, db)


@router.get("/{user_id}/progress", response_model=List[ProgressResponse])
def get_user_progress(user_id: int, db: Session = Depends(get_db)):
    user_service.get_user_model(user_id, db)
    return progress_service.list_progress(db, user_id)


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
def get_user_stats(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_user_stats(user_id, db)
