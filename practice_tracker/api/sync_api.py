from typing import Union

from celery.result import AsyncResult
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlmodel import Session

from practice_tracker.auth.auth_handler import ensure_self_or_admin, get_current_user, require_admin
from practice_tracker.celery.app import celery_app
from practice_tracker.celery.tasks.sync import sync_all_users_progress_task
from practice_tracker.configs.database import get_db
from practice_tracker.schemas.sync_schema import (
    BulkSyncResult, SyncAllResult, SyncResult, SyncTaskResponse, SyncTaskStatus,
)
from practice_tracker.schemas.user_schema import UserResponse
from practice_tracker.services import sync_service

router = APIRouter(prefix="/api", tags=["sync"])


@router.get("/sync-gfg-progress/{user_id}", response_model=SyncResult, response_model_exclude_none=True)
async def sync_gfg_progress(user_id: int, db: Session = Depends(get_db),
                            current_user: UserResponse = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return await sync_service.sync_gfg_progress(db, user_id)


@router.get("/sync-leetcode-progress/{user_id}", response_model=SyncResult, response_model_exclude_none=True)
async def sync_leetcode_progress(user_id: int, db: Session = Depends(get_db),
                                 current_user: UserResponse = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return await sync_service.sync_leetcode_progress(db, user_id)


@router.get("/sync-all-progress/{user_id}", response_model=SyncAllResult, response_model_exclude_none=True)
async def sync_all_progress(user_id: int, db: Session = Depends(get_db),
                            current_user: UserResponse = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return await sync_service.sync_all_progress(db, user_id)


@router.post("/sync-all-users-progress", response_model=Union[BulkSyncResult, SyncTaskResponse],
             response_model_exclude_none=True)
async def sync_all_users_progress(background: bool = Query(False), db: Session = Depends(get_db),
                                  _admin=Depends(require_admin)):
    """Sync every user now, or enqueue the job on the worker with ``background=true``."""
    if background:
        task = sync_all_users_progress_task.delay()
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content=SyncTaskResponse(task_id=task.id, status="PENDING",
                                     message="Bulk progress sync started").model_dump(by_alias=True),
        )
    return await sync_service.sync_all_users_progress(db)


@router.get("/sync-tasks/{task_id}", response_model=SyncTaskStatus, response_model_exclude_none=True)
def get_sync_task_status(task_id: str, _admin=Depends(require_admin)):
    result = AsyncResult(task_id, app=celery_app)
    if result.state == 'SUCCESS':
        return SyncTaskStatus(task_id=task_id, status=result.state, result=result.result)
    if result.state == 'FAILURE':
        return SyncTaskStatus(task_id=task_id, status=result.state, error=str(result.info))
    if result.state == 'PROGRESS':
        return SyncTaskStatus(task_id=task_id, status=result.state, progress=result.info)
    return SyncTaskStatus(task_id=task_id, status=result.state)
