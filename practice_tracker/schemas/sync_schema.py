from typing import Any, Dict, List, Optional

from pydantic import Field

from practice_tracker.schemas.base import CamelModel
from practice_tracker.utils.utils import Platform


class SyncStats(CamelModel):
    platform: Platform
    total_questions: int = 0
    solved_questions: int = 0
    updated_questions: int = 0
    newly_solved: int = 0
    # platform-named totals read by the web client
    total_gfg_questions: Optional[int] = Field(default=None, alias="totalGFGQuestions")
    total_leetcode_questions: Optional[int] = Field(default=None, alias="totalLeetCodeQuestions")
    match_strategies: Optional[Dict[str, int]] = None


class SyncResult(CamelModel):
    success: bool = True
    message: str
    stats: SyncStats


class PlatformSyncOutcome(CamelModel):
    success: bool
    message: Optional[str] = None
    stats: Optional[SyncStats] = None
    error: Optional[str] = None
    # no account on this platform, so nothing was attempted
    skipped: Optional[bool] = None


class SyncAllResult(CamelModel):
    success: bool = True
    message: str
    results: Dict[str, PlatformSyncOutcome]


class UserSyncSummary(CamelModel):
    user_id: int
    username: str
    results: Dict[str, PlatformSyncOutcome]


class UserSyncFailure(CamelModel):
    user_id: int
    username: str
    error: str


class BulkSyncResult(CamelModel):
    success: bool = True
    message: str
    total_users: int
    processed: int
    failed: int
    results: List[UserSyncSummary] = []
    failures: List[UserSyncFailure] = []


class SyncTaskResponse(CamelModel):
    task_id: str
    status: str
    message: str


class SyncTaskStatus(CamelModel):
    task_id: str
    status: str
    result: Any = None
    progress: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
