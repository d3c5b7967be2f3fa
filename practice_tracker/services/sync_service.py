import asyncio
import logging
from collections import Counter
from typing import Callable, Iterable, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session, select

from practice_tracker.clients import GfgClient, LeetCodeClient, PlatformClient
from practice_tracker.configs import settings
from practice_tracker.configs.database import engine
from practice_tracker.models import Question, User, UserRole
from practice_tracker.schemas.sync_schema import (
    BulkSyncResult, PlatformSyncOutcome, SyncAllResult, SyncResult, SyncStats, UserSyncFailure, UserSyncSummary,
)
from practice_tracker.services import progress_service, question_service, reconciliation
from practice_tracker.services.user_service import get_user_model
from practice_tracker.utils.errors import MissingUsernameError, TrackerError
from practice_tracker.utils.utils import Platform, utcnow

logger = logging.getLogger(__name__)

# (profile attribute, label) of the account each platform is synced from
PLATFORM_ACCOUNTS = {
    Platform.geeksforgeeks: ("geeksforgeeks_username", "GeeksforGeeks"),
    Platform.leetcode: ("leetcode_username", "LeetCode"),
}

# Database calls go through run_in_threadpool; only the platform fetch runs on the event loop.


def _load_sync_inputs(db: Session, user_id: int, platform: Platform) -> Tuple[str, str, List[Question]]:
    """Returns (username, platform username, local questions of that platform)."""
    user = get_user_model(user_id, db)
    attribute, label = PLATFORM_ACCOUNTS[platform]
    platform_username = getattr(user, attribute)
    if not platform_username:
        raise MissingUsernameError(label)
    return user.username, platform_username, question_service.list_questions_for_platform(db, platform)


def _mark_solved(db: Session, user_id: int, questions: Iterable[Question]) -> Tuple[int, int]:
    """Upsert every matched question as solved. Returns (updated, newly_solved)."""
    now = utcnow()
    updated = newly_solved = 0
    for question_id in [q.id for q in questions]:
        existing = progress_service.get_progress(db, user_id, question_id)
        if existing is None or not existing.is_solved:
            newly_solved += 1
        progress_service.upsert_progress(db, user_id, question_id, True, solved_at=now)
        updated += 1
    return updated, newly_solved


async def sync_gfg_progress(db: Session, user_id: int, client: Optional[PlatformClient] = None) -> SyncResult:
    username, gfg_username, local_questions = await run_in_threadpool(
        _load_sync_inputs, db, user_id, Platform.geeksforgeeks)
    client = client or GfgClient.from_settings()
    fetched = await client.fetch(gfg_username)
    parsed = reconciliation.parse_gfg_payload(fetched.payload)

    stats = SyncStats(platform=Platform.geeksforgeeks, total_questions=len(local_questions),
                      total_gfg_questions=len(local_questions))
    if not isinstance(parsed, reconciliation.SolvedList):
        logger.warning("Unrecognized GeeksforGeeks payload from %s (keys: %s)", fetched.endpoint,
                       getattr(parsed, "keys", []))
        return SyncResult(message="GeeksforGeeks returned no solved-problem list; nothing to sync", stats=stats)

    matched = reconciliation.match_gfg_questions(local_questions, parsed.urls)
    stats.solved_questions = len(matched)
    stats.updated_questions, stats.newly_solved = await run_in_threadpool(_mark_solved, db, user_id, matched)
    logger.info("GFG sync for %s: %s solved upstream, %s of %s local questions matched",
                username, len(parsed.urls), len(matched), len(local_questions))
    return SyncResult(message="GFG progress synchronized successfully", stats=stats)


async def sync_leetcode_progress(db: Session, user_id: int, client: Optional[PlatformClient] = None) -> SyncResult:
    username, leetcode_username, local_questions = await run_in_threadpool(
        _load_sync_inputs, db, user_id, Platform.leetcode)
    client = client or LeetCodeClient.from_settings()
    fetched = await client.fetch(leetcode_username)
    parsed = reconciliation.parse_leetcode_payload(fetched.payload)
    stats = SyncStats(platform=Platform.leetcode, total_questions=len(local_questions),
                      total_leetcode_questions=len(local_questions), match_strategies={})
    if isinstance(parsed, reconciliation.StatsOnly):
        return SyncResult(
            message=(f"LeetCode only reported aggregate counts ({parsed.total_solved} solved) without a "
                     f"problem list; no questions could be matched"),
            stats=stats,
        )
    if isinstance(parsed, reconciliation.Unrecognized):
        logger.warning("Unrecognized LeetCode payload from %s (keys: %s)", fetched.endpoint, parsed.keys)
        return SyncResult(message="LeetCode returned an unrecognized response; nothing to sync", stats=stats)

    matches = reconciliation.match_leetcode_questions(local_questions, parsed.entries,
                                                      allow_partial=settings.LEETCODE_ALLOW_PARTIAL_MATCH)
    stats.solved_questions = len(matches)
    stats.match_strategies = dict(Counter(m.strategy.value for m in matches))
    stats.updated_questions, stats.newly_solved = await run_in_threadpool(
        _mark_solved, db, user_id, [m.question for m in matches])
    logger.info("LeetCode sync for %s: %s solved entries from %s, %s of %s local questions matched",
                username, len(parsed.entries), parsed.source, len(matches), len(local_questions))
    return SyncResult(message="LeetCode progress synchronized successfully", stats=stats)


def _outcome(result: SyncResult | TrackerError) -> PlatformSyncOutcome:
    if isinstance(result, MissingUsernameError):
        return PlatformSyncOutcome(success=False, error=result.detail, skipped=True)
    if isinstance(result, TrackerError):
        return PlatformSyncOutcome(success=False, error=result.detail)
    return PlatformSyncOutcome(success=True, message=result.message, stats=result.stats)


async def sync_all_progress(db: Session, user_id: int, gfg_client: Optional[PlatformClient] = None,
                            leetcode_client: Optional[PlatformClient] = None) -> SyncAllResult:
    """Sync every platform for one user; a failing platform does not fail the others."""
    await run_in_threadpool(get_user_model, user_id, db)
    results = {}
    for key, sync, client in (("gfg", sync_gfg_progress, gfg_client),
                              ("leetcode", sync_leetcode_progress, leetcode_client)):
        try:
            results[key] = _outcome(await sync(db, user_id, client))
        except TrackerError as e:
            logger.info("%s sync failed for user %s: %s", key, user_id, e.detail)
            results[key] = _outcome(e)
    synced = [key for key, outcome in results.items() if outcome.success]
    message = f"Synchronized {', '.join(synced)}" if synced else "No platform could be synchronized"
    return SyncAllResult(message=message, results=results)


def failure_reason(result: SyncAllResult) -> Optional[str]:
    """Error text when every platform the user has an account on failed, else None."""
    attempted = {key: outcome for key, outcome in result.results.items() if not outcome.skipped}
    if not attempted or any(outcome.success for outcome in attempted.values()):
        return None
    return "; ".join(f"{key}: {outcome.error}" for key, outcome in attempted.items())


def _list_sync_targets(db: Session) -> List[Tuple[int, str]]:
    users: List[User] = db.exec(select(User).where(User.role == UserRole.user).order_by(User.id)).all()
    return [(u.id, u.username) for u in users]


async def _sync_user(user_id: int, gfg_client: Optional[PlatformClient],
                     leetcode_client: Optional[PlatformClient]) -> SyncAllResult:
    # users in one batch run concurrently, so each gets its own session
    session = Session(engine)
    try:
        return await sync_all_progress(session, user_id, gfg_client, leetcode_client)
    finally:
        await run_in_threadpool(session.close)


async def sync_all_users_progress(db: Session, batch_size: Optional[int] = None,
                                  batch_delay: Optional[float] = None,
                                  gfg_client: Optional[PlatformClient] = None,
                                  leetcode_client: Optional[PlatformClient] = None,
                                  on_batch: Optional[Callable[[int, int], None]] = None) -> BulkSyncResult:
    """Sync every regular user, a fixed-size batch at a time to respect upstream rate limits."""
    batch_size = batch_size or settings.SYNC_BATCH_SIZE
    batch_delay = settings.SYNC_BATCH_DELAY_SECONDS if batch_delay is None else batch_delay
    targets = await run_in_threadpool(_list_sync_targets, db)

    summaries, failures = [], []
    for start in range(0, len(targets), batch_size):
        batch = targets[start:start + batch_size]
        logger.info("Syncing users %s-%s of %s", start + 1, start + len(batch), len(targets))
        outcomes = await asyncio.gather(
            *(_sync_user(user_id, gfg_client, leetcode_client) for user_id, _ in batch),
            return_exceptions=True,
        )
        for (user_id, username), outcome in zip(batch, outcomes):
            if isinstance(outcome, Exception):
                error = getattr(outcome, "detail", None) or str(outcome)
            else:
                error = failure_reason(outcome)
            if error:
                logger.error("Sync failed for user %s: %s", username, error)
                failures.append(UserSyncFailure(user_id=user_id, username=username, error=error))
            else:
                summaries.append(UserSyncSummary(user_id=user_id, username=username, results=outcome.results))
        if on_batch is not None:
            on_batch(start + len(batch), len(targets))
        if start + batch_size < len(targets) and batch_delay > 0:
            await asyncio.sleep(batch_delay)

    return BulkSyncResult(
        message=f"Synced progress for {len(summaries)} of {len(targets)} users",
        total_users=len(targets),
        processed=len(summaries),
        failed=len(failures),
        results=summaries,
        failures=failures,
    )
