import asyncio

from celery.utils.log import get_task_logger
from sqlmodel import Session

from practice_tracker.celery.app import celery_app
from practice_tracker.celery.tasks.base import BaseTask
from practice_tracker.configs.database import engine
from practice_tracker.services import sync_service

logger = get_task_logger(__name__)


@celery_app.task(base=BaseTask, bind=True, name='practice_tracker.celery.tasks.sync.sync_all_users_progress')
def sync_all_users_progress_task(self) -> dict:
    """Bulk platform sync for every user, run outside the request cycle."""
    logger.info(f"Starting bulk progress sync, task {self.request.id}")
    with Session(engine) as session:
        result = asyncio.run(sync_service.sync_all_users_progress(session, on_batch=self.report_progress))
    logger.info(f"Bulk progress sync finished: {result.message}")
    return result.model_dump(mode='json', by_alias=True)
