from celery import Task
from celery.utils.log import get_task_logger
from typing import Any

logger = get_task_logger(__name__)


class BaseTask(Task):
    """Logs task lifecycle and publishes batch progress for the task-status endpoint."""

    def on_success(self, retval: Any, task_id: str, args: tuple, kwargs: dict) -> None:
        logger.info(f"Task {self.name}[{task_id}] succeeded")

    def on_failure(self, exc: Exception, task_id: str, args: tuple, kwargs: dict, einfo) -> None:
        logger.error(f"Task {self.name}[{task_id}] failed with exception: {exc}")

    def on_retry(self, exc: Exception, task_id: str, args: tuple, kwargs: dict, einfo) -> None:
        logger.warning(f"Task {self.name}[{task_id}] retrying due to: {exc}")

    def report_progress(self, processed: int, total: int) -> None:
        # eager runs have no backend entry to update
        if self.request.is_eager or not self.request.id:
            return
        percentage = int(processed / total * 100) if total else 100
        self.update_state(state='PROGRESS', meta={'processed': processed, 'total': total, 'percentage': percentage})
        logger.info(f"Progress: {processed}/{total} users synced ({percentage}%)")
