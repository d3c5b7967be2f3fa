from kombu import Queue

from practice_tracker.configs import settings


class CeleryConfig:
    """Base Celery configuration."""

    # Broker settings
    broker_url = settings.CELERY_BROKER_URL
    result_backend = settings.CELERY_RESULT_BACKEND

    # Basic settings
    task_serializer = 'json'
    accept_content = ['json']
    result_serializer = 'json'
    timezone = 'UTC'
    enable_utc = True

    # Worker settings
    worker_prefetch_multiplier = 1
    worker_max_tasks_per_child = 100
    worker_hijack_root_logger = False
    worker_log_format = '[%(asctime)s: %(levelname)s/%(processName)s] %(message)s'
    worker_task_log_format = '[%(asctime)s: %(levelname)s/%(processName)s][%(task_name)s(%(task_id)s)] %(message)s'

    # Task settings
    task_track_started = True
    task_time_limit = 30 * 60  # 30 minutes
    task_soft_time_limit = 25 * 60  # 25 minutes

    # Queue configuration
    task_default_queue = 'default'
    task_queues = (
        Queue('default', routing_key='default'),
        Queue('sync', routing_key='sync'),
    )

    task_routes = {
        'practice_tracker.celery.tasks.sync.*': {'queue': 'sync'},
    }

    # Result settings
    result_expires = 24 * 3600
    result_persistent = True
