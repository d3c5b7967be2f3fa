from celery import Celery

from practice_tracker.celery.config import CeleryConfig
from practice_tracker.celery import worker  # noqa: F401  connects the worker logging signal


def create_celery_app() -> Celery:
    """Create and configure Celery application."""

    celery_app = Celery(
        "practice_tracker",
        broker=CeleryConfig.broker_url,
        backend=CeleryConfig.result_backend,
        include=[
            'practice_tracker.celery.tasks.sync',
        ]
    )

    celery_app.config_from_object(CeleryConfig)

    return celery_app


# Create the Celery app instance
celery_app = create_celery_app()

if __name__ == '__main__':
    celery_app.start()
