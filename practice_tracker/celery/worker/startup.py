import logging
import sys

from celery.signals import setup_logging as celery_setup_logging


def setup_worker_environment():
    """Setup environment for Celery worker."""
    try:
        from practice_tracker.configs.logging_config import setup_logging
    except ImportError as e:
        logging.error(f"Failed to load settings: {e}")
        sys.exit(1)

    setup_logging()
    logging.info("Worker environment setup complete")


@celery_setup_logging.connect
def _configure_worker_logging(**kwargs):
    setup_worker_environment()
