"""
Celery tasks for the practice tracker.

This package contains all task definitions organized by functionality.
"""

# Import task modules to ensure they are registered
from . import sync

__all__ = ['sync']
