# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# background price recalculation.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (price recalculation)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker --loglevel=info
#
#   # Or use the script
#   python scripts/start_worker.py
#
#   # Submit task (from API)
#   from workers.tasks import recalculate_account_prices
#   result = recalculate_account_prices.delay(account_id)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
