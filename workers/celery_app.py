# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# The Celery app that runs price recalculations outside the request cycle.
# Broker and result backend both come from settings.REDIS_URL (see
# workers/config.py), the same source the API enqueues through.
#
# Usage:
#   celery -A workers.celery_app worker -Q default,pricing --loglevel=info
#   celery -A workers.celery_app status
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun

from app.config import settings

# Workers don't import app.main, so they configure logging themselves
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _redacted(url: str) -> str:
    """Broker URL without credentials, for logs."""
    return url.split("@")[-1] if "@" in url else url


def create_celery_app() -> Celery:
    """
    Create the Pricewise Celery app.

    Returns:
        Celery app configured from workers.config.CeleryConfig
    """
    app = Celery("pricewise_worker", include=["workers.tasks"])
    app.config_from_object("workers.config:CeleryConfig")

    logger.info(f"Celery app created with broker: {_redacted(settings.REDIS_URL)}")
    return app


celery_app = create_celery_app()


@celery_app.task(name="workers.healthcheck")
def healthcheck() -> str:
    """Worker liveness check: healthcheck.delay().get(timeout=5) == "OK"."""
    return "OK"


# =============================================================================
# Task Lifecycle Logging
# =============================================================================

def _account_of(args, kwargs) -> str | None:
    if kwargs and "account_id" in kwargs:
        return kwargs["account_id"]
    return args[0] if args else None


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, kwargs=None, **extra):
    account_id = _account_of(args, kwargs)
    suffix = f" for account {account_id}" if account_id else ""
    logger.info(f"Task started: {task.name} [{task_id}]{suffix}")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, retval=None, state=None, **extra):
    if isinstance(retval, dict) and "repriced" in retval:
        logger.info(f"Task completed: {task.name} [{task_id}] - {retval['repriced']} product(s) repriced")
    else:
        logger.info(f"Task completed: {task.name} [{task_id}] - State: {state}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, **extra):
    logger.error(f"Task failed: {sender.name} [{task_id}] - Error: {exception}")


if __name__ == "__main__":
    celery_app.start()
