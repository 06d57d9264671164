# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks for keeping product prices current.
#
# Tasks:
# - recalculate_account_prices: Reprice every product of an account that is
#   flagged needs_recalculation (after a supply cost or settings change)
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from lib.supabase_client import SupabaseClientError

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="workers.tasks.recalculate_account_prices")
def recalculate_account_prices(self, account_id: str) -> dict[str, Any]:
    """
    Reprice the flagged products of one account.

    Database errors are retried (see task_annotations in workers.config);
    products keep their flag until a run succeeds.

    Args:
        account_id: The account UUID

    Returns:
        Dict with:
        - success: bool
        - account_id: The account processed
        - repriced: Number of products that got a new price
    """
    from core.services.product_service import ProductService

    logger.info(f"Recalculating prices for account {account_id}")

    try:
        repriced = ProductService.recalculate_prices(account_id)

    except SupabaseClientError as e:
        logger.warning(f"Recalculation for account {account_id} hit a database error: {e}")
        raise self.retry(exc=e)

    except Exception as e:
        logger.exception(f"Recalculation failed: {e}")
        return {
            "success": False,
            "account_id": account_id,
            "error": str(e),
        }

    return {
        "success": True,
        "account_id": account_id,
        "repriced": repriced,
    }
