# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Provides an endpoint for checking background recalculation status.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel

from app.dependencies import TenantDep

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    status: str
    message: str | None = None
    result: dict | None = None
    error: str | None = None


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    tenant: TenantDep,
    task_id: Annotated[str, Path(description="Celery task ID")]
):
    """
    Get the status of a background task.

    Returns the current state of the task:
    - PENDING: Task is waiting in queue (or unknown)
    - STARTED: Task has been picked up by a worker
    - SUCCESS: Task completed; result holds {account_id, repriced}
    - FAILURE: Task failed
    - RETRY: Task failed and will be retried

    A finished task of another account answers 404, like an unknown one.
    """
    try:
        from workers.celery_app import celery_app

        result = celery_app.AsyncResult(task_id)
        status = result.status
        payload = result.result
    except Exception as e:
        logger.error(f"Error getting task status: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {e}")

    if isinstance(payload, dict) and payload.get("account_id") != tenant.account_id:
        logger.warning(
            f"[Security] User {tenant.uid} asked for task {task_id} "
            f"of account {payload.get('account_id')}"
        )
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")

    response = TaskStatusResponse(task_id=task_id, status=status)

    if status == "SUCCESS":
        response.result = payload
        response.message = "Complete"

    elif status == "FAILURE":
        # Exception text may name another account's rows
        response.error = "Recalculation failed"
        response.message = "Failed"

    elif status == "PENDING":
        response.message = "Waiting in queue..."

    elif status == "STARTED":
        response.message = "Recalculating prices..."

    return response
