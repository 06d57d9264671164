#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker that consumes the default and pricing queues.
#
# Usage:
#   # Start worker (development)
#   python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker -Q default,pricing --loglevel=info
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

import logging

from workers.celery_app import celery_app

logger = logging.getLogger(__name__)


def main():
    """Start the Celery worker."""
    logger.info("Starting Pricewise Celery worker (Ctrl+C to stop)")

    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        "--queues=default,pricing",
        "--concurrency=2",  # 2 worker processes
    ])


if __name__ == "__main__":
    main()
