# =============================================================================
# tests/test_workers.py - Celery Task Tests
# =============================================================================
# Tasks are called directly with .apply() (eager, no broker).
# =============================================================================

from unittest.mock import patch

import pytest
from celery.exceptions import Retry

from lib.supabase_client import SupabaseClientError
from workers.config import CeleryConfig
from workers.tasks import recalculate_account_prices


class TestRecalculateAccountPrices:

    def test_success(self):
        with patch(
            "core.services.product_service.ProductService.recalculate_prices",
            return_value=3,
        ) as recalculate:
            result = recalculate_account_prices.apply(args=["acc-1"]).get()

        recalculate.assert_called_once_with("acc-1")
        assert result == {"success": True, "account_id": "acc-1", "repriced": 3}

    def test_database_error_retries(self):
        error = SupabaseClientError("connection reset")
        with patch(
            "core.services.product_service.ProductService.recalculate_prices",
            side_effect=error,
        ), patch.object(recalculate_account_prices, "retry", side_effect=Retry()) as retry:
            with pytest.raises(Retry):
                recalculate_account_prices.run("acc-1")

        retry.assert_called_once_with(exc=error)

    def test_unexpected_error_reported(self):
        with patch(
            "core.services.product_service.ProductService.recalculate_prices",
            side_effect=RuntimeError("boom"),
        ):
            result = recalculate_account_prices.run("acc-1")

        assert result == {"success": False, "account_id": "acc-1", "error": "boom"}

    def test_end_to_end_with_database(self, fake_db, account, account_settings):
        supply = fake_db.add_row("supplies", {"account_id": account["id"], "name": "Rose", "cost": 9})
        product = fake_db.add_row("products", {
            "account_id": account["id"], "name": "Bouquet",
            "ingredients": [{"supply_id": supply["id"], "quantity": 10}],
            "price": 0, "needs_recalculation": True,
        })

        result = recalculate_account_prices.run(account["id"])

        assert result["repriced"] == 1
        assert fake_db.get("products", product["id"])["price"] == 200.0


class TestCeleryConfig:

    def test_recalculation_routed_to_pricing_queue(self):
        assert CeleryConfig.task_routes["workers.tasks.recalculate_account_prices"] == {"queue": "pricing"}

    def test_pricing_and_default_queues(self):
        assert set(CeleryConfig.task_queues) == {"default", "pricing"}


class TestHealthcheckTask:

    def test_returns_ok(self):
        from workers.celery_app import healthcheck

        assert healthcheck.apply().get() == "OK"


class TestCeleryApp:

    def test_broker_and_backend_from_settings(self):
        from app.config import settings
        from workers.celery_app import celery_app

        assert celery_app.conf.broker_url == settings.REDIS_URL
        assert celery_app.conf.result_backend == settings.REDIS_URL

    def test_recalculation_task_registered(self):
        from workers.celery_app import celery_app

        assert "workers.tasks.recalculate_account_prices" in celery_app.tasks
