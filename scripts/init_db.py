#!/usr/bin/env python3
# =============================================================================
# scripts/init_db.py - Seed a Test Account
# =============================================================================
# Creates a confirmed Supabase Auth user plus the account, settings and users
# rows the app expects, and stores the account_id / plan_name claims.
# Apply scripts/schema.sql first.
#
# Usage:
#   python scripts/init_db.py --email demo@example.com --password secret123
#   python scripts/init_db.py --email demo@example.com --password secret123 --plan PRO
# =============================================================================

import argparse
import logging

from dotenv import load_dotenv

load_dotenv()

from app.auth.claims import set_user_claims
from core.services.account_service import AccountService
from core.services.settings_service import SettingsService
from core.services.user_service import UserService
from lib.feature_flags import Plan
from lib.supabase_client import SupabaseClient

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("init_db")


def seed(email: str, password: str, name: str, account_name: str, plan: Plan) -> dict:
    """Create (or reuse) the auth user and its tenant rows."""
    existing = UserService.get_user_by_email(email)
    if existing:
        logger.info(f"User {email} already exists (account {existing['account_id']})")
        return existing

    client = SupabaseClient.get_client()
    created = client.auth.admin.create_user({
        "email": email,
        "password": password,
        "email_confirm": True,
    })
    uid = created.user.id

    account = AccountService.create_account(account_name, plan_name=plan)
    SettingsService.create_settings(account["id"])
    user = UserService.create_user(uid, email, account["id"], name)
    set_user_claims(uid, {"account_id": account["id"], "plan_name": plan.value})

    logger.info(f"Seeded user {user['id']} ({email}) with account {account['id']} on {plan.value}")
    return user


def main():
    parser = argparse.ArgumentParser(description="Seed a Pricewise test account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Test User")
    parser.add_argument("--account-name", default="Test Shop")
    parser.add_argument("--plan", choices=[p.value for p in Plan], default=Plan.FREE.value)
    args = parser.parse_args()

    seed(args.email, args.password, args.name, args.account_name, Plan(args.plan))


if __name__ == "__main__":
    main()
