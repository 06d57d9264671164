# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides small, table-agnostic helpers used by the tenant services:
# - fetch_row / fetch_rows: read by id or by equality filters
# - insert_row / update_row / delete_row: single-row writes
# - count_rows: exact counts for quota checks and pagination totals
#
# The service-role client bypasses Row Level Security, so tenant isolation
# is enforced by the services (every query is filtered by account_id).
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   supply = SupabaseClient.fetch_row("supplies", supply_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        product = SupabaseClient.fetch_row("products", product_id)
        supplies = SupabaseClient.fetch_rows(
            "supplies", filters={"account_id": account_id}, order_by="created_at"
        )
    """

    _instance: Client | None = None
    _anon_instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def get_anon_client(cls) -> Client:
        """
        Get or create a client authenticated with the anon key.

        Used for end-user auth flows (password sign-in) that must not run
        with service_role privileges.
        """
        if cls._anon_instance is None:
            try:
                cls._anon_instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_ANON_KEY
                )
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase anon client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
                )
        return cls._anon_instance

    @classmethod
    def reset(cls) -> None:
        """Drop cached clients (used by tests and after credential rotation)."""
        cls._instance = None
        cls._anon_instance = None

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_row(
        cls,
        table: str,
        row_id: str | UUID,
        id_column: str = "id",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row by its primary key.

        Args:
            table: Table name
            row_id: Value of the id column
            id_column: Primary key column (users are keyed by auth uid in "id")

        Returns:
            Row dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        row_id_str = cls._normalize_uuid(row_id)

        try:
            response = (
                client.table(table)
                .select("*")
                .eq(id_column, row_id_str)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch {table} row: {e}",
                code="FETCH_ROW_FAILED",
                details={"table": table, id_column: row_id_str},
            )

        rows = response.data or []
        return rows[0] if rows else None

    @classmethod
    def fetch_rows(
        cls,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        desc: bool = True,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch rows matching equality filters.

        Args:
            table: Table name
            filters: Column -> value equality filters (ANDed)
            order_by: Optional column to sort by
            desc: Sort direction (newest first by default)
            limit: Optional maximum number of rows

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        query = client.table(table).select("*")
        for column, value in (filters or {}).items():
            query = query.eq(column, cls._normalize_uuid(value))
        if order_by:
            query = query.order(order_by, desc=desc)
        if limit is not None:
            query = query.limit(limit)

        try:
            response = query.execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch {table} rows: {e}",
                code="FETCH_ROWS_FAILED",
                details={"table": table, "filters": {k: str(v) for k, v in (filters or {}).items()}},
            )

        rows = response.data or []
        logger.debug(f"Fetched {len(rows)} rows from {table}")
        return rows

    @classmethod
    def count_rows(cls, table: str, filters: dict[str, Any] | None = None) -> int:
        """
        Exact count of rows matching equality filters.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        query = client.table(table).select("id", count="exact")
        for column, value in (filters or {}).items():
            query = query.eq(column, cls._normalize_uuid(value))

        try:
            response = query.limit(1).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count {table} rows: {e}",
                code="COUNT_ROWS_FAILED",
                details={"table": table},
            )

        return response.count or 0

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @classmethod
    def insert_row(cls, table: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row and return it with generated columns (id, created_at).

        Raises:
            SupabaseClientError: If insert fails or returns nothing
        """
        client = cls.get_client()

        try:
            response = client.table(table).insert(data).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                details={"table": table},
            )

        if not response.data:
            raise SupabaseClientError(
                message=f"Insert into {table} returned no data",
                code="INSERT_NO_DATA",
                details={"table": table},
            )
        return response.data[0]

    @classmethod
    def update_row(
        cls,
        table: str,
        row_id: str | UUID,
        data: dict[str, Any],
        id_column: str = "id",
    ) -> dict[str, Any] | None:
        """
        Update a single row by primary key.

        Returns:
            The updated row, or None if no row matched

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()
        row_id_str = cls._normalize_uuid(row_id)

        try:
            response = (
                client.table(table)
                .update(data)
                .eq(id_column, row_id_str)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table} row: {e}",
                code="UPDATE_FAILED",
                details={"table": table, id_column: row_id_str},
            )

        rows = response.data or []
        return rows[0] if rows else None

    @classmethod
    def delete_row(cls, table: str, row_id: str | UUID) -> None:
        """
        Delete a single row by id.

        Raises:
            SupabaseClientError: If delete fails
        """
        client = cls.get_client()
        row_id_str = cls._normalize_uuid(row_id)

        try:
            client.table(table).delete().eq("id", row_id_str).execute()
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete {table} row: {e}",
                code="DELETE_FAILED",
                details={"table": table, "id": row_id_str},
            )
