"""
Supabase-backed persistence of newsletter subscribers and click events.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from supabase import Client, create_client

from ..config import Config
from ..exceptions import SubscriberStoreError
from ..logger import get_logger

logger = get_logger(__name__)

LEAD_COLUMNS = "id,email,status,source,created_at,last_sent_at,unsubscribed_at,utm_source,utm_campaign,meta"
CLICK_COLUMNS = "id,slug,platform,amount,utm_source,utm_campaign,referrer,user_agent,country,ip_hash,created_at"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SubscriberStore:
    """Queries over the newsletter_subscribers table."""

    def __init__(self, client: Client, table: Optional[str] = None) -> None:
        self.client = client
        self.table = table or Config.SUBSCRIBERS_TABLE

    @classmethod
    def from_config(cls) -> "SubscriberStore":
        if not Config.SUPABASE_URL or not Config.SUPABASE_SERVICE_ROLE_KEY:
            raise SubscriberStoreError("Supabase not configured (subscriber storage)")
        return cls(create_client(Config.SUPABASE_URL, Config.SUPABASE_SERVICE_ROLE_KEY))

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        try:
            response = (
                self.client.table(self.table)
                .select("id,status")
                .eq("email", email)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("STORE Subscriber lookup failed: %s", e)
            raise SubscriberStoreError(str(e)) from e

        rows = response.data or []
        return rows[0] if rows else None

    def insert(self, row: Dict[str, Any]) -> None:
        try:
            self.client.table(self.table).insert(row).execute()
        except Exception as e:
            logger.error("STORE Subscriber insert failed: %s", e)
            raise SubscriberStoreError(str(e)) from e

    def reactivate(self, subscriber_id: Any, meta: Dict[str, Any]) -> None:
        """Set an unsubscribed row back to active."""
        try:
            (
                self.client.table(self.table)
                .update({"status": "active", "unsubscribed_at": None, "meta": meta})
                .eq("id", subscriber_id)
                .execute()
            )
        except Exception as e:
            logger.error("STORE Subscriber reactivation failed for %s: %s", subscriber_id, e)
            raise SubscriberStoreError(str(e)) from e

    def unsubscribe(self, subscriber_id: Any) -> bool:
        """Mark a subscriber as unsubscribed. False if no row has this id."""
        try:
            response = (
                self.client.table(self.table)
                .update({"status": "unsubscribed", "unsubscribed_at": _now_iso()})
                .eq("id", subscriber_id)
                .execute()
            )
        except Exception as e:
            logger.error("STORE Unsubscribe failed for %s: %s", subscriber_id, e)
            raise SubscriberStoreError(str(e)) from e

        return bool(response.data)

    def search(
        self,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = Config.LEADS_PAGE_SIZE,
        with_count: bool = True,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Subscribers newest first, optionally filtered.

        Args:
            status: Only rows with this status ("all" or None for every row)
            search: Case-insensitive substring of the email address
            offset: Rows to skip
            limit: Page size
            with_count: Ask the database for the exact total

        Returns:
            (rows, total) where total is the unpaginated match count
        """
        try:
            query = self.client.table(self.table).select(LEAD_COLUMNS, count="exact" if with_count else None)
            if status and status != "all":
                query = query.eq("status", status)
            if search:
                query = query.ilike("email", f"%{search}%")
            response = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
        except Exception as e:
            logger.error("STORE Listing subscribers failed: %s", e)
            raise SubscriberStoreError(str(e)) from e

        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return rows, total

    def count_active(self) -> int:
        try:
            response = (
                self.client.table(self.table)
                .select("id", count="exact", head=True)
                .eq("status", "active")
                .execute()
            )
        except Exception as e:
            logger.error("STORE Counting subscribers failed: %s", e)
            raise SubscriberStoreError(str(e)) from e
        return response.count or 0


class ClickStore:
    """Read access to the outbound affiliate click log."""

    def __init__(self, client: Client, table: Optional[str] = None) -> None:
        self.client = client
        self.table = table or Config.CLICKS_TABLE

    def recent(self, limit: int = Config.STATS_RECENT_CLICKS) -> List[Dict[str, Any]]:
        try:
            response = (
                self.client.table(self.table)
                .select(CLICK_COLUMNS)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error("STORE Loading clicks failed: %s", e)
            raise SubscriberStoreError(str(e)) from e
        return response.data or []

    def count(self) -> int:
        try:
            response = self.client.table(self.table).select("id", count="exact", head=True).execute()
        except Exception as e:
            logger.error("STORE Counting clicks failed: %s", e)
            raise SubscriberStoreError(str(e)) from e
        return response.count or 0
