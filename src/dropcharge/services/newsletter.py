"""
Newsletter list management: signups, unsubscribes, lead export and stats.

Sending mail is not part of this service.
"""
from __future__ import annotations

import csv
import io
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..config import Config
from ..exceptions import InvalidSubscriberInput
from ..logger import get_logger
from .subscriber_store import ClickStore, SubscriberStore

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

UTM_KEYS = ("utm_source", "utm_campaign", "utm_medium", "utm_content", "utm_term")

EXPORT_HEADERS = [
    "ID", "Email", "Status", "Source", "Created At", "Last Sent",
    "Unsubscribed At", "UTM Source", "UTM Campaign", "Page",
]

TRACKED_PLATFORMS = ("PSN", "Xbox", "Nintendo")


def normalize_email(email: Optional[str]) -> str:
    """Trimmed, lowercased address; raises InvalidSubscriberInput if malformed."""
    email = (email or "").strip().lower()
    if not email or not EMAIL_PATTERN.match(email):
        raise InvalidSubscriberInput("Email format invalid")
    return email


def _csv_value(value: Any) -> str:
    return "" if not value else str(value)


class NewsletterService:
    """Subscriber lifecycle and the admin views over it."""

    def __init__(self, subscribers: SubscriberStore, clicks: Optional[ClickStore] = None) -> None:
        self.subscribers = subscribers
        self.clicks = clicks or ClickStore(subscribers.client)

    def subscribe(
        self,
        email: str,
        source: Optional[str] = None,
        page: Optional[str] = None,
        utm: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Add an address to the list.

        Returns:
            "subscribed", "already_subscribed" or "resubscribed"

        Raises:
            InvalidSubscriberInput: Malformed address
            SubscriberStoreError: Storage failed
        """
        email = normalize_email(email)
        utm = utm or {}

        existing = self.subscribers.find_by_email(email)
        if existing and existing.get("status") == "active":
            return "already_subscribed"

        if existing and existing.get("status") == "unsubscribed":
            meta: Dict[str, Any] = {"resubscribed_at": datetime.now(timezone.utc).isoformat()}
            if utm:
                meta["utm"] = utm
            self.subscribers.reactivate(existing["id"], meta)
            logger.info("NEWSLETTER Reactivated subscriber %s", existing["id"])
            return "resubscribed"

        row: Dict[str, Any] = {
            "email": email,
            "status": "active",
            "source": source or "popup",
            "meta": {"page": page or "/", **({"utm": utm} if utm else {})},
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        row.update({key: utm.get(key) or None for key in UTM_KEYS})
        self.subscribers.insert(row)
        logger.info("NEWSLETTER New subscriber from %s", row["source"])
        return "subscribed"

    def unsubscribe(self, subscriber_id: Any) -> bool:
        return self.subscribers.unsubscribe(subscriber_id)

    def list_leads(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = Config.LEADS_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """One page of leads plus paging totals."""
        page = max(1, page)
        limit = min(Config.LEADS_MAX_PAGE_SIZE, max(1, limit))

        rows, total = self.subscribers.search(
            status=status, search=search, offset=(page - 1) * limit, limit=limit,
        )
        return {
            "items": rows,
            "total": total,
            "page": page,
            "limit": limit,
            "pages": -(-total // limit),
        }

    def export_csv(self, status: Optional[str] = None, search: Optional[str] = None) -> str:
        """All matching leads (up to LEADS_EXPORT_LIMIT) as CSV text."""
        rows, _ = self.subscribers.search(
            status=status, search=search, limit=Config.LEADS_EXPORT_LIMIT, with_count=False,
        )

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_HEADERS)
        for lead in rows:
            meta = lead.get("meta") or {}
            utm = meta.get("utm") or {}
            writer.writerow([_csv_value(v) for v in (
                lead.get("id"),
                lead.get("email"),
                lead.get("status"),
                lead.get("source"),
                lead.get("created_at"),
                lead.get("last_sent_at"),
                lead.get("unsubscribed_at"),
                lead.get("utm_source") or utm.get("utm_source"),
                lead.get("utm_campaign") or utm.get("utm_campaign"),
                meta.get("page"),
            )])

        logger.info("NEWSLETTER Exported %d leads", len(rows))
        return buffer.getvalue().rstrip("\n")

    def stats(self) -> Dict[str, Any]:
        """Recent clicks, per-platform / per-amount totals and the signup conversion."""
        entries = self.clicks.recent(Config.STATS_RECENT_CLICKS)
        total_clicks = self.clicks.count()
        emails, _ = self.subscribers.search(
            status="active", limit=Config.STATS_RECENT_EMAILS, with_count=False,
        )
        email_count = self.subscribers.count_active()

        totals: Dict[str, Dict[str, int]] = {
            "platform": {name: 0 for name in TRACKED_PLATFORMS},
            "amount": {},
        }
        for entry in entries:
            platform = entry.get("platform")
            if platform in totals["platform"]:
                totals["platform"][platform] += 1
            amount = entry.get("amount")
            if amount:
                key = str(amount)
                totals["amount"][key] = totals["amount"].get(key, 0) + 1

        return {
            "entries": entries,
            "totals": totals,
            "emailCount": email_count,
            "conversion": email_count / total_clicks if total_clicks else 0,
            "emails": emails,
        }
