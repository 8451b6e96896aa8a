"""
Supabase-backed persistence of generated products.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from ..config import Config
from ..exceptions import ProductStoreError
from ..logger import get_logger
from ..models import AutoProduct

logger = get_logger(__name__)


class ProductStore:
    """CRUD over the auto_products table."""

    def __init__(self, client: Client, table: Optional[str] = None) -> None:
        self.client = client
        self.table = table or Config.PRODUCTS_TABLE

    @classmethod
    def from_config(cls) -> "ProductStore":
        """Build a store from SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY."""
        if not Config.SUPABASE_URL or not Config.SUPABASE_SERVICE_ROLE_KEY:
            raise ProductStoreError("Supabase not configured (product storage)")
        return cls(create_client(Config.SUPABASE_URL, Config.SUPABASE_SERVICE_ROLE_KEY))

    def insert(self, product: AutoProduct) -> Dict[str, Any]:
        """Insert a product and return the stored row."""
        logger.info("STORE Saving product %s (%s)", product.asin, product.page_slug)
        try:
            response = self.client.table(self.table).insert(product.to_row()).execute()
        except Exception as e:
            logger.error("STORE Insert failed for %s: %s", product.page_slug, e)
            raise ProductStoreError(f"Fehler beim Speichern: {e}") from e

        rows = response.data or []
        if not rows:
            raise ProductStoreError("Insert returned no rows")
        return rows[0]

    def list_active(self, limit: int = Config.DEFAULT_LIST_LIMIT) -> List[Dict[str, Any]]:
        """Active products, newest first."""
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq("status", "active")
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error("STORE Listing products failed: %s", e)
            raise ProductStoreError(str(e)) from e

        return response.data or []

    def get_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        """The active product with this page slug, or None."""
        try:
            response = (
                self.client.table(self.table)
                .select("*")
                .eq("page_slug", slug)
                .eq("status", "active")
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("STORE Lookup of %s failed: %s", slug, e)
            raise ProductStoreError(str(e)) from e

        rows = response.data or []
        return rows[0] if rows else None

    def increment_views(self, row: Dict[str, Any]) -> None:
        """Bump the view counter of a stored product. Failures are only logged."""
        try:
            (
                self.client.table(self.table)
                .update({"view_count": (row.get("view_count") or 0) + 1})
                .eq("id", row["id"])
                .execute()
            )
        except Exception as e:
            logger.error("STORE Update count error for %s: %s", row.get("page_slug"), e)
