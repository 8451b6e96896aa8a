"""
Auto product pipeline: Amazon link in, stored product record out.
"""
from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from ..config import Config
from ..exceptions import InvalidProductInput
from ..extractors.asin import extract_identifier
from ..extractors.metadata_extractor import AmazonMetadataExtractor
from ..logger import get_logger
from ..models import AutoProduct, ProductMetadata
from ..utils.validators import clean_product_url, is_short_link, is_valid_url, looks_like_amazon_input
from .page_fetcher import AmazonPageFetcher
from .product_store import ProductStore

logger = get_logger(__name__)

FETCH_FAILED_TITLE = "Amazon Produkt {asin}"
FETCH_FAILED_DESCRIPTION = "Premium-Produkt auf Amazon verfügbar"
DEFAULT_TITLE = "Amazon ASIN: {asin}"
DEFAULT_DESCRIPTION = "Entdecke dieses Produkt auf Amazon"


class AutoProductService:
    """
    Generate affiliate product records from Amazon links.

    The pipeline never fails because scraping was partial: fields the
    extractor could not resolve are backfilled from the admin's custom
    values and then from fixed defaults.
    """

    def __init__(
        self,
        store: ProductStore,
        fetcher: Optional[AmazonPageFetcher] = None,
        extractor: Optional[AmazonMetadataExtractor] = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher or AmazonPageFetcher()
        self.extractor = extractor or AmazonMetadataExtractor()

    def create_product(
        self,
        amazon_url: str,
        affiliate_key: str,
        custom_title: Optional[str] = None,
        custom_image: Optional[str] = None,
        custom_description: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Scrape, backfill and persist a product.

        Returns:
            The stored row

        Raises:
            InvalidProductInput: Missing fields or no ASIN found
            ProductStoreError: Persisting failed
        """
        amazon_url = (amazon_url or "").strip()
        affiliate_key = (affiliate_key or "").strip()
        if not amazon_url or not affiliate_key:
            raise InvalidProductInput("Amazon URL und Affiliate Key erforderlich")
        if not looks_like_amazon_input(amazon_url):
            logger.warning("PIPELINE Input does not look like an Amazon link or ASIN: %r", amazon_url)

        asin = self.resolve_asin(amazon_url)
        if not asin:
            raise InvalidProductInput(
                "Konnte ASIN nicht extrahieren. Bitte gib einen Amazon Link oder ASIN ein (z.B. B07FZG4C8F)"
            )
        logger.info("PIPELINE Extracted ASIN: %s", asin)

        scraped = self.scrape(asin)
        if scraped is None:
            logger.info("PIPELINE Using fallback data for %s", asin)
            scraped = ProductMetadata(
                title=custom_title or FETCH_FAILED_TITLE.format(asin=asin),
                image=custom_image or None,
                description=custom_description or FETCH_FAILED_DESCRIPTION,
            )

        product = self.build_product(
            asin=asin,
            amazon_url=amazon_url,
            affiliate_key=affiliate_key,
            scraped=scraped,
            custom_title=custom_title,
            custom_image=custom_image,
            custom_description=custom_description,
        )
        return self.store.insert(product)

    def resolve_asin(self, amazon_url: str) -> Optional[str]:
        """ASIN of a link, following short links first."""
        if is_valid_url(amazon_url) and is_short_link(amazon_url):
            resolved = self.fetcher.resolve_short_link(clean_product_url(amazon_url))
            asin = extract_identifier(resolved)
            if asin:
                return asin
        return extract_identifier(amazon_url)

    def scrape(self, asin: str) -> Optional[ProductMetadata]:
        """Fetch and extract the product page; None if the page is unavailable."""
        html = self.fetcher.fetch_product_html(asin)
        if html is None:
            return None
        metadata = self.extractor.extract(html, asin)
        if metadata.is_empty():
            logger.warning("PIPELINE Nothing extracted for %s, using defaults", asin)
        return metadata

    @staticmethod
    def build_product(
        *,
        asin: str,
        amazon_url: str,
        affiliate_key: str,
        scraped: ProductMetadata,
        custom_title: Optional[str] = None,
        custom_image: Optional[str] = None,
        custom_description: Optional[str] = None,
        now_ms: Optional[int] = None,
    ) -> AutoProduct:
        """Merge scraped values with custom values and defaults."""
        if now_ms is None:
            now_ms = int(time.time() * 1000)

        return AutoProduct(
            asin=asin,
            amazon_url=clean_product_url(amazon_url),
            title=scraped.title or custom_title or DEFAULT_TITLE.format(asin=asin),
            image=scraped.image or custom_image or None,
            description=scraped.description or custom_description or DEFAULT_DESCRIPTION,
            price=scraped.price or None,
            rating=scraped.rating or None,
            affiliate_key=affiliate_key,
            page_slug=f"{asin.lower()}-{now_ms}",
        )

    def list_products(self, limit: int = Config.DEFAULT_LIST_LIMIT) -> List[Dict[str, Any]]:
        return self.store.list_active(limit=limit)

    def get_product(self, slug: str) -> Optional[Dict[str, Any]]:
        """Look up a product page and count the view."""
        row = self.store.get_by_slug(slug)
        if row is not None:
            self.store.increment_views(row)
        return row
