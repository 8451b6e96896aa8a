"""
Data models for DropCharge product generation.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Optional, Dict, Any

from .config import Config


@dataclass(slots=True)
class ProductMetadata:
    """
    Metadata scraped from a single marketplace product page.

    Every field stays None when no extraction strategy produced a value.

    Attributes:
        title: Display name (decoded, tag-stripped, max 200 chars)
        image: First plausible image URL
        description: Short description (decoded, tag-stripped, max 300 chars)
        price: Decimal numeral string with '.' as separator, no currency
        rating: Average rating as float (not range-checked)
    """

    title: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    price: Optional[str] = None
    rating: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "title": self.title,
            "image": self.image,
            "description": self.description,
            "price": self.price,
            "rating": self.rating,
        }

    def is_empty(self) -> bool:
        """True when no field was resolved."""
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass(slots=True)
class AutoProduct:
    """
    A generated affiliate product, ready to be persisted.

    Attributes:
        asin: Amazon product identifier
        amazon_url: Submitted URL without query string and fragment
        title: Product title (always set after backfilling)
        description: Product description (always set after backfilling)
        affiliate_key: Partner key appended to the affiliate tag
        page_slug: Unique slug of the product page
        image: Product image URL
        price: Price string
        rating: Average rating
        status: Record status ("active" records are listed)
    """

    asin: str
    amazon_url: str
    title: str
    description: str
    affiliate_key: str
    page_slug: str
    image: Optional[str] = None
    price: Optional[str] = None
    rating: Optional[float] = None
    status: str = "active"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def affiliate_link(self) -> str:
        """Amazon link carrying the partner tag."""
        return f"{self.amazon_url}?tag={Config.AFFILIATE_TAG_PREFIX}-{self.affiliate_key}"

    def to_row(self) -> dict:
        """Map to the columns of the products table."""
        return {
            "amazon_asin": self.asin,
            "amazon_url": self.amazon_url,
            "product_name": self.title,
            "product_image": self.image,
            "description": self.description,
            "price": self.price,
            "rating": self.rating,
            "affiliate_key": self.affiliate_key,
            "page_slug": self.page_slug,
            "status": self.status,
            "metadata": {**self.metadata, "affiliate_link": self.affiliate_link},
        }
