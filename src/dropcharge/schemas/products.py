"""
Pydantic schemas for API validation.

Request bodies use the camelCase keys the admin dashboard sends; the
models expose snake_case attributes.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_optional(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class AutoProductRequest(BaseModel):
    """Request schema for generating a product from an Amazon link."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    amazon_url: str = Field(..., alias="amazonUrl", description="Amazon link, short link or bare ASIN")
    affiliate_key: str = Field(..., alias="affiliateKey", description="Partner key for the affiliate tag")
    custom_title: Optional[str] = Field(default=None, alias="customTitle", description="Fallback title")
    custom_image: Optional[str] = Field(default=None, alias="customImage", description="Fallback image URL")
    custom_description: Optional[str] = Field(
        default=None, alias="customDescription", description="Fallback description"
    )

    @field_validator('amazon_url', 'affiliate_key')
    @classmethod
    def required_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Amazon URL und Affiliate Key erforderlich")
        return v

    @field_validator('custom_title', 'custom_image', 'custom_description')
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class ExtractRequest(BaseModel):
    """Request schema for extracting metadata from pre-fetched HTML."""
    model_config = ConfigDict(extra="ignore")

    html: str = Field(..., description="Raw product page HTML")
    asin: Optional[str] = Field(default=None, description="Identifier for log context")


class AsinRequest(BaseModel):
    """Request schema for ASIN normalization."""
    model_config = ConfigDict(extra="ignore")

    input: str = Field(..., min_length=1, description="Amazon link or bare ASIN")


class ProductMetadataSchema(BaseModel):
    """Extracted metadata as returned by the API."""
    title: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    price: Optional[str] = None
    rating: Optional[float] = None


class NewsletterSignupRequest(BaseModel):
    """Request schema for a newsletter signup from the storefront popup."""
    model_config = ConfigDict(extra="ignore")

    email: str = Field(..., description="Subscriber email address")
    source: Optional[str] = Field(default=None, description="Signup widget, defaults to 'popup'")
    page: Optional[str] = Field(default=None, description="Storefront path of the signup")
    utm: Optional[Dict[str, Any]] = Field(default=None, description="UTM parameters of the visit")

    @field_validator('source', 'page')
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class UnsubscribeRequest(BaseModel):
    """Request schema for removing a lead from the list."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email_id: Union[int, str] = Field(..., alias="emailId", description="Subscriber row id")
