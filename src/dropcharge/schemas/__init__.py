"""
Pydantic schemas for API validation and data contracts.
"""

from .products import (
    AutoProductRequest,
    ExtractRequest,
    AsinRequest,
    ProductMetadataSchema,
    NewsletterSignupRequest,
    UnsubscribeRequest,
)

__all__ = [
    'AutoProductRequest',
    'ExtractRequest',
    'AsinRequest',
    'ProductMetadataSchema',
    'NewsletterSignupRequest',
    'UnsubscribeRequest',
]
