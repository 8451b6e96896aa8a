"""
Amazon product identifier (ASIN) normalization.
"""
from __future__ import annotations

import re
from typing import Optional

from ..logger import get_logger

logger = get_logger(__name__)

EXACT_ASIN = re.compile(r'[A-Z0-9]{10}', re.IGNORECASE)

# Tried in order after the exact match; first hit wins.
ASIN_PATTERNS = [
    ('dp_path', re.compile(r'/dp/([A-Z0-9]{10})', re.IGNORECASE)),
    ('gp_product_path', re.compile(r'/gp/product/([A-Z0-9]{10})', re.IGNORECASE)),
    ('embedded_b_code', re.compile(r'(B[A-Z0-9]{9})', re.IGNORECASE)),
    ('asin_param', re.compile(r'[?&]asin[=:]([A-Z0-9]{10})', re.IGNORECASE)),
]


def extract_identifier(raw_input: Optional[str]) -> Optional[str]:
    """
    Extract the 10-character ASIN from a bare identifier or an Amazon URL.

    Supported forms: "B07FZG4C8F", ".../dp/B07FZG4C8F", ".../gp/product/B07FZG4C8F",
    any embedded "B" + 9 alphanumerics, and "?asin=B07FZG4C8F".

    Args:
        raw_input: Identifier, marketplace URL or resolved short link

    Returns:
        Uppercased ASIN, or None if nothing matched. Never raises.
    """
    try:
        value = raw_input.strip()

        if EXACT_ASIN.fullmatch(value):
            return value.upper()

        for name, pattern in ASIN_PATTERNS:
            match = pattern.search(value)
            if match:
                logger.debug("ASIN Matched %s: %s", name, match.group(1))
                return match.group(1).upper()
    except (AttributeError, TypeError) as e:
        logger.warning("ASIN extract error for %r: %s", raw_input, e)

    return None


__all__ = ['extract_identifier', 'ASIN_PATTERNS']
