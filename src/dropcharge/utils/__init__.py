"""
Utility modules for DropCharge.
"""
from .validators import is_valid_url, is_short_link, looks_like_amazon_input, clean_product_url
from .text_cleaning import (
    HTML_ENTITIES,
    decode_entities,
    clean_field,
    normalize_whitespace,
    parse_float_prefix,
    strip_html_tags,
)

__all__ = [
    "is_valid_url",
    "is_short_link",
    "looks_like_amazon_input",
    "clean_product_url",
    "HTML_ENTITIES",
    "decode_entities",
    "clean_field",
    "normalize_whitespace",
    "parse_float_prefix",
    "strip_html_tags",
]
