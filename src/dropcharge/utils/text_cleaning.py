"""
Text cleaning and normalization utilities.
"""
import re
from types import MappingProxyType
from typing import Optional

# Only these references are decoded. Numeric references such as "&#65;" are
# matched by ENTITY_PATTERN but have no entry, so they pass through as-is.
HTML_ENTITIES = MappingProxyType({
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#039;": "'",
    "&apos;": "'",
    "&nbsp;": " ",
})

ENTITY_PATTERN = re.compile(r"&[a-z]+;|&#\d+;", re.IGNORECASE)
TAG_PATTERN = re.compile(r"<[^>]*>")


def decode_entities(text: Optional[str]) -> str:
    """
    Replace the named HTML entities of HTML_ENTITIES with their characters.

    Args:
        text: Text possibly containing entities

    Returns:
        Decoded text

    Examples:
        >>> decode_entities("Tom &amp; Jerry")
        'Tom & Jerry'
        >>> decode_entities("&#65;")
        '&#65;'
    """
    if not text:
        return ""

    return ENTITY_PATTERN.sub(lambda m: HTML_ENTITIES.get(m.group(0), m.group(0)), text)


def normalize_whitespace(text: str) -> str:
    """
    Normalize whitespace in text.

    Examples:
        >>> normalize_whitespace("hello    world\\n\\ntest")
        'hello world test'
    """
    if not text:
        return ""

    return re.sub(r'\s+', ' ', text).strip()


def strip_html_tags(text: str) -> str:
    """
    Remove HTML tags from text. Entities are left alone.

    Examples:
        >>> strip_html_tags("<p>Hello <strong>world</strong></p>")
        'Hello world'
    """
    if not text:
        return ""

    return TAG_PATTERN.sub('', text)


def clean_field(text: Optional[str], max_length: int) -> Optional[str]:
    """
    Post-process an extracted text field.

    Decodes entities, strips tags, trims and truncates, in that order.
    Returns None when nothing is left.

    Examples:
        >>> clean_field("  <b>Tom &amp; Jerry</b> ", 200)
        'Tom & Jerry'
    """
    if not text:
        return None

    cleaned = strip_html_tags(decode_entities(text)).strip()[:max_length]
    return cleaned or None


def parse_float_prefix(value: object) -> Optional[float]:
    """
    Parse the leading decimal number of a value.

    Trailing garbage is ignored ("4.5." -> 4.5); a value without a leading
    number yields None.

    Examples:
        >>> parse_float_prefix("4.7 out of 5")
        4.7
        >>> parse_float_prefix(".")
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    match = re.match(r'\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))', str(value))
    if not match:
        return None
    return float(match.group(1))
