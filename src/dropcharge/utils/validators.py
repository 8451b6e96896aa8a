"""
Input validation utilities.
"""
import re
from urllib.parse import urlparse

SHORT_LINK_HOSTS = ("amzn.to", "amzn.eu")


def is_valid_url(url: str) -> bool:
    """
    Check if a string is a valid HTTP/HTTPS URL.

    Examples:
        >>> is_valid_url("https://www.amazon.de/dp/B07FZG4C8F")
        True
        >>> is_valid_url("B07FZG4C8F")
        False
    """
    if not url or not isinstance(url, str):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False

    return result.scheme in ("http", "https") and bool(result.netloc)


def is_short_link(url: str) -> bool:
    """
    Check if a URL is an Amazon short link that needs resolving.

    Examples:
        >>> is_short_link("https://amzn.to/3xYzAbC")
        True
        >>> is_short_link("https://www.amazon.de/dp/B07FZG4C8F")
        False
    """
    if not url or not isinstance(url, str):
        return False

    lowered = url.lower()
    return any(host in lowered for host in SHORT_LINK_HOSTS)


def looks_like_amazon_input(text: str) -> bool:
    """
    Lenient pre-check for admin input: an Amazon/amzn domain or a
    10-character identifier anywhere in the text.

    Examples:
        >>> looks_like_amazon_input("https://amzn.eu/d/abc")
        True
        >>> looks_like_amazon_input("hello world")
        False
    """
    if not text or not isinstance(text, str):
        return False

    lowered = text.lower()
    if "amazon." in lowered or "amzn." in lowered:
        return True
    return bool(re.search(r'[A-Z0-9]{10}', text))


def clean_product_url(url: str) -> str:
    """
    Drop query string and fragment from a product URL.

    Examples:
        >>> clean_product_url("https://www.amazon.de/dp/B07FZG4C8F?tag=x#reviews")
        'https://www.amazon.de/dp/B07FZG4C8F'
    """
    return (url or "").strip().split('?')[0].split('#')[0]
