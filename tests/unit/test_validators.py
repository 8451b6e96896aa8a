"""
Unit tests for input validators.
"""
import pytest

from dropcharge.utils.validators import clean_product_url, is_short_link, is_valid_url, looks_like_amazon_input


@pytest.mark.parametrize("url, expected", [
    ("https://www.amazon.de/dp/B07FZG4C8F", True),
    ("http://amzn.to/abc", True),
    ("ftp://amazon.de", False),
    ("B07FZG4C8F", False),
    ("", False),
    (None, False),
])
def test_is_valid_url(url, expected):
    assert is_valid_url(url) is expected


@pytest.mark.parametrize("url, expected", [
    ("https://amzn.to/3xYzAbC", True),
    ("https://AMZN.EU/d/4fG5hJ", True),
    ("https://www.amazon.de/dp/B07FZG4C8F", False),
    (None, False),
])
def test_is_short_link(url, expected):
    assert is_short_link(url) is expected


@pytest.mark.parametrize("text, expected", [
    ("https://www.Amazon.de/some-product", True),
    ("amzn.eu/d/xyz", True),
    ("B07FZG4C8F", True),
    ("b07fzg4c8f", False),
    ("hello world", False),
])
def test_looks_like_amazon_input(text, expected):
    assert looks_like_amazon_input(text) is expected


def test_clean_product_url():
    url = " https://www.amazon.de/dp/B07FZG4C8F?tag=abc-21&th=1#customerReviews "
    assert clean_product_url(url) == "https://www.amazon.de/dp/B07FZG4C8F"
