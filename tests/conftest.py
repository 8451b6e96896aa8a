"""
Pytest configuration and fixtures for DropCharge tests.
"""
import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add src to path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

import pytest

from dropcharge.config import Config
from dropcharge.extractors.metadata_extractor import AmazonMetadataExtractor
from dropcharge.services.page_fetcher import AmazonPageFetcher


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Pin settings that may leak in from a developer .env file."""
    monkeypatch.setattr(Config, "ADMIN_TOKEN", None)
    monkeypatch.setattr(Config, "SCRAPER_API_KEY", None)
    monkeypatch.setattr(Config, "AMAZON_DOMAIN", "amazon.de")
    monkeypatch.setattr(Config, "AFFILIATE_TAG_PREFIX", "dropcharge")
    monkeypatch.setattr(Config, "SITE_URL", "https://affiliatelux.netlify.app")
    monkeypatch.setattr(Config, "MIN_HTML_CHARS", 20)


@pytest.fixture
def extractor():
    """Create an extractor with default settings."""
    return AmazonMetadataExtractor()


@pytest.fixture
def fake_fetcher():
    """Fetcher double that never touches the network."""
    fetcher = MagicMock(spec=AmazonPageFetcher)
    fetcher.resolve_short_link.side_effect = lambda url: url
    fetcher.fetch_product_html.return_value = None
    return fetcher


@pytest.fixture
def fake_store():
    """Store double whose insert echoes the row it receives."""
    store = MagicMock()
    store.insert.side_effect = lambda product: {"id": 1, **product.to_row()}
    store.list_active.return_value = []
    store.get_by_slug.return_value = None
    return store


@pytest.fixture
def product_page_html():
    """Trimmed-down Amazon product page."""
    filler = "<div class=\"a-section\">" + ("Lorem ipsum dolor sit amet. " * 40) + "</div>"
    return f"""
    <!DOCTYPE html>
    <html lang="de-de">
    <head>
        <title>Amazon.de: Anker PowerCore 10000 Powerbank</title>
        <meta name="description" content="Anker PowerCore 10000 &amp; USB-C Kabel, kompakt und leicht.">
        <meta property="og:title" content="Anker PowerCore 10000 Powerbank">
        <meta property="og:image" content="https://m.media-amazon.com/images/I/61abcDEF.jpg">
        <script type="application/ld+json">
        {{
            "@context": "https://schema.org/",
            "@type": "Product",
            "name": "Anker PowerCore 10000",
            "offers": {{"@type": "Offer", "price": "21,99", "priceCurrency": "EUR"}},
            "aggregateRating": {{"@type": "AggregateRating", "ratingValue": "4.7", "reviewCount": "88123"}}
        }}
        </script>
    </head>
    <body>
        <h1 id="title"><span id="productTitle">Anker PowerCore 10000 Powerbank</span></h1>
        <img src="https://m.media-amazon.com/images/I/other.png" alt="">
        {filler}
        <p>Kleinste und leichteste 10000mAh Powerbank.</p>
    </body>
    </html>
    """
