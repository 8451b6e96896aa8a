"""
Services around the metadata extractor:

- Page fetching (short link resolution, product page download)
- Supabase product storage
- The auto product pipeline tying them together
- Newsletter subscribers, lead export and click stats
"""

from .page_fetcher import AmazonPageFetcher, looks_like_captcha
from .product_store import ProductStore
from .auto_product import AutoProductService
from .subscriber_store import ClickStore, SubscriberStore
from .newsletter import NewsletterService

__all__ = [
    'AmazonPageFetcher',
    'looks_like_captcha',
    'ProductStore',
    'AutoProductService',
    'SubscriberStore',
    'ClickStore',
    'NewsletterService',
]
