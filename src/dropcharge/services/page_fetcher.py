"""
Fetching of marketplace product pages.

All network access of the pipeline lives here. Failures never raise:
the fetcher logs them and returns None (or the unresolved link), so the
caller can fall back to a minimal product record.
"""
from __future__ import annotations

import json
from typing import Optional

import requests

from ..config import Config
from ..logger import get_logger
from ..utils.validators import is_short_link

logger = get_logger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "de-DE,de;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

SCRAPER_API_URL = "https://api.scraperapi.com/"


class AmazonPageFetcher:
    """
    Resolve Amazon short links and download product pages.

    Pages are fetched directly with browser-like headers, or through
    ScraperAPI when an API key is configured.
    """

    def __init__(
        self,
        *,
        amazon_domain: Optional[str] = None,
        resolve_timeout_s: Optional[int] = None,
        fetch_timeout_s: Optional[int] = None,
        scraperapi_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.amazon_domain = amazon_domain or Config.AMAZON_DOMAIN
        self.resolve_timeout_s = resolve_timeout_s or Config.RESOLVE_TIMEOUT_S
        self.fetch_timeout_s = fetch_timeout_s or Config.FETCH_TIMEOUT_S
        self.api_key = scraperapi_key or Config.SCRAPER_API_KEY
        self.session = session or requests.Session()

    def product_url(self, asin: str) -> str:
        """Canonical product page URL for an ASIN."""
        return f"https://www.{self.amazon_domain}/dp/{asin}"

    def resolve_short_link(self, url: str) -> str:
        """
        Follow the redirects of an amzn.to / amzn.eu link.

        Returns the final URL, or the input unchanged if it is not a short
        link or could not be resolved.
        """
        if not is_short_link(url):
            return url

        try:
            r = self.session.get(
                url,
                headers={"User-Agent": BROWSER_HEADERS["User-Agent"]},
                allow_redirects=True,
                timeout=self.resolve_timeout_s,
            )
        except requests.RequestException as e:
            logger.warning("FETCH Could not resolve shortened URL %s: %s: %s", url, type(e).__name__, e)
            return url

        if not r.ok:
            logger.warning("FETCH Short link %s answered with status %d", url, r.status_code)
            return url

        logger.debug("FETCH Resolved %s -> %s", url, r.url)
        return r.url or url

    def fetch_product_html(self, asin: str) -> Optional[str]:
        """
        Download the product page of an ASIN.

        Returns:
            Raw HTML, or None on HTTP errors, timeouts, empty bodies and
            robot-check pages
        """
        url = self.product_url(asin)

        try:
            if self.api_key:
                html = self._fetch_via_scraperapi(url)
            else:
                html = self._fetch_direct(url)
        except requests.Timeout:
            logger.error("FETCH Timeout after %ds for URL: %s", self.fetch_timeout_s, url)
            return None
        except requests.RequestException as e:
            logger.error("FETCH Request error for URL %s: %s: %s", url, type(e).__name__, e)
            return None

        if not html:
            return None

        if looks_like_captcha(html):
            logger.warning("FETCH Robot check page returned for URL: %s", url)
            return None

        logger.info("FETCH Got HTML for %s, length: %d", asin, len(html))
        return html

    def _fetch_direct(self, url: str) -> Optional[str]:
        logger.debug("FETCH Fetching: %s", url)
        r = self.session.get(url, headers=BROWSER_HEADERS, allow_redirects=True, timeout=self.fetch_timeout_s)

        if r.status_code != 200:
            logger.error("FETCH Failed with status %d for URL: %s", r.status_code, url)
            return None

        text = r.text.strip()
        if not text:
            logger.error("FETCH Empty response for URL: %s", url)
            return None
        return text

    def _fetch_via_scraperapi(self, url: str) -> Optional[str]:
        logger.debug("FETCH Fetching via ScraperAPI: %s", url)
        r = self.session.get(
            SCRAPER_API_URL,
            params={"api_key": self.api_key, "url": url, "country_code": "de"},
            timeout=self.fetch_timeout_s,
        )

        if r.status_code != 200:
            logger.error("FETCH ScraperAPI failed with status %d for URL: %s. Response: %s",
                         r.status_code, url, r.text[:500])
            return None

        text = r.text.strip()
        if not text:
            logger.error("FETCH Empty ScraperAPI response for URL: %s", url)
            return None

        # ScraperAPI may wrap the page in JSON
        if text.startswith('{'):
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                logger.debug("FETCH Response looks like JSON but failed to parse: %s", e)
            else:
                if isinstance(data, dict):
                    html = data.get('html') or data.get('body') or data.get('content')
                    if html:
                        return html
        return text


def looks_like_captcha(html: str) -> bool:
    """
    Check if HTML is Amazon's robot-check page rather than a product page.
    Conservative: only obvious challenge pages are flagged.
    """
    h = (html or "").lower()

    if "/errors/validatecaptcha" in h:
        return True

    # Challenge pages are small; real product pages run to hundreds of KB
    if len(h) < 10000:
        return any(phrase in h for phrase in (
            "enter the characters you see below",
            "geben sie die unten angezeigten zeichen ein",
            "sorry, we just need to make sure you're not a robot",
            "api-services-support@amazon.com",
        ))

    return False


__all__ = ['AmazonPageFetcher', 'looks_like_captcha', 'BROWSER_HEADERS']
