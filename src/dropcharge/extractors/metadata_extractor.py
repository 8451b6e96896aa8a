from __future__ import annotations

import json
import re
from functools import cached_property
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup

from ..config import Config
from ..logger import get_logger
from ..models import ProductMetadata
from ..utils.text_cleaning import clean_field, normalize_whitespace, parse_float_prefix

logger = get_logger(__name__)

Strategy = Tuple[str, Callable[[], Any]]

# <meta ...> tags, tolerating '>' inside quoted attribute values
META_TAG = re.compile(r'<meta\b((?:[^>"\']|"[^"]*"|\'[^\']*\')*)/?>', re.IGNORECASE)
META_ATTR = re.compile(r'([\w:.-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\')')
TITLE_TAG = re.compile(r'<title\b[^>]*>([^<]*)</title>', re.IGNORECASE)


class PageDocument:
    """
    One fetched HTML page, parsed lazily.

    Meta tags are read from the raw text so that entity references survive
    until post-processing; the BeautifulSoup tree is only built when a
    structural strategy (JSON-LD, img, h1, p) actually runs.
    """

    def __init__(self, html: str) -> None:
        self.html = html

    @cached_property
    def meta_tags(self) -> List[Dict[str, str]]:
        tags = []
        for match in META_TAG.finditer(self.html):
            attrs = {}
            for attr in META_ATTR.finditer(match.group(1)):
                value = attr.group(2) if attr.group(2) is not None else attr.group(3)
                attrs[attr.group(1).lower()] = value
            tags.append(attrs)
        return tags

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")

    @cached_property
    def jsonld_nodes(self) -> List[Dict[str, Any]]:
        """All JSON-LD objects of the page, in document order."""
        nodes: List[Dict[str, Any]] = []

        for script in self.soup.find_all('script', attrs={'type': 'application/ld+json'}):
            raw = (script.string or script.get_text() or '').strip()
            if not raw:
                continue

            try:
                data = json.loads(raw)
                block = [node for node in _iterate_jsonld(data) if isinstance(node, dict)]
            except (json.JSONDecodeError, ValueError, RecursionError) as e:
                logger.debug("JSON-LD parsing failed: %s", type(e).__name__)
                continue

            nodes.extend(block)

        logger.debug("JSON-LD Found %d structured data objects", len(nodes))
        return nodes


def _iterate_jsonld(data) -> Iterator:
    """Recursively iterate through JSON-LD data structures."""
    if isinstance(data, dict):
        yield data
        graph = data.get('@graph')
        if isinstance(graph, list):
            for item in graph:
                yield from _iterate_jsonld(item)
    elif isinstance(data, list):
        for item in data:
            yield from _iterate_jsonld(item)


class AmazonMetadataExtractor:
    """
    Best-effort metadata extraction from a marketplace product page.

    Each field is resolved by its own waterfall of strategies, tried in
    order until one returns a value:

    - title: og:title > meta title / <title> > JSON-LD name > first <h1>
    - image: og:image > JSON-LD image > first <img> with an image extension
    - description: og:description > meta description > JSON-LD description
      > first short <p> (large documents only)
    - price: JSON-LD offers.price > currency regexes
    - rating: JSON-LD aggregateRating.ratingValue > rating regexes

    A failing strategy is logged and skipped; extract() never raises.
    """

    PRICE_PATTERNS = [
        ('price_key', re.compile(r'["\']price["\']\s*:\s*["\']?(\d+[.,]\d{2})', re.IGNORECASE)),
        ('euro_sign_before', re.compile(r'€\s*(\d+[.,]\d{2})')),
        ('eur_before', re.compile(r'EUR\s*(\d+[.,]\d{2})', re.IGNORECASE)),
        ('eur_after', re.compile(r'(\d+[.,]\d{2})\s*EUR', re.IGNORECASE)),
        ('euro_sign_after', re.compile(r'(\d+[.,]\d{2})\s*€')),
    ]

    RATING_PATTERNS = [
        ('rating_value_key', re.compile(r'ratingValue["\']\s*:\s*["\']?([0-9.]+)', re.IGNORECASE)),
        ('rating_key', re.compile(r'rating["\']\s*:\s*["\']?([0-9.]+)', re.IGNORECASE)),
        ('von_5', re.compile(r'(\d+(?:[.,]\d+)?)["\']?\s*von\s*["\']?5(?!\d)', re.IGNORECASE)),
        ('out_of_5', re.compile(r'(\d+(?:[.,]\d+)?)\s*out\s+of\s*5(?!\d)', re.IGNORECASE)),
    ]

    IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp')
    IMAGE_ATTRIBUTES = ('src', 'data-src')

    def __init__(
        self,
        *,
        min_html_length: Optional[int] = None,
        title_max_chars: Optional[int] = None,
        description_max_chars: Optional[int] = None,
        heading_fallback: bool = True,
        paragraph_min_doc_chars: int = 1000,
        paragraph_text_range: Tuple[int, int] = (20, 200),
    ) -> None:
        """
        Initialize the extractor.

        Args:
            min_html_length: Documents shorter than this yield an empty record
            title_max_chars: Title truncation length
            description_max_chars: Description truncation length
            heading_fallback: Use the first <h1> as last title fallback
            paragraph_min_doc_chars: Only look for <p> descriptions in larger documents
            paragraph_text_range: Accepted (min, max) text length of a <p> description
        """
        self.min_html_length = Config.MIN_HTML_CHARS if min_html_length is None else min_html_length
        self.title_max_chars = title_max_chars or Config.TITLE_MAX_CHARS
        self.description_max_chars = description_max_chars or Config.DESCRIPTION_MAX_CHARS
        self.heading_fallback = heading_fallback
        self.paragraph_min_doc_chars = paragraph_min_doc_chars
        self.paragraph_text_range = paragraph_text_range

    def extract(self, html: Optional[str], asin: Optional[str] = None) -> ProductMetadata:
        """
        Extract product metadata from a fetched page.

        Args:
            html: Raw HTML of the product page
            asin: Product identifier, used for log context only

        Returns:
            ProductMetadata with whichever fields could be resolved
        """
        if not isinstance(html, str) or len(html) < self.min_html_length:
            logger.warning("EXTRACT HTML too small or empty for %s: %d chars",
                           asin, len(html) if isinstance(html, str) else 0)
            return ProductMetadata()

        doc = PageDocument(html)

        title_chain: List[Strategy] = [
            ('og_title', lambda: self._meta_content(doc, 'property', 'og:title')),
            ('meta_title', lambda: self._meta_content(doc, 'name', 'title') or self._title_tag(doc)),
            ('jsonld_name', lambda: self._jsonld_first(doc, self._jsonld_text('name'))),
        ]
        if self.heading_fallback:
            title_chain.append(('h1', lambda: self._first_heading(doc)))

        title = self._run_waterfall('title', title_chain, asin)
        image = self._run_waterfall('image', [
            ('og_image', lambda: self._meta_content(doc, 'property', 'og:image')),
            ('jsonld_image', lambda: self._jsonld_first(doc, self._jsonld_image)),
            ('img_tag', lambda: self._first_image(doc)),
        ], asin)
        description = self._run_waterfall('description', [
            ('og_description', lambda: self._meta_content(doc, 'property', 'og:description')),
            ('meta_description', lambda: (self._meta_content(doc, 'name', 'description')
                                          or self._meta_content(doc, 'property', 'description'))),
            ('jsonld_description', lambda: self._jsonld_first(doc, self._jsonld_text('description'))),
            ('paragraph', lambda: self._first_paragraph(doc)),
        ], asin)
        price = self._run_waterfall('price', [
            ('jsonld_offer', lambda: self._jsonld_first(doc, self._jsonld_price)),
            ('price_regex', lambda: self._regex_price(doc)),
        ], asin)
        rating = self._run_waterfall('rating', [
            ('jsonld_rating', lambda: self._jsonld_first(doc, self._jsonld_rating)),
            ('rating_regex', lambda: self._regex_rating(doc)),
        ], asin)

        metadata = ProductMetadata(
            title=clean_field(title, self.title_max_chars),
            image=image,
            description=clean_field(description, self.description_max_chars),
            price=price,
            rating=rating,
        )

        logger.info(
            "EXTRACT Result for %s: title=%s image=%s price=%s rating=%s",
            asin,
            metadata.title[:40] if metadata.title else '-',
            'yes' if metadata.image else '-',
            metadata.price or '-',
            metadata.rating if metadata.rating is not None else '-',
        )
        return metadata

    def _run_waterfall(self, field_name: str, chain: List[Strategy], asin: Optional[str]) -> Any:
        """Return the first non-empty strategy result of a field's chain."""
        for method_name, strategy in chain:
            try:
                value = strategy()
            except Exception as e:
                logger.warning("EXTRACT %s/%s failed for %s: %s", field_name, method_name, asin, e)
                continue

            if value is None or (isinstance(value, str) and not value.strip()):
                continue

            logger.debug("EXTRACT %s resolved via %s", field_name, method_name)
            return value

        logger.debug("EXTRACT %s not found for %s", field_name, asin)
        return None

    # -- meta tags (raw text) -------------------------------------------------

    def _meta_content(self, doc: PageDocument, attr_name: str, attr_value: str) -> Optional[str]:
        """Content of the first <meta attr_name="attr_value"> tag with a non-empty content."""
        wanted = attr_value.lower()
        for attrs in doc.meta_tags:
            if (attrs.get(attr_name) or '').lower() != wanted:
                continue
            content = attrs.get('content')
            if content and content.strip():
                return content
        return None

    def _title_tag(self, doc: PageDocument) -> Optional[str]:
        match = TITLE_TAG.search(doc.html)
        if match and match.group(1).strip():
            return match.group(1)
        return None

    # -- structured data --------------------------------------------------------

    def _jsonld_first(self, doc: PageDocument, getter: Callable[[Dict[str, Any]], Any]) -> Any:
        """First value a getter produces across all JSON-LD objects."""
        for node in doc.jsonld_nodes:
            try:
                value = getter(node)
            except (AttributeError, TypeError, KeyError, IndexError, ValueError) as e:
                logger.debug("JSON-LD Skipping malformed node: %s", e)
                continue
            if value is not None:
                return value
        return None

    @staticmethod
    def _jsonld_text(key: str) -> Callable[[Dict[str, Any]], Optional[str]]:
        def getter(node: Dict[str, Any]) -> Optional[str]:
            value = node.get(key)
            if isinstance(value, str) and value.strip():
                return value
            return None
        return getter

    @staticmethod
    def _jsonld_image(node: Dict[str, Any]) -> Optional[str]:
        image = node.get('image')
        if isinstance(image, list):
            image = image[0] if image else None
        if isinstance(image, dict):
            image = image.get('url')
        if isinstance(image, str) and image.strip():
            return image
        return None

    @staticmethod
    def _jsonld_price(node: Dict[str, Any]) -> Optional[str]:
        offers = node.get('offers')
        if isinstance(offers, list):
            offers = offers[0] if offers else None
        if not isinstance(offers, dict):
            return None

        price = offers.get('price')
        if price is None or isinstance(price, bool):
            return None
        price = str(price).strip().replace(',', '.')
        return price or None

    @staticmethod
    def _jsonld_rating(node: Dict[str, Any]) -> Optional[float]:
        aggregate = node.get('aggregateRating')
        if not isinstance(aggregate, dict):
            return None
        return parse_float_prefix(aggregate.get('ratingValue'))

    # -- document structure -----------------------------------------------------

    def _first_heading(self, doc: PageDocument) -> Optional[str]:
        h1 = doc.soup.find('h1')
        if not h1:
            return None
        return h1.get_text(' ', strip=True) or None

    def _first_image(self, doc: PageDocument) -> Optional[str]:
        images = doc.soup.find_all('img')
        for attr in self.IMAGE_ATTRIBUTES:
            for img in images:
                src = img.get(attr)
                if not isinstance(src, str) or len(src) <= 10:
                    continue
                lowered = src.lower()
                if any(ext in lowered for ext in self.IMAGE_EXTENSIONS):
                    return src
        return None

    def _first_paragraph(self, doc: PageDocument) -> Optional[str]:
        if len(doc.html) <= self.paragraph_min_doc_chars:
            return None

        min_len, max_len = self.paragraph_text_range
        for p in doc.soup.find_all('p'):
            text = normalize_whitespace(p.get_text(' ', strip=True))
            if min_len <= len(text) <= max_len:
                return text
        return None

    # -- regex scraping -----------------------------------------------------------

    def _regex_price(self, doc: PageDocument) -> Optional[str]:
        for name, pattern in self.PRICE_PATTERNS:
            match = pattern.search(doc.html)
            if match:
                logger.debug("PRICE Matched pattern %s: %s", name, match.group(1))
                return match.group(1).replace(',', '.')
        return None

    def _regex_rating(self, doc: PageDocument) -> Optional[float]:
        for name, pattern in self.RATING_PATTERNS:
            match = pattern.search(doc.html)
            if not match:
                continue
            rating = parse_float_prefix(match.group(1).replace(',', '.'))
            if rating is not None:
                logger.debug("RATING Matched pattern %s: %s", name, rating)
                return rating
        return None


def extract_metadata(html: Optional[str], identifier: Optional[str] = None) -> ProductMetadata:
    """Extract metadata with the default extractor settings."""
    return AmazonMetadataExtractor().extract(html, identifier)


__all__ = ['AmazonMetadataExtractor', 'PageDocument', 'extract_metadata']
