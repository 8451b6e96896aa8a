"""
Unit tests for the waterfall metadata extractor.

Covers field priority (first match wins), structured data handling,
regex fallbacks, post-processing and the never-raise contract.
"""
import json

import pytest

from dropcharge.extractors.metadata_extractor import AmazonMetadataExtractor, extract_metadata
from dropcharge.models import ProductMetadata


def jsonld(data) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


def padded(body: str) -> str:
    """Wrap markup in a document large enough for the paragraph fallback."""
    filler = "<div>" + ("x" * 1200) + "</div>"
    return f"<html><body>{filler}{body}</body></html>"


class TestShortCircuit:
    """Tests for empty and undersized input."""

    @pytest.mark.parametrize("html", ["", None, "<html></html>", 42])
    def test_returns_empty_record(self, extractor, html):
        """Should return an all-None record without raising."""
        result = extractor.extract(html, "B07FZG4C8F")

        assert result == ProductMetadata()
        assert result.is_empty()

    def test_threshold_is_configurable(self):
        """Should skip documents below min_html_length."""
        html = '<meta property="og:title" content="Widget 3000">'

        assert AmazonMetadataExtractor(min_html_length=100).extract(html).is_empty()
        assert AmazonMetadataExtractor(min_html_length=10).extract(html).title == "Widget 3000"


class TestTitle:
    """Tests for the title waterfall."""

    def test_only_og_title(self, extractor):
        """Only og:title present: every other field stays absent."""
        result = extractor.extract('<meta property="og:title" content="Widget 3000">', "B07FZG4C8F")

        assert result.to_dict() == {
            "title": "Widget 3000",
            "image": None,
            "description": None,
            "price": None,
            "rating": None,
        }

    def test_og_title_beats_structured_data(self, extractor):
        """Should keep og:title when JSON-LD carries a different name."""
        html = '<meta property="og:title" content="Widget 3000">' + jsonld({"name": "Other Name"})

        assert extractor.extract(html).title == "Widget 3000"

    def test_meta_title_before_title_tag(self, extractor):
        """Should prefer <meta name="title"> over the <title> element."""
        html = '<head><meta name="title" content="Meta Name"><title>Tag Name</title></head>'

        assert extractor.extract(html).title == "Meta Name"

    def test_title_tag_fallback(self, extractor):
        """Should use the <title> element when no meta title exists."""
        html = "<html><head><title> Amazon.de: Echo Dot </title></head></html>"

        assert extractor.extract(html).title == "Amazon.de: Echo Dot"

    def test_structured_data_name_fallback(self, extractor):
        """Should use JSON-LD name when no meta/title tag exists."""
        html = jsonld({"@type": "Product", "name": "Echo Dot (5. Gen.)"})

        assert extractor.extract(html).title == "Echo Dot (5. Gen.)"

    def test_heading_fallback(self, extractor):
        """Should fall back to the first <h1> text."""
        html = "<body><h1>  Super <span>Gadget</span> </h1><h1>Second</h1></body>"

        assert extractor.extract(html).title == "Super Gadget"

    def test_heading_fallback_can_be_disabled(self):
        """Should not look at <h1> when heading_fallback is off."""
        html = "<body><h1>Super Gadget</h1><p>no other signal</p></body>"

        assert AmazonMetadataExtractor(heading_fallback=False).extract(html).title is None

    def test_attribute_order_and_quotes(self, extractor):
        """Should read meta tags regardless of attribute order or quote style."""
        html = "<meta content='Tom\"s Box' property='og:title' />"

        assert extractor.extract(html).title == 'Tom"s Box'

    def test_empty_og_title_falls_through(self, extractor):
        """Should treat blank content as absent."""
        html = '<meta property="og:title" content="  "><title>Real Title</title>'

        assert extractor.extract(html).title == "Real Title"

    def test_decoding_and_tag_stripping(self, extractor):
        """Should decode named entities, then strip tags, then trim."""
        html = ('<meta property="og:title" '
                'content=" Tom &amp; Jerry &lt;b&gt;Deluxe&lt;/b&gt; &#65; ">')

        assert extractor.extract(html).title == "Tom & Jerry Deluxe &#65;"

    def test_title_truncated_to_200(self, extractor):
        """Should truncate titles after decoding."""
        html = f'<meta property="og:title" content="{"A" * 250}">'

        assert extractor.extract(html).title == "A" * 200

    def test_title_reduced_to_nothing_is_absent(self, extractor):
        """Should return None when only markup was extracted."""
        html = '<meta property="og:title" content="&lt;br&gt;">'

        assert extractor.extract(html).title is None


class TestImage:
    """Tests for the image waterfall."""

    def test_og_image(self, product_page_html, extractor):
        assert extractor.extract(product_page_html).image == "https://m.media-amazon.com/images/I/61abcDEF.jpg"

    @pytest.mark.parametrize("image, expected", [
        ("https://img.example/a.jpg", "https://img.example/a.jpg"),
        (["https://img.example/first.jpg", "https://img.example/second.jpg"], "https://img.example/first.jpg"),
        ({"@type": "ImageObject", "url": "https://img.example/obj.webp"}, "https://img.example/obj.webp"),
    ])
    def test_structured_data_image_shapes(self, extractor, image, expected):
        """Should accept string, list and object JSON-LD images."""
        html = jsonld({"@type": "Product", "image": image})

        assert extractor.extract(html).image == expected

    def test_img_tag_src(self, extractor):
        """Should use the first <img> src with an image extension."""
        html = ('<body><img src="/sprite.gif"><img src="https://m.media-amazon.com/images/I/71xyz.JPEG">'
                '<img src="https://m.media-amazon.com/images/I/other.jpg"></body>')

        assert extractor.extract(html).image == "https://m.media-amazon.com/images/I/71xyz.JPEG"

    def test_img_tag_data_src_fallback(self, extractor):
        """Should check data-src only after no src qualified."""
        html = '<body><img src="/pixel.gif" data-src="https://m.media-amazon.com/images/I/lazy.webp"></body>'

        assert extractor.extract(html).image == "https://m.media-amazon.com/images/I/lazy.webp"

    def test_short_image_urls_ignored(self, extractor):
        """Should skip image URLs of 10 characters or less."""
        html = '<body><p>Nothing else here</p><img src="/a.png"></body>'

        assert extractor.extract(html).image is None


class TestDescription:
    """Tests for the description waterfall."""

    def test_og_description_first(self, extractor):
        html = ('<meta name="description" content="Meta text">'
                '<meta property="og:description" content="OG text">')

        assert extractor.extract(html).description == "OG text"

    def test_meta_description(self, product_page_html, extractor):
        """Should decode entities in the meta description."""
        result = extractor.extract(product_page_html)

        assert result.description == "Anker PowerCore 10000 & USB-C Kabel, kompakt und leicht."

    def test_meta_property_description(self, extractor):
        html = '<head><meta property="description" content="Property based"></head>'

        assert extractor.extract(html).description == "Property based"

    def test_structured_data_description(self, extractor):
        html = jsonld({"@type": "Product", "description": "Aus JSON-LD &amp; mehr"})

        assert extractor.extract(html).description == "Aus JSON-LD & mehr"

    def test_paragraph_fallback_in_large_documents(self, extractor):
        """Should pick the first <p> with 20-200 characters of text."""
        html = padded("<p>Too short</p><p>Eine kompakte Powerbank mit  USB-C.</p><p>Later paragraph text here</p>")

        assert extractor.extract(html).description == "Eine kompakte Powerbank mit USB-C."

    def test_paragraph_fallback_skipped_for_small_documents(self, extractor):
        html = "<body><p>Eine kompakte Powerbank mit USB-C.</p></body>"

        assert extractor.extract(html).description is None

    def test_description_truncated_to_300(self, extractor):
        html = f'<meta property="og:description" content="{"d" * 500}">'

        assert len(extractor.extract(html).description) == 300


class TestPrice:
    """Tests for the price waterfall."""

    def test_structured_data_offer_price(self, extractor):
        html = jsonld({"offers": {"price": "19.99"}})

        assert extractor.extract(html).price == "19.99"

    def test_structured_data_offer_list(self, extractor):
        html = jsonld({"offers": [{"price": 24.5}, {"price": 30}]})

        assert extractor.extract(html).price == "24.5"

    def test_structured_data_comma_normalized(self, product_page_html, extractor):
        assert extractor.extract(product_page_html).price == "21.99"

    @pytest.mark.parametrize("snippet, expected", [
        ('<script>var data = {"price": "12,49"};</script>', "12.49"),
        ("<span class='a-offscreen'>€ 8,99</span>", "8.99"),
        ("<span class='a-color-price'>EUR 19,95</span>", "19.95"),
        ("<span class='a-color-price'>34,00 EUR</span>", "34.00"),
        ("<span class='a-offscreen'>24,99 €</span>", "24.99"),
    ])
    def test_regex_fallbacks(self, extractor, snippet, expected):
        assert extractor.extract(f"<html><body>{snippet}</body></html>").price == expected

    def test_structured_data_before_regex(self, extractor):
        html = jsonld({"offers": {"price": "5.00"}}) + "<span>EUR 99,99</span>"

        assert extractor.extract(html).price == "5.00"

    def test_no_price(self, extractor):
        assert extractor.extract("<html><body>Kein Preis verfügbar</body></html>").price is None


class TestRating:
    """Tests for the rating waterfall."""

    def test_structured_data_rating(self, product_page_html, extractor):
        assert extractor.extract(product_page_html).rating == pytest.approx(4.7)

    def test_out_of_range_passes_through(self, extractor):
        html = jsonld({"aggregateRating": {"ratingValue": "7.5"}})

        assert extractor.extract(html).rating == pytest.approx(7.5)

    @pytest.mark.parametrize("snippet, expected", [
        ("<span>4,5 von 5 Sternen</span>", 4.5),
        ("<span class='a-icon-alt'>4.3 out of 5 stars</span>", 4.3),
        ('<script>{"rating": "3.9"}</script>', 3.9),
    ])
    def test_regex_fallbacks(self, extractor, snippet, expected):
        assert extractor.extract(f"<html><body>{snippet}</body></html>").rating == pytest.approx(expected)

    def test_unparseable_match_falls_through(self, extractor):
        """Should skip a keyword match without digits and try the next pattern."""
        html = '<script>{"rating": "."}</script><span>4,1 von 5 Sternen</span>'

        assert extractor.extract(html).rating == pytest.approx(4.1)

    @pytest.mark.parametrize("snippet", [
        "<span>Seite 1 von 50 Ergebnissen</span>",
        "<span>3 out of 500 customers</span>",
    ])
    def test_scale_must_end_at_five(self, extractor, snippet):
        """Should not read "von 50" or "out of 500" as a rating scale."""
        assert extractor.extract(f"<html><body>{snippet}</body></html>").rating is None


class TestStructuredData:
    """Tests for JSON-LD block scanning."""

    def test_broken_block_is_skipped(self, extractor):
        html = ('<script type="application/ld+json">{not json</script>'
                + jsonld({"name": "Valid Block", "offers": {"price": "9.99"}}))

        result = extractor.extract(html)

        assert result.title == "Valid Block"
        assert result.price == "9.99"

    def test_deeply_nested_block_is_skipped(self, extractor):
        """Should keep scanning past a block too deep to parse."""
        html = ('<script type="application/ld+json">' + "[" * 100000 + '</script>'
                + jsonld({"name": "Good", "offers": {"price": "12"}}))

        result = extractor.extract(html)

        assert result.title == "Good"
        assert result.price == "12"

    def test_fields_collected_across_blocks(self, extractor):
        """Should take each field from the first block that has it."""
        html = (jsonld({"@type": "BreadcrumbList"})
                + jsonld({"name": "First Product"})
                + jsonld({"name": "Second Product", "aggregateRating": {"ratingValue": 4}}))

        result = extractor.extract(html)

        assert result.title == "First Product"
        assert result.rating == 4.0

    def test_graph_is_walked(self, extractor):
        html = jsonld({"@context": "https://schema.org", "@graph": [
            {"@type": "WebPage"},
            {"@type": "Product", "offers": {"price": "15.00"}},
        ]})

        assert extractor.extract(html).price == "15.00"

    def test_type_mismatch_is_ignored(self, extractor):
        html = jsonld({"name": 42, "image": [], "offers": "free", "aggregateRating": [4.5]})

        result = extractor.extract(html)

        assert result.title is None
        assert result.image is None
        assert result.price is None


class TestRobustness:
    """Tests for the never-raise contract and purity."""

    def test_failing_strategy_falls_through(self):
        """A strategy raising should not stop the waterfall."""
        class BrokenTitleTag(AmazonMetadataExtractor):
            def _title_tag(self, doc):
                raise RuntimeError("boom")

        html = "<title>ignored</title>" + jsonld({"name": "From JSON-LD"})

        assert BrokenTitleTag().extract(html).title == "From JSON-LD"

    def test_malformed_markup(self, extractor):
        html = '<html><meta property="og:title" content="Unclosed<div><img src=><p>' * 3

        result = extractor.extract(html)

        assert isinstance(result, ProductMetadata)

    def test_idempotent(self, extractor, product_page_html):
        first = extractor.extract(product_page_html, "B00ABCDEFG")
        second = extractor.extract(product_page_html, "B00ABCDEFG")

        assert first == second

    def test_full_page(self, product_page_html):
        """Module-level helper resolves every field of a realistic page."""
        result = extract_metadata(product_page_html, "B0194WDVHI")

        assert result.title == "Anker PowerCore 10000 Powerbank"
        assert result.image.endswith("61abcDEF.jpg")
        assert result.price == "21.99"
        assert result.rating == pytest.approx(4.7)
        assert not result.is_empty()
