"""
DropCharge - Affiliate product back office.

Turns Amazon links into affiliate product records by scraping page
metadata (title, image, description, price, rating) with heuristic
waterfall extraction.
"""

__version__ = "1.0.0"
__author__ = "DropCharge"

from .models import ProductMetadata, AutoProduct
from .extractors.asin import extract_identifier
from .extractors.metadata_extractor import AmazonMetadataExtractor, extract_metadata
from .utils.text_cleaning import decode_entities

__all__ = [
    "ProductMetadata",
    "AutoProduct",
    "extract_identifier",
    "AmazonMetadataExtractor",
    "extract_metadata",
    "decode_entities",
]
