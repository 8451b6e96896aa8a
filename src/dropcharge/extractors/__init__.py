"""
Product metadata extraction.

- extract_identifier: ASIN normalization from links or bare codes
- AmazonMetadataExtractor: waterfall extraction from product page HTML
"""
from .asin import extract_identifier
from .metadata_extractor import AmazonMetadataExtractor, extract_metadata

__all__ = [
    "extract_identifier",
    "AmazonMetadataExtractor",
    "extract_metadata",
]
