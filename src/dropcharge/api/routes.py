"""
API routes for DropCharge.
"""
from typing import Any, Dict, Optional

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from ..config import Config
from ..exceptions import InvalidProductInput, ProductStoreError
from ..extractors.asin import extract_identifier
from ..extractors.metadata_extractor import AmazonMetadataExtractor
from ..logger import get_logger
from ..schemas.products import AsinRequest, AutoProductRequest, ExtractRequest, ProductMetadataSchema
from ..services.auto_product import AutoProductService
from ..services.product_store import ProductStore
from .auth import require_admin

logger = get_logger(__name__)

# Create blueprint
api_bp = Blueprint('api', __name__, url_prefix='/api')


def get_auto_product_service() -> AutoProductService:
    """Build the pipeline with the configured Supabase store."""
    return AutoProductService(store=ProductStore.from_config())


def get_extractor() -> AmazonMetadataExtractor:
    return AmazonMetadataExtractor()


def page_urls(slug: str) -> Dict[str, str]:
    """Relative and shareable URLs of a product page."""
    return {
        'pageUrl': f"/{slug}",
        'shareUrl': f"{Config.SITE_URL.rstrip('/')}/{slug}",
    }


def _json_body() -> Optional[Dict[str, Any]]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _error(message: str, status_code: int, **extra: Any):
    return jsonify({'status': 'error', 'message': message, **extra}), status_code


def _validation_message(e: ValidationError) -> str:
    first = e.errors()[0]
    return str(first.get('msg', 'Invalid request')).removeprefix('Value error, ')


@api_bp.route('/auto-product', methods=['POST'])
@require_admin
def create_auto_product():
    """
    Generate a product from an Amazon link.

    Expected JSON:
    {
        "amazonUrl": "https://www.amazon.de/dp/B07FZG4C8F",
        "affiliateKey": "partner1",
        "customTitle": "...",          (optional)
        "customImage": "...",          (optional)
        "customDescription": "..."     (optional)
    }

    Returns (201):
    {
        "status": "success",
        "product": {...},
        "pageUrl": "/b07fzg4c8f-1700000000000",
        "shareUrl": "https://.../b07fzg4c8f-1700000000000"
    }
    """
    data = _json_body()
    if data is None:
        return _error('Invalid JSON', 400)

    try:
        payload = AutoProductRequest.model_validate(data)
    except ValidationError as e:
        return _error(_validation_message(e), 400)

    try:
        service = get_auto_product_service()
        row = service.create_product(
            payload.amazon_url,
            payload.affiliate_key,
            custom_title=payload.custom_title,
            custom_image=payload.custom_image,
            custom_description=payload.custom_description,
        )
    except InvalidProductInput as e:
        return _error(str(e), 400)
    except ProductStoreError as e:
        return _error(str(e), 500)
    except Exception as e:
        logger.error(f"Error in auto-product endpoint: {e}", exc_info=True)
        return _error(str(e) or 'Unbekannter Fehler', 500)

    logger.info(f"Product page created: {row.get('page_slug')}")
    return jsonify({
        'status': 'success',
        'product': row,
        **page_urls(row.get('page_slug', '')),
    }), 201


@api_bp.route('/auto-product', methods=['GET'])
def list_auto_products():
    """List active generated products, newest first."""
    try:
        products = get_auto_product_service().list_products()
    except ProductStoreError as e:
        return _error(str(e), 500)
    except Exception as e:
        logger.error(f"Error listing products: {e}", exc_info=True)
        return _error(str(e), 500)

    return jsonify({
        'status': 'success',
        'products': products,
        'count': len(products),
    })


@api_bp.route('/auto-product/<slug>', methods=['GET'])
def get_auto_product(slug: str):
    """Fetch a single active product by page slug (counts as a view)."""
    try:
        product = get_auto_product_service().get_product(slug)
    except ProductStoreError as e:
        return _error(str(e), 500)
    except Exception as e:
        logger.error(f"Error loading product {slug}: {e}", exc_info=True)
        return _error(str(e), 500)

    if product is None:
        return _error('Produkt nicht gefunden', 404)

    return jsonify({'status': 'success', 'product': product})


@api_bp.route('/extract', methods=['POST'])
@require_admin
def extract_metadata():
    """
    Extract product metadata from pre-fetched HTML.

    Expected JSON:
    {
        "html": "<html>...</html>",
        "asin": "B07FZG4C8F"   (optional)
    }

    Returns:
    {
        "status": "success",
        "data": {"title": ..., "image": ..., "description": ..., "price": ..., "rating": ...}
    }
    """
    data = _json_body()
    if data is None:
        return _error('Invalid JSON', 400)

    try:
        payload = ExtractRequest.model_validate(data)
    except ValidationError as e:
        return _error(_validation_message(e), 400)

    metadata = get_extractor().extract(payload.html, payload.asin)
    return jsonify({
        'status': 'success',
        'data': ProductMetadataSchema(**metadata.to_dict()).model_dump(),
    })


@api_bp.route('/asin', methods=['POST'])
def normalize_asin():
    """
    Normalize an Amazon link or code to its ASIN.

    Expected JSON: {"input": "https://www.amazon.de/dp/B07FZG4C8F/ref=abc"}
    Returns: {"status": "success", "asin": "B07FZG4C8F"}
    """
    data = _json_body()
    if data is None:
        return _error('Invalid JSON', 400)

    try:
        payload = AsinRequest.model_validate(data)
    except ValidationError as e:
        return _error(_validation_message(e), 400)

    asin = extract_identifier(payload.input)
    if not asin:
        return _error('Konnte ASIN nicht extrahieren', 400, input=payload.input)

    return jsonify({'status': 'success', 'asin': asin})
