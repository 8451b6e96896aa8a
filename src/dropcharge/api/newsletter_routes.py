"""
Newsletter, lead and stats routes for DropCharge.
"""
from datetime import date

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from ..config import Config
from ..exceptions import InvalidSubscriberInput, StorageError
from ..logger import get_logger
from ..schemas.products import NewsletterSignupRequest, UnsubscribeRequest
from ..services.newsletter import NewsletterService
from ..services.subscriber_store import SubscriberStore
from .auth import require_admin
from .routes import _error, _json_body, _validation_message

logger = get_logger(__name__)

newsletter_bp = Blueprint('newsletter', __name__, url_prefix='/api')


def get_newsletter_service() -> NewsletterService:
    """Build the newsletter service with the configured Supabase tables."""
    return NewsletterService(SubscriberStore.from_config())


def _lead_filters():
    return request.args.get('status') or 'all', (request.args.get('search') or '').strip()


@newsletter_bp.route('/newsletter/subscribe', methods=['POST'])
def subscribe():
    """
    Public newsletter signup.

    Expected JSON: {"email": "...", "source": "popup", "page": "/", "utm": {...}}
    Returns: {"status": "success", "message": "subscribed" | "already_subscribed" | "resubscribed"}
    """
    data = _json_body()
    if data is None:
        return _error('Invalid JSON', 400)

    try:
        payload = NewsletterSignupRequest.model_validate(data)
        message = get_newsletter_service().subscribe(
            payload.email, source=payload.source, page=payload.page, utm=payload.utm,
        )
    except ValidationError as e:
        return _error(_validation_message(e), 400)
    except InvalidSubscriberInput as e:
        return _error(str(e), 400)
    except StorageError as e:
        return _error(str(e), 500)
    except Exception as e:
        logger.error(f"Error in newsletter signup: {e}", exc_info=True)
        return _error(str(e), 500)

    return jsonify({'status': 'success', 'message': message})


@newsletter_bp.route('/leads', methods=['GET'])
@require_admin
def list_leads():
    """Paginated lead list. Query: status, search, page, limit."""
    status, search = _lead_filters()
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', Config.LEADS_PAGE_SIZE, type=int)

    try:
        result = get_newsletter_service().list_leads(status=status, search=search, page=page, limit=limit)
    except StorageError as e:
        return _error(str(e), 500)
    except Exception as e:
        logger.error(f"Error listing leads: {e}", exc_info=True)
        return _error(str(e), 500)

    return jsonify({'status': 'success', **result})


@newsletter_bp.route('/leads/export', methods=['GET'])
@require_admin
def export_leads():
    """Lead list as a CSV download. Query: status, search."""
    status, search = _lead_filters()

    try:
        body = get_newsletter_service().export_csv(status=status, search=search)
    except StorageError as e:
        return _error(str(e), 500)
    except Exception as e:
        logger.error(f"Error exporting leads: {e}", exc_info=True)
        return _error(str(e), 500)

    filename = f"newsletter-leads-{date.today().isoformat()}.csv"
    return Response(
        body,
        mimetype='text/csv',
        headers={
            'Content-Disposition': f'attachment; filename="{filename}"',
            'Cache-Control': 'no-cache',
        },
    )


@newsletter_bp.route('/leads', methods=['DELETE'])
@require_admin
def unsubscribe_lead():
    """
    Take a lead off the list.

    Expected JSON: {"emailId": 123}
    """
    data = _json_body()
    if data is None:
        return _error('Invalid JSON', 400)

    try:
        payload = UnsubscribeRequest.model_validate(data)
    except ValidationError:
        return _error('Email ID required', 400)

    try:
        found = get_newsletter_service().unsubscribe(payload.email_id)
    except StorageError as e:
        return _error(str(e), 500)
    except Exception as e:
        logger.error(f"Error unsubscribing lead: {e}", exc_info=True)
        return _error(str(e), 500)

    if not found:
        return _error('Lead nicht gefunden', 404)
    return jsonify({'status': 'success'})


@newsletter_bp.route('/stats', methods=['GET'])
@require_admin
def stats():
    """Dashboard numbers: recent clicks, totals, subscriber count and conversion."""
    try:
        result = get_newsletter_service().stats()
    except StorageError as e:
        return _error(str(e), 500)
    except Exception as e:
        logger.error(f"Error loading stats: {e}", exc_info=True)
        return _error(str(e), 500)

    return jsonify({'status': 'success', **result})
