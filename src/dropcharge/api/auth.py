"""
Admin token guard for write endpoints.
"""
import hmac
from functools import wraps
from typing import Callable, Optional

from flask import jsonify, request

from ..config import Config
from ..logger import get_logger

logger = get_logger(__name__)

ADMIN_TOKEN_HEADER = "X-Admin-Token"


def is_admin_authorized(provided: Optional[str]) -> bool:
    """
    Compare a provided token with ADMIN_TOKEN.

    Without a configured token the API runs in open mode and every
    request is authorized.
    """
    expected = Config.ADMIN_TOKEN
    if not expected:
        return True
    return hmac.compare_digest((provided or "").encode(), expected.encode())


def require_admin(view: Callable) -> Callable:
    """Reject requests without a valid X-Admin-Token header."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not is_admin_authorized(request.headers.get(ADMIN_TOKEN_HEADER)):
            logger.warning("AUTH Rejected %s %s from %s", request.method, request.path, request.remote_addr)
            return jsonify({
                'status': 'error',
                'message': 'Unauthorized'
            }), 401
        return view(*args, **kwargs)

    return wrapped
