"""
HTTP API for the DropCharge back office.
"""
from .app import create_app
from .newsletter_routes import newsletter_bp
from .routes import api_bp

__all__ = ["create_app", "api_bp", "newsletter_bp"]
