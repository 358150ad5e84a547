"""
Flask route blueprints for PrintPrep.

This module contains all route handlers organized by functionality:
- border: POST /add-border (print preparation pipeline)
- orders: POST /confirm-order (order confirmation workflow)
- api: health check and paper size listing

Each blueprint is registered with the Flask app in create_app().
"""

from .border import border_bp
from .orders import orders_bp
from .api import api_bp

__all__ = [
    "border_bp",
    "orders_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(border_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(api_bp)
