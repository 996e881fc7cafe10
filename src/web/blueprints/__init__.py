"""
Flask Blueprints for the ThreadRest gateway

The REST surface is a single catch-all blueprint: path routing happens in
rest.resource, not in Flask.
"""

from .rest import rest_bp

__all__ = [
    'rest_bp',
]


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(rest_bp)
