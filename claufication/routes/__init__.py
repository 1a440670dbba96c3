"""Flask routes for Claufication."""

from claufication.routes.events import events_bp
from claufication.routes.settings import settings_bp
from claufication.routes.status import status_bp

__all__ = [
    "events_bp",
    "settings_bp",
    "status_bp",
]


def register_blueprints(app):
    """Register all blueprints with the Flask app.

    Args:
        app: The Flask application instance.
    """
    app.register_blueprint(events_bp, url_prefix="/api")
    app.register_blueprint(settings_bp, url_prefix="/api")
    app.register_blueprint(status_bp, url_prefix="/api")
