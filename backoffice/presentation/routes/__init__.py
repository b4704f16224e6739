"""
Routes package for the back-office dashboard API
"""

from backoffice.logger import get_logger

logger = get_logger("backoffice.routes")


def init_app(app):
    """Register the API blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from backoffice.auth import auth
    from backoffice.presentation.routes.api import api_bp

    app.register_blueprint(auth)
    app.register_blueprint(api_bp, url_prefix='/api')
