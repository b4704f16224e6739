from flask import Flask, request
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
from backoffice.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "500 per hour"],
    storage_uri="memory://"  # Use Redis when running more than one worker
)

TRUE_VALUES = ('true', '1', 'yes', 'on')


def _env_bool(name, default):
    return os.environ.get(name, str(default)).lower() in TRUE_VALUES


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got '{raw}'")


def _default_database_uri(base_dir):
    # Absolute path inside the project's instance/ directory
    return f"sqlite:///{(base_dir / 'instance' / 'backoffice.db').resolve()}"


def _load_config(base_dir):
    """Configuration from environment variables, with defaults"""
    return {
        'SECRET_KEY': os.environ.get('SECRET_KEY'),
        'SQLALCHEMY_DATABASE_URI': os.environ.get('DATABASE_URL') or _default_database_uri(base_dir),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORAGE_BACKEND': os.environ.get('STORAGE_BACKEND', 'sql'),
        'NEW_CLIENT_WINDOW_DAYS': _env_int('NEW_CLIENT_WINDOW_DAYS', 30),
        'REVENUE_WINDOW_DAYS': _env_int('REVENUE_WINDOW_DAYS', None),
        'ORDER_STATUS_POLICY': os.environ.get('ORDER_STATUS_POLICY', 'free'),
        'DEFAULT_RESTOCK_QUANTITY': _env_int('DEFAULT_RESTOCK_QUANTITY', 10),
        'RECENT_ORDERS_LIMIT': _env_int('RECENT_ORDERS_LIMIT', 10),
        'RECENT_ACTIVITY_LIMIT': _env_int('RECENT_ACTIVITY_LIMIT', 10),
        'TOKEN_MAX_AGE_SECONDS': _env_int('TOKEN_MAX_AGE_SECONDS', 86400),
        'RATELIMIT_ENABLED': _env_bool('RATELIMIT_ENABLED', True),
        'ENABLE_HTTPS': _env_bool('ENABLE_HTTPS', False),
        'ADMIN_USERNAME': os.environ.get('ADMIN_USERNAME', 'admin'),
        'ADMIN_PASSWORD': os.environ.get('ADMIN_PASSWORD'),
    }


def _build_store(backend):
    from backoffice.business.commerce.store import MemoryStore, SqlAlchemyStore

    backend = (backend or 'sql').lower()
    if backend == 'sql':
        return SqlAlchemyStore()
    if backend == 'memory':
        return MemoryStore()
    raise RuntimeError(f"Unknown STORAGE_BACKEND '{backend}'. Expected 'sql' or 'memory'")


def create_app(config_overrides=None):
    from pathlib import Path

    # Get the base directory (package's parent)
    base_dir = Path(__file__).parent.parent

    app = Flask(__name__)

    # Get singleton logger
    logger = get_logger("backoffice")
    logger.info("Initializing Flask application")

    app.config.update(_load_config(base_dir))
    if config_overrides:
        app.config.update(config_overrides)

    # SECURITY: Require SECRET_KEY - no fallback
    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    if app.config['SQLALCHEMY_DATABASE_URI'] == _default_database_uri(base_dir):
        (base_dir / 'instance').mkdir(parents=True, exist_ok=True)

    from backoffice.business.commerce.status_policy import policy_for
    try:
        policy = policy_for(app.config['ORDER_STATUS_POLICY'])
    except ValueError as e:
        logger.critical(str(e))
        raise RuntimeError(str(e)) from e

    if not app.config['ENABLE_HTTPS']:
        logger.warning("HTTPS enforcement disabled - acceptable for development only")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    import backoffice.data  # noqa: F401

    logger.debug("Models imported and registered")

    from backoffice.business.commerce.order_workflow import OrderWorkflow
    from backoffice.presentation.context import EXTENSION_KEY
    from backoffice.services.commerce.dashboard_projection import DashboardProjection
    from backoffice.services.core.user_service import UserService

    store = _build_store(app.config['STORAGE_BACKEND'])
    app.extensions[EXTENSION_KEY] = {
        'store': store,
        'workflow': OrderWorkflow(
            store,
            policy=policy,
            default_restock_quantity=app.config['DEFAULT_RESTOCK_QUANTITY'],
        ),
        'projection': DashboardProjection(
            store,
            new_client_window_days=app.config['NEW_CLIENT_WINDOW_DAYS'],
            revenue_window_days=app.config['REVENUE_WINDOW_DAYS'],
        ),
        'users': UserService(store),
    }
    logger.info(
        f"Using {type(store).__name__} with '{policy.name}' status policy"
    )

    # Register blueprints and JSON error handlers
    from backoffice.presentation.errors import register_error_handlers
    from backoffice.presentation.routes import init_app as init_routes
    from backoffice.utils.logging_sanitizer import sanitize_headers

    init_routes(app)
    register_error_handlers(app)

    @app.before_request
    def log_request():
        logger.debug(f"{request.method} {request.path} headers={sanitize_headers(request.headers)}")

    # Add security headers to all responses
    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
        response.headers['Cache-Control'] = 'no-store'

        if app.config.get('ENABLE_HTTPS'):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response

    logger.info("Flask application initialization complete")

    return app
