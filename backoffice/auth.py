from flask import Blueprint, current_app, jsonify, request
from flask_login import UserMixin, current_user, login_required
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from backoffice import limiter, login_manager
from backoffice.business.commerce.errors import InvalidArgumentError
from backoffice.logger import get_logger
from backoffice.presentation.context import get_user_service
from backoffice.presentation.errors import error_response
from backoffice.presentation.payloads import json_body, snake_keys
from backoffice.utils.logging_sanitizer import sanitize_dict

logger = get_logger("backoffice.auth")
auth = Blueprint('auth', __name__, url_prefix='/api')

TOKEN_SALT = 'backoffice-auth'


class AuthUser(UserMixin):
    """Flask-Login view of a stored user record"""

    def __init__(self, record):
        self.record = record

    def get_id(self):
        return str(self.record.id)

    @property
    def is_active(self):
        return self.record.is_active

    @property
    def username(self):
        return self.record.username


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(user) -> str:
    return _serializer().dumps({'id': user.id})


def verify_token(token: str):
    """User id carried by a token, or None if it is forged or expired"""
    try:
        payload = _serializer().loads(token, max_age=current_app.config['TOKEN_MAX_AGE_SECONDS'])
    except SignatureExpired:
        logger.debug("Rejected expired token")
        return None
    except BadSignature:
        logger.warning("Rejected token with invalid signature")
        return None
    return payload.get('id') if isinstance(payload, dict) else None


@login_manager.request_loader
def load_user_from_request(req):
    header = req.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token:
        return None
    user_id = verify_token(token.strip())
    if user_id is None:
        return None
    record = get_user_service().get_user(user_id)
    if record is None or not record.is_active:
        return None
    return AuthUser(record)


@login_manager.unauthorized_handler
def unauthorized():
    return error_response('Authorization token required', 401)


def _auth_response(user, status):
    return jsonify({'user': user.to_dict(), 'token': issue_token(user)}), status


@auth.route('/auth/register', methods=['POST'])
@limiter.limit("10 per hour")
def register():
    data = snake_keys(json_body())
    logger.debug(f"Registration request: {sanitize_dict(data)}")
    user = get_user_service().register(
        data.get('username'),
        data.get('password'),
        data.get('name'),
        data.get('email'),
        avatar_url=data.get('avatar_url'),
    )
    return _auth_response(user, 201)


@auth.route('/auth/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    data = json_body()
    username = data.get('username')
    password = data.get('password')

    logger.debug(f"Login attempt: {sanitize_dict(data)}")

    if not username or not password:
        raise InvalidArgumentError('Username and password are required')
    if not isinstance(username, str) or not isinstance(password, str):
        raise InvalidArgumentError('Username and password must be strings')

    user = get_user_service().authenticate(username, password)
    if user is None:
        return error_response('Invalid credentials', 401)
    return _auth_response(user, 200)


@auth.route('/users/me')
@login_required
def me():
    return jsonify(current_user.record.to_dict())
