"""
User Service
Account registration and credential checks for dashboard operators.

Handles:
- Password hashing (Werkzeug) before a user row is written
- Credential verification on login
"""

from typing import Optional
from werkzeug.security import generate_password_hash, check_password_hash

from backoffice.business.commerce.errors import ConflictError, InvalidArgumentError
from backoffice.business.commerce.records import UserRecord
from backoffice.business.commerce.store.base import EntityStore
from backoffice.logger import get_logger

logger = get_logger("backoffice.users")

MIN_PASSWORD_LENGTH = 6


class UserService:
    """
    Service for operator accounts.

    Provides methods for:
    - Registering a user with a hashed password
    - Authenticating a username/password pair
    """

    def __init__(self, store: EntityStore):
        self.store = store

    def register(self, username: str, password: str, name: str, email: str,
                 avatar_url: Optional[str] = None) -> UserRecord:
        """
        Create a user account.

        Raises:
            InvalidArgumentError: Missing fields or a password that is too short
            ConflictError: Username already taken
        """
        if not all(isinstance(value, str) and value.strip() for value in (username, password, name, email)):
            raise InvalidArgumentError("Username, password, name, and email are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidArgumentError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field='password'
            )

        username = username.strip()
        with self.store.transaction():
            if self.store.get_user_by_username(username) is not None:
                raise ConflictError(f"Username '{username}' already exists", field='username')
            user = self.store.insert_user({
                'username': username,
                'password_hash': generate_password_hash(password),
                'name': name.strip(),
                'email': email.strip(),
                'avatar_url': avatar_url,
                'is_active': True,
            })

        logger.info(f"Registered user: {username}")
        return user

    def authenticate(self, username: str, password: str) -> Optional[UserRecord]:
        """
        Check a username/password pair.

        Returns:
            The user on success, None for unknown users, wrong passwords or disabled accounts
        """
        if not isinstance(username, str) or not isinstance(password, str):
            return None
        user = self.store.get_user_by_username(username)
        if user is None or not check_password_hash(user.password_hash, password):
            logger.warning(f"Failed login attempt for username: {username}")
            return None
        if not user.is_active:
            logger.warning(f"Login attempt for disabled account: {username}")
            return None
        logger.info(f"Successful login for user: {username}")
        return user

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self.store.get_user(user_id)
