from backoffice import db
from datetime import datetime
from backoffice.data.core.audited_base import AuditedBase


class User(AuditedBase):
    """
    Dashboard operator account.

    Passwords are stored as Werkzeug hashes; hashing happens in the user
    service before the row is written.
    """
    __tablename__ = 'users'

    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    avatar_url = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    def __repr__(self):
        return f'<User {self.username}>'
