from backoffice import db
from backoffice.data.core.audited_base import AuditedBase


class Client(AuditedBase):
    __tablename__ = 'clients'

    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    avatar_url = db.Column(db.String(500), nullable=True)
    last_active = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f'<Client {self.id}: {self.email}>'
