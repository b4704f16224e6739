from backoffice import db
from backoffice.data.core.audited_base import AuditedBase


class ClientActivity(AuditedBase):
    """Append-only audit entry for client-related events"""
    __tablename__ = 'client_activities'

    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False, index=True)
    activity_type = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, index=True)
    related_id = db.Column(db.String(64), nullable=True)
