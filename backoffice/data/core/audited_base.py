from backoffice import db
from datetime import datetime
from backoffice.business.core.data_insertion_mixin import DataInsertionMixin


class AuditedBase(db.Model, DataInsertionMixin):
    """Abstract base class for all stored entities: integer key plus creation timestamp"""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False)
