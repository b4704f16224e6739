from backoffice import db
from backoffice.data.core.audited_base import AuditedBase


class Order(AuditedBase):
    """
    Order header.

    Created together with its OrderItem rows in one transaction; total is the
    sum of the item snapshots at creation time. Only status changes afterwards.
    """
    __tablename__ = 'orders'
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'processing', 'completed', 'cancelled')",
            name='ck_orders_status',
        ),
    )

    order_number = db.Column(db.String(64), unique=True, nullable=False)
    client_id = db.Column(db.Integer, db.ForeignKey('clients.id'), nullable=False, index=True)
    order_date = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default='pending')
    total = db.Column(db.Float, nullable=False)

    def __repr__(self):
        return f'<Order {self.order_number} ({self.status})>'
