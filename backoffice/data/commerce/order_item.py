from backoffice import db
from backoffice.data.core.audited_base import AuditedBase


class OrderItem(AuditedBase):
    __tablename__ = 'order_items'
    __table_args__ = (
        db.CheckConstraint('quantity >= 1', name='ck_order_items_quantity_positive'),
    )

    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    # Price snapshot taken when the order was submitted, never a live reference
    unit_price = db.Column(db.Float, nullable=False)
