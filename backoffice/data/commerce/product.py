from backoffice import db
from datetime import datetime
from backoffice.data.core.audited_base import AuditedBase

# this class defines a sellable product and its stock level
# stock_quantity is only changed through the store's atomic adjust primitive
# (orders and restocks) or an explicit product edit


class Product(AuditedBase):
    __tablename__ = 'products'
    __table_args__ = (
        db.CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
        db.CheckConstraint('stock_quantity >= 0', name='ck_products_stock_non_negative'),
        db.CheckConstraint('low_stock_threshold >= 0', name='ck_products_threshold_non_negative'),
    )

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    price = db.Column(db.Float, nullable=False)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=5)
    image_url = db.Column(db.String(500), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)

    def __repr__(self):
        return f'<Product {self.id}: {self.name}>'
