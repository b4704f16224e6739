from flask import jsonify, request
from flask_login import current_user, login_required

from backoffice.logger import get_logger
from backoffice.presentation.context import get_projection, get_workflow
from backoffice.presentation.payloads import json_body, snake_keys
from backoffice.presentation.routes.api import api_bp

logger = get_logger("backoffice.routes.inventory")


@api_bp.get('/inventory')
def list_inventory():
    return jsonify([product.to_dict() for product in get_workflow().list_products()])


@api_bp.get('/inventory/low-stock')
def low_stock_inventory():
    return jsonify([product.to_dict() for product in get_projection().get_low_stock_items()])


@api_bp.get('/inventory/<int:product_id>')
def get_product(product_id):
    return jsonify(get_workflow().get_product(product_id).to_dict())


@api_bp.post('/inventory')
@login_required
def create_product():
    fields = snake_keys(json_body(), drop=('id', 'created_at'))
    product = get_workflow().create_product(fields)
    logger.info(f"User {current_user.username} created product {product.id}")
    return jsonify(product.to_dict()), 201


@api_bp.patch('/inventory/<int:product_id>')
@login_required
def update_product(product_id):
    fields = snake_keys(json_body(), drop=('id', 'created_at'))
    product = get_workflow().update_product(product_id, fields)
    return jsonify(product.to_dict())


@api_bp.post('/inventory/<int:product_id>/restock')
@login_required
def restock_product(product_id):
    # Body is optional; the configured default applies without one
    quantity = None
    if request.get_data(cache=True):
        quantity = json_body().get('quantity')
    product = get_workflow().restock_product(product_id, quantity)
    logger.info(f"User {current_user.username} restocked product {product_id}")
    return jsonify(product.to_dict())
