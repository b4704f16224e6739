from flask import current_app, jsonify
from flask_login import current_user, login_required

from backoffice.business.commerce.errors import InvalidArgumentError
from backoffice.logger import get_logger
from backoffice.presentation.context import get_projection, get_workflow
from backoffice.presentation.payloads import json_body, json_object, limit_arg, parse_datetime, snake_keys
from backoffice.presentation.routes.api import api_bp
from backoffice.utils.logging_sanitizer import sanitize_value

logger = get_logger("backoffice.routes.orders")

# Keys the dashboard client sends that the server assigns itself
_SERVER_ASSIGNED = ('id', 'order_id', 'created_at', 'total_amount')


@api_bp.get('/orders')
def list_orders():
    return jsonify([order.to_dict() for order in get_workflow().list_orders()])


@api_bp.get('/orders/recent')
def recent_orders():
    limit = limit_arg(current_app.config['RECENT_ORDERS_LIMIT'])
    return jsonify([entry.to_dict() for entry in get_projection().get_recent_orders(limit)])


@api_bp.get('/orders/<int:order_id>')
def get_order(order_id):
    return jsonify(get_projection().get_order_details(order_id).to_dict())


@api_bp.post('/orders')
@login_required
def create_order():
    data = json_body()
    logger.debug(f"Order submission: {sanitize_value(data)}")

    draft = snake_keys(json_object(data, 'order'), drop=_SERVER_ASSIGNED)
    if 'order_date' in draft:
        draft['order_date'] = parse_datetime(draft['order_date'], 'orderDate')

    items = data.get('items')
    if not isinstance(items, list):
        raise InvalidArgumentError("'items' must be a list", field='items')
    lines = []
    for item in items:
        if not isinstance(item, dict):
            raise InvalidArgumentError("Each item must be a JSON object", field='items')
        lines.append(snake_keys(item, drop=_SERVER_ASSIGNED))

    details = get_workflow().create_order(draft, lines)
    logger.info(f"User {current_user.username} created order {details.order.order_number}")
    return jsonify(details.to_dict()), 201


@api_bp.patch('/orders/<int:order_id>/status')
@login_required
def update_order_status(order_id):
    status = json_body().get('status')
    if status is None:
        raise InvalidArgumentError("status is required", field='status')
    order = get_workflow().update_order_status(order_id, status)
    return jsonify(order.to_dict())
