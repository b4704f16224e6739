"""
JSON API blueprint: analytics, inventory, orders and clients
"""

from flask import Blueprint

api_bp = Blueprint('api', __name__)

# Import route modules so their handlers attach to api_bp
from . import analytics, inventory, orders, clients  # noqa: E402,F401
