from flask import jsonify

from backoffice.presentation.context import get_projection
from backoffice.presentation.routes.api import api_bp


@api_bp.get('/analytics')
def analytics():
    return jsonify(get_projection().get_analytics().to_dict())
