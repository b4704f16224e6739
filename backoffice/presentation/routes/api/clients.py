from flask import current_app, jsonify
from flask_login import login_required

from backoffice.presentation.context import get_projection, get_workflow
from backoffice.presentation.payloads import json_body, limit_arg, snake_keys
from backoffice.presentation.routes.api import api_bp


@api_bp.get('/clients')
def list_clients():
    return jsonify([client.to_dict() for client in get_workflow().list_clients()])


@api_bp.get('/clients/activity')
def client_activity():
    limit = limit_arg(current_app.config['RECENT_ACTIVITY_LIMIT'])
    return jsonify([entry.to_dict() for entry in get_projection().get_client_activities(limit)])


@api_bp.get('/clients/<int:client_id>')
def get_client(client_id):
    return jsonify(get_workflow().get_client(client_id).to_dict())


@api_bp.post('/clients')
@login_required
def create_client():
    fields = snake_keys(json_body(), drop=('id', 'created_at', 'last_active'))
    client = get_workflow().create_client(fields)
    return jsonify(client.to_dict()), 201
