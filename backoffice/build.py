#!/usr/bin/env python3
"""
Build orchestrator for the back-office dashboard
Creates tables, ensures the admin account and optionally loads the demo catalogue
"""

from datetime import timedelta
import json
from pathlib import Path

from backoffice import db
from backoffice.business.commerce.store import SqlAlchemyStore
from backoffice.logger import get_logger
from backoffice.presentation.context import get_store, get_user_service, get_workflow

logger = get_logger("backoffice.build")

DEMO_DATA_FILE = Path(__file__).parent / 'data' / 'commerce' / 'build_data_demo.json'


def create_tables():
    """Create any missing tables. A no-op for the in-memory store."""
    if isinstance(get_store(), SqlAlchemyStore):
        db.create_all()
        logger.info("Database tables created/verified")


def ensure_admin_user(username, password):
    """
    Insert the admin account if it does not exist yet

    Returns:
        bool: True if the admin exists afterwards
    """
    users = get_user_service()
    if get_store().get_user_by_username(username) is not None:
        logger.debug(f"Admin user '{username}' already present")
        return True
    if not password:
        logger.warning("ADMIN_PASSWORD not set; skipping admin user creation. Run generate_env.py.")
        return False
    users.register(username, password, 'Admin User', f'{username}@example.com')
    logger.info(f"Created admin user '{username}'")
    return True


def load_demo_data(data_file=DEMO_DATA_FILE):
    """
    Load the demo catalogue through the order workflow so stock, totals and
    the activity feed are consistent. Skipped when any product exists.

    Returns:
        bool: True if data was inserted
    """
    workflow = get_workflow()
    if workflow.list_products():
        logger.info("Catalogue already populated, skipping demo data")
        return False

    with open(data_file, 'r') as f:
        demo = json.load(f)

    products = {}
    for entry in demo.get('Products', []):
        fields = {key: value for key, value in entry.items() if key != 'key'}
        products[entry['key']] = workflow.create_product(fields)

    clients = {}
    for entry in demo.get('Clients', []):
        fields = {key: value for key, value in entry.items() if key != 'key'}
        clients[entry['key']] = workflow.create_client(fields)

    for entry in demo.get('Orders', []):
        workflow.create_order(
            {
                'order_number': entry['order_number'],
                'client_id': clients[entry['client']].id,
                'status': entry['status'],
            },
            [
                {'product_id': products[item['product']].id, 'quantity': item['quantity']}
                for item in entry['items']
            ],
        )

    now = workflow.clock()
    for entry in demo.get('Activities', []):
        workflow.record_activity(
            clients[entry['client']].id,
            entry['activity_type'],
            entry['description'],
            timestamp=now - timedelta(hours=entry.get('hours_ago', 0)),
        )

    logger.info(
        f"Loaded demo data: {len(products)} products, {len(clients)} clients, "
        f"{len(demo.get('Orders', []))} orders"
    )
    return True


def build_database(app, seed_demo_data=True):
    """
    Main build entry point

    Args:
        app: Flask application from create_app()
        seed_demo_data (bool): Load the demo catalogue when the store is empty
    """
    with app.app_context():
        logger.info("Starting database build")
        create_tables()
        ensure_admin_user(app.config['ADMIN_USERNAME'], app.config['ADMIN_PASSWORD'])
        if seed_demo_data:
            load_demo_data()
        logger.info("Database build complete")
