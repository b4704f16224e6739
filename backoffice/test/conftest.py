"""
Pytest configuration and fixtures for the back-office test suite
"""
import os

# Must be set before the first logger is created
os.environ.setdefault('LOG_TO_FILE', 'False')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from datetime import datetime, timedelta

import pytest

from backoffice import create_app
from backoffice import db as _db
from backoffice.business.commerce.order_workflow import OrderWorkflow
from backoffice.business.commerce.store import MemoryStore, SqlAlchemyStore
from backoffice.services.commerce.dashboard_projection import DashboardProjection

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'STORAGE_BACKEND': 'sql',
    'RATELIMIT_ENABLED': False,
    'ADMIN_PASSWORD': None,
}

TEST_USER = {
    'username': 'operator',
    'password': 'operator-password',
    'name': 'Test Operator',
    'email': 'operator@example.com',
}


class FixedClock:
    """Injectable clock that only moves when told to"""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_app(**overrides):
    config = dict(TEST_CONFIG)
    config.update(overrides)
    return create_app(config)


@pytest.fixture(scope='function')
def app():
    """Flask application on an in-memory SQLite database"""
    app = make_app()
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


@pytest.fixture(scope='function')
def auth_headers(client):
    """Register an operator through the API and return bearer headers"""
    response = client.post('/api/auth/register', json=TEST_USER)
    assert response.status_code == 201, response.get_json()
    return {'Authorization': f"Bearer {response.get_json()['token']}"}


@pytest.fixture(params=['memory', 'sql'])
def store(request):
    """Every store-level test runs against both implementations"""
    if request.param == 'sql':
        request.getfixturevalue('app')
        return SqlAlchemyStore()
    return MemoryStore()


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 6, 15, 14, 30, 0))


@pytest.fixture
def workflow(store, clock):
    return OrderWorkflow(store, clock=clock)


@pytest.fixture
def projection(store, clock):
    return DashboardProjection(store, clock=clock)


@pytest.fixture
def catalog(workflow):
    """
    Two products and one client.

    - tshirt: stock 3, threshold 5 (already low)
    - headphones: stock 20, threshold 5
    """
    tshirt = workflow.create_product({
        'name': 'Blue T-Shirt (Medium)',
        'description': 'Cotton t-shirt',
        'price': 19.99,
        'stock_quantity': 3,
        'low_stock_threshold': 5,
    })
    headphones = workflow.create_product({
        'name': 'Wireless Headphones',
        'price': 89.99,
        'stock_quantity': 20,
    })
    client = workflow.create_client({
        'name': 'John Smith',
        'email': 'john@example.com',
        'phone': '555-1234',
    })
    return {'tshirt': tshirt, 'headphones': headphones, 'client': client}
