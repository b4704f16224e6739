"""
Tests for the database build: tables, admin account and demo catalogue
"""

import pytest

from backoffice.build import build_database
from backoffice.presentation.context import get_projection, get_store, get_workflow

from conftest import make_app


def demo_state(app):
    with app.app_context():
        workflow = get_workflow()
        stock = {p.name: p.stock_quantity for p in workflow.list_products()}
        orders = {o.order_number: str(o.status) for o in workflow.list_orders()}
        admin = get_store().get_user_by_username('admin')
        return stock, orders, admin


@pytest.fixture
def memory_app():
    return make_app(STORAGE_BACKEND='memory', ADMIN_PASSWORD='admin-password')


def test_build_loads_demo_catalogue(memory_app):
    build_database(memory_app)

    stock, orders, admin = demo_state(memory_app)
    # Demo orders have already drawn stock down from the file's starting levels
    assert stock == {
        'Blue T-Shirt (Medium)': 3,
        'Wireless Headphones': 5,
        'Smartphone Case': 2,
        'Leather Wallet': 4,
    }
    assert orders == {'ORD-2305': 'completed', 'ORD-2304': 'processing', 'ORD-2303': 'pending'}
    assert admin is not None and admin.name == 'Admin User'

    with memory_app.app_context():
        analytics = get_projection().get_analytics()
        assert analytics.low_stock_items == 4
        assert analytics.revenue == pytest.approx(89.99 + 2 * 19.99 + 24.99)
        assert analytics.new_clients == 3

        feed = get_projection().get_client_activities(limit=100)
        assert {entry.activity.activity_type for entry in feed} == {'registration', 'order', 'profile', 'review'}


def test_build_is_idempotent(memory_app):
    build_database(memory_app)
    build_database(memory_app)

    stock, orders, _ = demo_state(memory_app)
    assert len(stock) == 4
    assert len(orders) == 3
    assert stock['Wireless Headphones'] == 5


def test_build_without_demo_data_or_admin_password():
    app = make_app(STORAGE_BACKEND='memory')
    build_database(app, seed_demo_data=False)

    stock, orders, admin = demo_state(app)
    assert stock == {}
    assert orders == {}
    assert admin is None


def test_build_on_sql_store(app):
    app.config['ADMIN_PASSWORD'] = 'admin-password'
    build_database(app)

    stock, orders, admin = demo_state(app)
    assert stock['Smartphone Case'] == 2
    assert len(orders) == 3
    assert admin is not None


def test_store_viewer_renders_collections(memory_app):
    from backoffice.utils._view_store import collect_tables, render_table

    build_database(memory_app)
    with memory_app.app_context():
        tables = collect_tables(get_store())

    assert [len(tables[name]) for name in ('products', 'clients', 'orders', 'order_items')] == [4, 3, 3, 3]
    rendered = render_table(tables['products'])
    assert 'stockQuantity' in rendered
    assert 'Leather Wallet' in rendered
    assert render_table([]) == '(No data)'
