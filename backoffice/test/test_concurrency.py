"""
Concurrency tests for stock adjustments

Concurrent restocks and orders must never lose an update: the final stock
is the algebraic sum of every applied delta (floored at zero).
"""

import threading

from sqlalchemy import update

from backoffice import db as _db
from backoffice.business.commerce.order_workflow import OrderWorkflow
from backoffice.business.commerce.store import MemoryStore, SqlAlchemyStore
from backoffice.data import Product

from conftest import make_app


def run_concurrently(target, count):
    """Start `count` threads on target(i) behind a barrier and collect their errors"""
    barrier = threading.Barrier(count)
    errors = []

    def worker(index):
        barrier.wait()
        try:
            target(index)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return errors


def test_concurrent_restocks_lose_nothing():
    workflow = OrderWorkflow(MemoryStore())
    product = workflow.create_product({'name': 'Widget', 'price': 1.0, 'stock_quantity': 7})

    errors = run_concurrently(lambda i: workflow.restock_product(product.id, 1), 50)

    assert errors == []
    assert workflow.get_product(product.id).stock_quantity == 57


def test_concurrent_orders_and_restocks_sum_algebraically():
    workflow = OrderWorkflow(MemoryStore())
    product = workflow.create_product({'name': 'Widget', 'price': 2.5, 'stock_quantity': 100})
    client = workflow.create_client({'name': 'Buyer', 'email': 'buyer@example.com'})

    def step(index):
        if index % 2:
            workflow.restock_product(product.id, 3)
        else:
            workflow.create_order(
                {'client_id': client.id},
                [{'product_id': product.id, 'quantity': 2}],
            )

    errors = run_concurrently(step, 40)

    assert errors == []
    # 20 restocks of 3, 20 orders of 2, never near the floor
    assert workflow.get_product(product.id).stock_quantity == 100 + 20 * 3 - 20 * 2
    assert len(workflow.list_orders()) == 20


def test_concurrent_orders_never_drive_stock_negative():
    workflow = OrderWorkflow(MemoryStore())
    product = workflow.create_product({'name': 'Scarce', 'price': 5.0, 'stock_quantity': 5})
    client = workflow.create_client({'name': 'Buyer', 'email': 'buyer@example.com'})

    errors = run_concurrently(
        lambda i: workflow.create_order({'client_id': client.id}, [{'product_id': product.id, 'quantity': 1}]),
        20,
    )

    assert errors == []
    assert workflow.get_product(product.id).stock_quantity == 0
    assert len(workflow.list_orders()) == 20


def test_sql_restock_applies_to_committed_stock(tmp_path):
    """
    The SQL store increments in the database, so a write committed by
    another connection after this session loaded the row is not overwritten.
    """
    app = make_app(SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'stock.db'}")
    with app.app_context():
        _db.create_all()
        try:
            workflow = OrderWorkflow(SqlAlchemyStore())
            product = workflow.create_product({'name': 'Widget', 'price': 1.0, 'stock_quantity': 5})

            loaded = _db.session.get(Product, product.id)
            assert loaded.stock_quantity == 5

            with _db.engine.begin() as connection:
                connection.execute(
                    update(Product).where(Product.id == product.id).values(stock_quantity=40)
                )

            assert workflow.restock_product(product.id, 3).stock_quantity == 43
            assert workflow.get_product(product.id).stock_quantity == 43
        finally:
            _db.session.remove()
            _db.drop_all()


def test_sql_order_decrement_floors_in_database(tmp_path):
    app = make_app(SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'floor.db'}")
    with app.app_context():
        _db.create_all()
        try:
            workflow = OrderWorkflow(SqlAlchemyStore())
            product = workflow.create_product({'name': 'Widget', 'price': 1.0, 'stock_quantity': 10})
            client = workflow.create_client({'name': 'Buyer', 'email': 'buyer@example.com'})

            # Stock drops to 1 behind the session's back
            with _db.engine.begin() as connection:
                connection.execute(
                    update(Product).where(Product.id == product.id).values(stock_quantity=1)
                )

            workflow.create_order({'client_id': client.id}, [{'product_id': product.id, 'quantity': 4}])
            assert workflow.get_product(product.id).stock_quantity == 0
        finally:
            _db.session.remove()
            _db.drop_all()
