#!/usr/bin/env python3
"""
Store Viewer for the back-office dashboard
Prints every collection in the configured store, plus the dashboard analytics

Usage:
    python -m backoffice.utils._view_store
"""

from dotenv import load_dotenv
from tabulate import tabulate

from backoffice.logger import get_logger

logger = get_logger("backoffice.view_store")


def format_value(value):
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "True" if value else "False"
    return str(value)


def render_table(records):
    """Grid table of records (anything with to_dict()), or '(No data)'"""
    if not records:
        return "(No data)"
    rows = [record.to_dict() for record in records]
    columns = list(rows[0].keys())
    formatted_rows = [[format_value(row.get(column)) for column in columns] for row in rows]
    return tabulate(formatted_rows, headers=columns, tablefmt="grid")


def collect_tables(store):
    """Collection name -> records for everything the store holds"""
    orders = store.list_orders()
    items = [item for order in orders for item in store.list_order_items(order.id)]
    return {
        'products': store.list_products(),
        'clients': store.list_clients(),
        'orders': orders,
        'order_items': items,
        'client_activities': store.list_activities(),
    }


def main():
    from backoffice import create_app
    from backoffice.presentation.context import get_projection, get_store

    load_dotenv()
    app = create_app()

    with app.app_context():
        store = get_store()
        tables = collect_tables(store)
        print(f"Store: {type(store).__name__}")

        for name, records in tables.items():
            print(f"\n{'=' * 80}")
            print(f"{name.upper()} ({len(records)} rows)")
            print('=' * 80)
            print(render_table(records))

        analytics = get_projection().get_analytics().to_dict()
        print(f"\n{'=' * 80}")
        print("DASHBOARD ANALYTICS")
        print('=' * 80)
        print(tabulate(analytics.items(), headers=['metric', 'value'], tablefmt="grid"))

    logger.debug("Store view complete")


if __name__ == "__main__":
    main()
