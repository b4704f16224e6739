"""
Commerce business layer: order workflow, inventory ledger rules and the
store abstraction they run against.
"""
