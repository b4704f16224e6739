"""
Request-time access to the services wired by create_app()
"""

from flask import current_app

EXTENSION_KEY = 'backoffice'


def _services():
    return current_app.extensions[EXTENSION_KEY]


def get_store():
    return _services()['store']


def get_workflow():
    return _services()['workflow']


def get_projection():
    return _services()['projection']


def get_user_service():
    return _services()['users']
