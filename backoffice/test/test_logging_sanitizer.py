"""
Test the logging sanitizer utility.
Verifies passwords, tokens and Authorization headers are redacted from logs.
"""

from backoffice.utils.logging_sanitizer import (
    REDACTED,
    SENSITIVE_FIELDS,
    sanitize_dict,
    sanitize_exception_message,
    sanitize_headers,
    sanitize_value,
)


def test_sanitize_dict():
    """Test dictionary sanitization"""
    result = sanitize_dict({
        'username': 'admin',
        'password': 'secret123',
        'email': 'admin@example.com',
    })
    assert result['username'] == 'admin', "Username should not be redacted"
    assert result['password'] == REDACTED, "Password should be redacted"
    assert result['email'] == 'admin@example.com', "Email should not be redacted"

    # Case insensitivity
    result = sanitize_dict({'Password': 'a', 'PASSWORD': 'b', 'PaSsWoRd': 'c'})
    assert set(result.values()) == {REDACTED}

    # Nested dictionaries
    result = sanitize_dict({
        'user': {'username': 'admin', 'password': 'secret123'},
        'settings': {'theme': 'dark'},
    })
    assert result['user']['username'] == 'admin'
    assert result['user']['password'] == REDACTED
    assert result['settings']['theme'] == 'dark'


def test_camel_case_and_dashed_keys():
    result = sanitize_dict({
        'accessToken': 'abc',
        'refresh-token': 'def',
        'passwordHash': 'pbkdf2:...',
        'apiKey': 'k',
        'clientId': 7,
    })
    assert result == {
        'accessToken': REDACTED,
        'refresh-token': REDACTED,
        'passwordHash': REDACTED,
        'apiKey': REDACTED,
        'clientId': 7,
    }


def test_sanitize_value_walks_lists():
    payload = {
        'order': {'clientId': 1, 'orderNumber': 'ORD-2305'},
        'items': [{'productId': 2, 'quantity': 1}, {'token': 'leaked'}],
    }
    result = sanitize_value(payload)
    assert result['order'] == {'clientId': 1, 'orderNumber': 'ORD-2305'}
    assert result['items'][0] == {'productId': 2, 'quantity': 1}
    assert result['items'][1] == {'token': REDACTED}

    # Input is left untouched
    assert payload['items'][1]['token'] == 'leaked'
    assert sanitize_value('plain') == 'plain'


def test_empty_input():
    assert sanitize_dict({}) == {}
    assert sanitize_dict(None) == {}


def test_sanitize_headers_keeps_scheme():
    result = sanitize_headers({
        'Authorization': 'Bearer eyJpZCI6MX0.abc.def',
        'Content-Type': 'application/json',
        'Cookie': 'session=xyz',
    })
    assert result['Authorization'] == f'Bearer {REDACTED}'
    assert result['Content-Type'] == 'application/json'
    assert result['Cookie'] == REDACTED

    assert sanitize_headers({'Authorization': 'opaque'})['Authorization'] == REDACTED


def test_all_sensitive_fields():
    """Verify all sensitive fields are properly configured"""
    result = sanitize_dict({field: f"sensitive_{field}_value" for field in SENSITIVE_FIELDS})
    for field in SENSITIVE_FIELDS:
        assert result[field] == REDACTED, f"Field '{field}' should be redacted"


def test_sanitize_exception_message():
    assert sanitize_exception_message(ValueError("stock went negative")) == "stock went negative"

    leaked = RuntimeError("INSERT INTO users (username, password_hash) VALUES ('a', 'pbkdf2:...')")
    assert sanitize_exception_message(leaked) == "RuntimeError: [Message contains sensitive data]"
