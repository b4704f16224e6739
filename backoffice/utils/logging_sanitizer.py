"""
Logging Sanitizer Utility

Redacts credentials from JSON request payloads and headers before they are
written to the request log. Key matching ignores case, underscores and
dashes, so ``accessToken``, ``access_token`` and ``Access-Token`` all match.
"""

from typing import Any, Dict, Mapping


REDACTED = '[REDACTED]'

# Normalised (lower-case, no separators) key names that are never logged
SENSITIVE_FIELDS = {
    'password',
    'passwordconfirm',
    'confirmpassword',
    'currentpassword',
    'newpassword',
    'passwordhash',
    'secret',
    'secretkey',
    'token',
    'accesstoken',
    'refreshtoken',
    'authtoken',
    'apikey',
    'authorization',
    'cookie',
    'setcookie',
}


def _normalise(key: Any) -> str:
    return str(key).lower().replace('_', '').replace('-', '')


def is_sensitive(key: Any) -> bool:
    return _normalise(key) in SENSITIVE_FIELDS


def sanitize_value(value: Any, redact_text: str = REDACTED) -> Any:
    """
    Recursively sanitize a decoded JSON value (objects, arrays, scalars).

    Example:
        >>> sanitize_value({'order': {'clientId': 1}, 'items': [{'token': 'x'}]})
        {'order': {'clientId': 1}, 'items': [{'token': '[REDACTED]'}]}
    """
    if isinstance(value, Mapping):
        return sanitize_dict(value, redact_text)
    if isinstance(value, (list, tuple)):
        return [sanitize_value(item, redact_text) for item in value]
    return value


def sanitize_dict(data: Mapping[str, Any], redact_text: str = REDACTED) -> Dict[str, Any]:
    """
    Sanitize a mapping by replacing sensitive field values with redaction text.

    Example:
        >>> sanitize_dict({'username': 'admin', 'password': 'secret123'})
        {'username': 'admin', 'password': '[REDACTED]'}
    """
    if not data:
        return dict(data or {})

    return {
        key: redact_text if is_sensitive(key) else sanitize_value(value, redact_text)
        for key, value in data.items()
    }


def sanitize_headers(headers: Mapping[str, str], redact_text: str = REDACTED) -> Dict[str, str]:
    """Sanitize request headers; Authorization keeps its scheme so bearer vs basic stays visible"""
    sanitized = {}
    for key, value in headers.items():
        if _normalise(key) == 'authorization' and value:
            scheme = value.split(' ', 1)[0]
            sanitized[key] = f"{scheme} {redact_text}" if ' ' in value else redact_text
        elif is_sensitive(key):
            sanitized[key] = redact_text
        else:
            sanitized[key] = value
    return sanitized


def sanitize_exception_message(exception: Exception) -> str:
    """
    Message of an exception, unless it looks like it carries a credential.

    Database driver errors echo bound parameters, which can include a
    password hash on user inserts.
    """
    message = str(exception)
    lowered = message.lower()
    if any(field in lowered for field in ('password', 'secret', 'token', 'authorization')):
        return f"{type(exception).__name__}: [Message contains sensitive data]"
    return message
