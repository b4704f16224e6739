"""
JSON payload helpers for the API blueprints

The dashboard client speaks camelCase; the workflow takes snake_case keys.
Conversion and date parsing happen here so route handlers stay one-liners.
"""

from datetime import datetime
import re
from typing import Any, Dict, Iterable, Mapping

from flask import request

from backoffice.business.commerce.errors import InvalidArgumentError

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')


def snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub('_', key).lower()


def snake_keys(data: Mapping[str, Any], drop: Iterable[str] = ()) -> Dict[str, Any]:
    """Shallow camelCase -> snake_case key conversion, skipping keys named in drop"""
    drop = set(drop)
    converted = {}
    for key, value in data.items():
        name = snake_case(key)
        if name not in drop:
            converted[name] = value
    return converted


def json_body() -> Dict[str, Any]:
    """
    The request body as a JSON object.

    Raises:
        InvalidArgumentError: Body missing, not JSON, or not an object
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgumentError("Request body must be a JSON object")
    return data


def json_object(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise InvalidArgumentError(f"'{key}' must be a JSON object", field=key)
    return value


def parse_datetime(value, field: str):
    """
    Parse an ISO-8601 timestamp into a naive local datetime.

    Offsets (including a trailing Z) are converted to local time first.
    None passes through.
    """
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{field} must be an ISO-8601 string", field=field)
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidArgumentError(f"{field} is not a valid ISO-8601 timestamp", field=field)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def limit_arg(default: int, maximum: int = 100) -> int:
    """?limit= query parameter, clamped to 1..maximum"""
    raw = request.args.get('limit')
    if raw is None:
        return default
    try:
        limit = int(raw)
    except ValueError:
        raise InvalidArgumentError("limit must be an integer", field='limit')
    return max(1, min(limit, maximum))
