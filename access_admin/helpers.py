# access_admin/helpers.py
from flask import request

from access_admin.errors import ValidationError


def api_response(success, message=None, data=None, status_code=200):
    body = {"success": success, "data": data}
    if message:
        body["message"] = message
    return body, status_code


def error_response(error, status_code):
    return {"success": False, "error": error}, status_code


def json_body(expect=dict):
    data = request.get_json(silent=True)
    if data is None:
        data = expect()
    if not isinstance(data, expect):
        raise ValidationError(f"Request body must be a JSON {'array' if expect is list else 'object'}")
    return data


def text_field(data, key, strip=True):
    """String field of a JSON object; missing or null reads as ""."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value.strip() if strip else value
