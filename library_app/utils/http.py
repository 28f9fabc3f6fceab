from flask import request

from library_app.errors import InvalidArgumentError


def json_body() -> dict:
    """JSON object of the request; a missing or empty body reads as {}."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise InvalidArgumentError("Request body must be a JSON object")
    return data
