from flask import request


class InvalidField(ValueError):
    def __init__(self, key, kind="a string"):
        super().__init__(f"{key} must be {kind}")
        self.key = key


def json_body() -> dict:
    """Request JSON as a dict; anything else (missing, array, scalar) becomes {}."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def text_field(data: dict, key: str, lower: bool = False) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidField(key)
    value = value.strip()
    return value.lower() if lower else value


def object_field(data: dict, key: str) -> dict:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidField(key, "an object")
    return value
