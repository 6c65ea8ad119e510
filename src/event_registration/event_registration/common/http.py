from __future__ import annotations

from typing import Any

from flask import Flask, request

from ..core.exceptions import ValidationError


def api_rule(app: Flask, rule: str) -> str:
    prefix = (app.config.get("API_PREFIX") or "").rstrip("/")
    return f"{prefix}{rule}"


def json_body() -> dict:
    """The JSON object body of the request, or form fields when sent as multipart."""
    if request.is_json:
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("Malformed JSON body")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data
    return request.form.to_dict()


def json_payload() -> Any:
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be JSON")
    return data
