from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import api_rule, json_body
from .guards import current_user, login_required


def register(app: Flask, container) -> None:
    @app.route(api_rule(app, "/auth/register"), methods=["POST"], endpoint="auth_register")
    def auth_register():
        user = container.auth_service.register(json_body())
        return jsonify({"message": "User registered successfully", "user": user.to_dict()}), 201

    @app.route(api_rule(app, "/auth/login"), methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        result = container.auth_service.login(data.get("username"), data.get("password"))
        return jsonify(result.to_dict())

    @app.route(api_rule(app, "/auth/me"), methods=["GET"], endpoint="auth_me")
    @login_required
    def auth_me():
        return jsonify(current_user().to_dict())
