from __future__ import annotations

from flask import Flask, jsonify

from ..auth.guards import admin_required
from ..common.http import api_rule, json_body


def register(app: Flask, container) -> None:
    directory = container.directory_service

    @app.route(api_rule(app, "/roles"), methods=["GET"], endpoint="roles_list")
    @admin_required
    def roles_list():
        return jsonify([r.to_dict() for r in directory.list_roles()])

    @app.route(api_rule(app, "/roles/<int:id_role>"), methods=["GET"], endpoint="roles_get")
    @admin_required
    def roles_get(id_role: int):
        return jsonify(directory.get_role(id_role).to_dict())

    @app.route(api_rule(app, "/roles"), methods=["POST"], endpoint="roles_create")
    @admin_required
    def roles_create():
        return jsonify(directory.create_role(name=json_body().get("name")).to_dict()), 201

    @app.route(api_rule(app, "/roles/<int:id_role>"), methods=["PUT"], endpoint="roles_update")
    @admin_required
    def roles_update(id_role: int):
        return jsonify(directory.update_role(id_role, name=json_body().get("name")).to_dict())

    @app.route(api_rule(app, "/roles/<int:id_role>"), methods=["DELETE"], endpoint="roles_delete")
    @admin_required
    def roles_delete(id_role: int):
        directory.delete_role(id_role)
        return jsonify({"message": "Role deleted successfully"})

    @app.route(api_rule(app, "/departements"), methods=["GET"], endpoint="departments_list")
    def departments_list():
        return jsonify([d.to_dict() for d in directory.list_departments()])

    @app.route(api_rule(app, "/departements/<int:id_departement>"), methods=["GET"], endpoint="departments_get")
    def departments_get(id_departement: int):
        return jsonify(directory.get_department(id_departement).to_dict())

    @app.route(api_rule(app, "/departements"), methods=["POST"], endpoint="departments_create")
    @admin_required
    def departments_create():
        data = json_body()
        name = data.get("name") or data.get("name_departement")
        return jsonify(directory.create_department(name=name).to_dict()), 201
