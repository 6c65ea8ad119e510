from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import admin_required, current_user, login_required
from ..common.http import api_rule, json_body, json_payload


def register(app: Flask, container) -> None:
    users = container.user_service

    @app.route(api_rule(app, "/users"), methods=["GET"], endpoint="users_list")
    @admin_required
    def users_list():
        return jsonify([u.to_dict() for u in users.list_users()])

    @app.route(api_rule(app, "/users/count"), methods=["GET"], endpoint="users_count")
    @admin_required
    def users_count():
        return jsonify({"count": users.count_users()})

    @app.route(api_rule(app, "/users/<int:user_id>"), methods=["GET"], endpoint="users_get")
    @login_required
    def users_get(user_id: int):
        me = current_user()
        user = users.get_user_for(current_user_id=me.id_user, current_is_admin=me.is_admin, user_id=user_id)
        return jsonify(user.to_dict())

    @app.route(api_rule(app, "/users"), methods=["POST"], endpoint="users_create")
    @admin_required
    def users_create():
        data = json_body()
        user = users.create_user(
            username=data.get("username"),
            password=data.get("password"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            role_name=data.get("role_name"),
            department_name=data.get("departement_name") or data.get("department_name"),
            birth_date=data.get("birth_date"),
            registration_number=data.get("registration_number"),
        )
        return jsonify(user.to_dict()), 201

    @app.route(api_rule(app, "/users/<int:user_id>"), methods=["PUT"], endpoint="users_update")
    @admin_required
    def users_update(user_id: int):
        return jsonify(users.update_user(user_id, json_body()).to_dict())

    @app.route(api_rule(app, "/users/<int:user_id>"), methods=["DELETE"], endpoint="users_delete")
    @admin_required
    def users_delete(user_id: int):
        users.delete_user(actor_id=current_user().id_user, user_id=user_id)
        return jsonify({"message": "User deleted successfully"})

    @app.route(api_rule(app, "/users/bulk"), methods=["POST"], endpoint="users_bulk")
    @admin_required
    def users_bulk():
        results = users.bulk_upsert(json_payload())
        failed = [r for r in results if r.status == "failed"]
        body = {
            "message": "Bulk import completed with errors" if failed else "Bulk import completed",
            "results": [r.to_dict() for r in results],
        }
        return jsonify(body), 207 if failed else 201

    @app.route(api_rule(app, "/users/me/password"), methods=["PUT"], endpoint="users_change_password")
    @login_required
    def users_change_password():
        data = json_body()
        users.change_password(
            current_user().id_user,
            current_password=data.get("current_password") or data.get("currentPassword"),
            new_password=data.get("new_password") or data.get("newPassword"),
        )
        return jsonify({"message": "Password updated successfully"})

    @app.route(api_rule(app, "/users/me/profile-picture"), methods=["POST"], endpoint="users_upload_picture")
    @login_required
    def users_upload_picture():
        user = users.set_profile_picture(current_user().id_user, request.files.get("profile_picture"))
        return jsonify({"message": "Profile picture updated", "profilePictureUrl": user.profile_picture_url})

    @app.route(api_rule(app, "/users/me/profile-picture"), methods=["DELETE"], endpoint="users_remove_picture")
    @login_required
    def users_remove_picture():
        users.remove_profile_picture(current_user().id_user)
        return jsonify({"message": "Profile picture removed"})
