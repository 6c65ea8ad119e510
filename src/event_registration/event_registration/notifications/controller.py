from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import current_user, login_required
from ..common.http import api_rule
from ..common.validators import parse_bool, parse_int
from ..core.constants import DEFAULT_NOTIFICATION_LIMIT


def register(app: Flask, container) -> None:
    notifications = container.notification_service

    @app.route(api_rule(app, "/notifications"), methods=["GET"], endpoint="notifications_list")
    @login_required
    def notifications_list():
        limit = parse_int(request.args.get("limit", DEFAULT_NOTIFICATION_LIMIT), "limit")
        unread_only = parse_bool(request.args.get("unread"))
        page = notifications.list_for_user(current_user().id_user, limit=limit, unread_only=unread_only)
        return jsonify(page.to_dict())

    @app.route(api_rule(app, "/notifications/<int:notification_id>/read"), methods=["PUT"], endpoint="notifications_read")
    @login_required
    def notifications_read(notification_id: int):
        notifications.mark_read(current_user().id_user, notification_id)
        return jsonify({"message": "Notification marked as read"})

    @app.route(api_rule(app, "/notifications/read-all"), methods=["PUT"], endpoint="notifications_read_all")
    @login_required
    def notifications_read_all():
        count = notifications.mark_all_read(current_user().id_user)
        return jsonify({"message": "All notifications marked as read", "count": count})
