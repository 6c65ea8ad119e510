from __future__ import annotations

from flask import Flask, jsonify

from ..auth.guards import admin_required, current_user, login_required
from ..common.http import api_rule, json_body


def register(app: Flask, container) -> None:
    events = container.event_service

    @app.route(api_rule(app, "/events"), methods=["GET"], endpoint="events_list")
    def events_list():
        return jsonify([e.to_dict() for e in events.list_events()])

    @app.route(api_rule(app, "/events/count"), methods=["GET"], endpoint="events_count")
    def events_count():
        return jsonify({"count": events.count_events()})

    @app.route(api_rule(app, "/events/<int:event_id>"), methods=["GET"], endpoint="events_get")
    def events_get(event_id: int):
        return jsonify(events.get_event(event_id).to_dict())

    @app.route(api_rule(app, "/events"), methods=["POST"], endpoint="events_create")
    @admin_required
    def events_create():
        event = events.create_event(json_body())
        return jsonify({"message": "Event created successfully", "event": event.to_dict()}), 201

    @app.route(api_rule(app, "/events/<int:event_id>"), methods=["PUT"], endpoint="events_update")
    @admin_required
    def events_update(event_id: int):
        event = events.update_event(event_id, json_body())
        return jsonify({"message": "Event updated successfully", "event": event.to_dict()})

    @app.route(api_rule(app, "/events/<int:event_id>/cancel"), methods=["POST"], endpoint="events_cancel")
    @admin_required
    def events_cancel(event_id: int):
        event = events.cancel_event(event_id)
        return jsonify({"message": "Event cancelled", "event": event.to_dict()})

    @app.route(api_rule(app, "/events/<int:event_id>"), methods=["DELETE"], endpoint="events_delete")
    @admin_required
    def events_delete(event_id: int):
        events.delete_event(actor_id=current_user().id_user, event_id=event_id)
        return jsonify({"message": "Event deleted successfully"})

    @app.route(api_rule(app, "/events/me/summary"), methods=["GET"], endpoint="events_my_summary")
    @login_required
    def events_my_summary():
        return jsonify(events.registered_summary(current_user().id_user))

    @app.route(api_rule(app, "/events/me/registered"), methods=["GET"], endpoint="events_my_registered")
    @login_required
    def events_my_registered():
        return jsonify([e.to_dict() for e in events.registered_events(current_user().id_user)])
