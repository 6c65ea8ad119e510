from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import admin_required, current_user, login_required
from ..common.http import api_rule, json_body, json_payload


def register(app: Flask, container) -> None:
    inscriptions = container.inscription_service

    @app.route(api_rule(app, "/events/<int:event_id>/inscriptions"), methods=["POST"], endpoint="inscriptions_create")
    @login_required
    def inscriptions_create(event_id: int):
        if request.is_json:
            form, files = json_body(), None
        else:
            form, files = request.form, request.files
        result = inscriptions.register(user_id=current_user().id_user, event_id=event_id, form=form, files=files)
        return jsonify(result.to_dict()), 207 if result.is_partial else 201

    @app.route(api_rule(app, "/events/<int:event_id>/inscriptions"), methods=["GET"], endpoint="inscriptions_for_event")
    @admin_required
    def inscriptions_for_event(event_id: int):
        return jsonify([i.to_dict() for i in inscriptions.list_for_event(event_id)])

    @app.route(api_rule(app, "/events/<int:event_id>/inscriptions/me"), methods=["GET"], endpoint="inscriptions_mine")
    @login_required
    def inscriptions_mine(event_id: int):
        inscription = inscriptions.my_inscription(user_id=current_user().id_user, event_id=event_id)
        return jsonify(inscription.to_dict(with_responses=True))

    @app.route(api_rule(app, "/inscriptions"), methods=["GET"], endpoint="inscriptions_list")
    @admin_required
    def inscriptions_list():
        return jsonify([i.to_dict() for i in inscriptions.list_all()])

    @app.route(api_rule(app, "/inscriptions/<int:inscription_id>"), methods=["GET"], endpoint="inscriptions_get")
    @login_required
    def inscriptions_get(inscription_id: int):
        inscription = inscriptions.get_inscription(inscription_id, current_user=current_user())
        return jsonify(inscription.to_dict(with_responses=True))

    @app.route(api_rule(app, "/users/<int:user_id>/inscriptions"), methods=["GET"], endpoint="inscriptions_for_user")
    @login_required
    def inscriptions_for_user(user_id: int):
        return jsonify([i.to_dict() for i in inscriptions.list_for_user(user_id, current_user=current_user())])

    @app.route(api_rule(app, "/inscriptions/<int:inscription_id>"), methods=["DELETE"], endpoint="inscriptions_cancel")
    @login_required
    def inscriptions_cancel(inscription_id: int):
        inscriptions.cancel(inscription_id, current_user=current_user())
        return jsonify({"message": "Registration cancelled"})

    @app.route(api_rule(app, "/inscriptions/<int:inscription_id>/responses"), methods=["POST"], endpoint="responses_submit")
    @login_required
    def responses_submit(inscription_id: int):
        payload = json_payload()
        entries = payload.get("responses") if isinstance(payload, dict) else payload
        result = inscriptions.submit_responses(
            user_id=current_user().id_user, inscription_id=inscription_id, entries=entries
        )
        return jsonify(result.to_dict()), 207 if result.is_partial else 201

    @app.route(api_rule(app, "/inscriptions/<int:inscription_id>/responses"), methods=["GET"], endpoint="responses_list")
    @login_required
    def responses_list(inscription_id: int):
        responses = inscriptions.list_responses(inscription_id, current_user=current_user())
        return jsonify([r.to_dict() for r in responses])

    @app.route(api_rule(app, "/events/<int:event_id>/responses"), methods=["GET"], endpoint="responses_for_event")
    @admin_required
    def responses_for_event(event_id: int):
        return jsonify([r.to_dict() for r in inscriptions.list_event_responses(event_id)])

    @app.route(api_rule(app, "/responses/upload"), methods=["POST"], endpoint="responses_upload")
    @login_required
    def responses_upload():
        path = inscriptions.store_response_file(
            user_id=current_user().id_user, upload=request.files.get("response_file")
        )
        return jsonify({"message": "File uploaded", "filePath": path}), 201
