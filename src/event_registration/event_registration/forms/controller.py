from __future__ import annotations

from flask import Flask, jsonify

from ..auth.guards import admin_required
from ..common.http import api_rule, json_body, json_payload


def register(app: Flask, container) -> None:
    forms = container.form_service

    @app.route(api_rule(app, "/form-field-types"), methods=["GET"], endpoint="field_types_list")
    def field_types_list():
        return jsonify([t.to_dict() for t in forms.list_types()])

    @app.route(api_rule(app, "/form-field-types"), methods=["POST"], endpoint="field_types_create")
    @admin_required
    def field_types_create():
        data = json_body()
        field_type = forms.create_type(field_name=data.get("field_name") or data.get("name"))
        return jsonify(field_type.to_dict()), 201

    @app.route(api_rule(app, "/events/<int:event_id>/form-fields"), methods=["GET"], endpoint="form_fields_list")
    def form_fields_list(event_id: int):
        return jsonify([f.to_dict() for f in forms.list_fields(event_id)])

    @app.route(api_rule(app, "/events/<int:event_id>/form-fields"), methods=["PUT"], endpoint="form_fields_replace")
    @admin_required
    def form_fields_replace(event_id: int):
        payload = json_payload()
        definitions = payload.get("fields") if isinstance(payload, dict) else payload
        fields = forms.set_fields(event_id, definitions)
        return jsonify({"message": "Form fields saved", "fields": [f.to_dict() for f in fields]})

    @app.route(api_rule(app, "/events/<int:event_id>/fields"), methods=["POST"], endpoint="form_fields_create")
    @admin_required
    def form_fields_create(event_id: int):
        return jsonify(forms.create_field(event_id, json_body()).to_dict()), 201

    @app.route(api_rule(app, "/form-fields/<int:field_id>"), methods=["GET"], endpoint="form_fields_get")
    def form_fields_get(field_id: int):
        return jsonify(forms.get_field(field_id).to_dict())

    @app.route(api_rule(app, "/form-fields/<int:field_id>"), methods=["PUT"], endpoint="form_fields_update")
    @admin_required
    def form_fields_update(field_id: int):
        return jsonify(forms.update_field(field_id, json_body()).to_dict())

    @app.route(api_rule(app, "/form-fields/<int:field_id>"), methods=["DELETE"], endpoint="form_fields_delete")
    @admin_required
    def form_fields_delete(field_id: int):
        forms.delete_field(field_id)
        return jsonify({"message": "Form field deleted successfully"})

    @app.route(api_rule(app, "/form-fields/<int:field_id>/options"), methods=["GET"], endpoint="options_list")
    def options_list(field_id: int):
        return jsonify([o.to_dict() for o in forms.list_options(field_id)])

    @app.route(api_rule(app, "/form-fields/<int:field_id>/options"), methods=["POST"], endpoint="options_create")
    @admin_required
    def options_create(field_id: int):
        data = json_body()
        option = forms.create_option(field_id, value=data.get("value"), is_default=data.get("is_default"))
        return jsonify(option.to_dict()), 201

    @app.route(api_rule(app, "/options/<int:option_id>"), methods=["PUT"], endpoint="options_update")
    @admin_required
    def options_update(option_id: int):
        return jsonify(forms.update_option(option_id, json_body()).to_dict())

    @app.route(api_rule(app, "/options/<int:option_id>"), methods=["DELETE"], endpoint="options_delete")
    @admin_required
    def options_delete(option_id: int):
        forms.delete_option(option_id)
        return jsonify({"message": "Option deleted successfully"})
