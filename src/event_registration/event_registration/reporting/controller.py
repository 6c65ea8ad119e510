from __future__ import annotations

from flask import Flask, jsonify, send_file

from ..auth.guards import admin_required
from ..common.http import api_rule
from .service import XLSX_MIMETYPE


def register(app: Flask, container) -> None:
    reports = container.report_service

    @app.route(api_rule(app, "/admin/dashboard/registrations-per-event"), endpoint="dashboard_per_event")
    @admin_required
    def dashboard_per_event():
        return jsonify([r.to_dict() for r in reports.registrations_per_event()])

    @app.route(api_rule(app, "/admin/dashboard/registrations-over-time"), endpoint="dashboard_over_time")
    @admin_required
    def dashboard_over_time():
        return jsonify([r.to_dict() for r in reports.registrations_over_time()])

    @app.route(api_rule(app, "/admin/dashboard/registrations-by-department"), endpoint="dashboard_by_department")
    @admin_required
    def dashboard_by_department():
        return jsonify([r.to_dict() for r in reports.registrations_by_department()])

    @app.route(api_rule(app, "/admin/dashboard/summary"), endpoint="dashboard_summary")
    @admin_required
    def dashboard_summary():
        return jsonify(reports.summary())

    @app.route(api_rule(app, "/admin/dashboard/events/<int:event_id>/export"), endpoint="dashboard_export")
    @admin_required
    def dashboard_export(event_id: int):
        output = reports.export_event_registrations_xlsx(event_id)
        return send_file(
            output,
            download_name=f"event_{event_id}_registrations.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )
