from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import admin_required
from ..common.datetime_utils import parse_iso_date
from ..common.serializers import hourly_to_dict, overview_row_to_dict, student_report_to_dict, term_report_to_dict
from ..common.validators import parse_id, require_query_params
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.analytics_service

    def _day():
        value = request.args.get("date")
        return parse_iso_date(value) if value else None

    @app.route("/api/analytics/students/<int:student_id>", methods=["GET"], endpoint="student_analytics")
    @admin_required
    def student_analytics(student_id: int):
        term_id = parse_id(require_query_params(request.args, ["termId"])["termId"], "termId")
        return jsonify(student_report_to_dict(service.student_report(student_id, term_id)))

    @app.route("/api/analytics/terms/<int:term_id>", methods=["GET"], endpoint="term_analytics")
    @admin_required
    def term_analytics(term_id: int):
        return jsonify(term_report_to_dict(service.term_report(term_id)))

    @app.route("/api/analytics/terms/<int:term_id>/hourly", methods=["GET"], endpoint="hourly_staffing")
    @admin_required
    def hourly_staffing(term_id: int):
        return jsonify([hourly_to_dict(h) for h in service.hourly_staffing(term_id, _day())])

    @app.route("/api/analytics/terms/<int:term_id>/overview", methods=["GET"], endpoint="attendance_overview")
    @admin_required
    def attendance_overview(term_id: int):
        return jsonify([overview_row_to_dict(o) for o in service.attendance_overview(term_id, _day())])
