from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import admin_required
from ..common.cache import CacheKeys, CacheTTL
from ..common.serializers import schedule_to_dict
from ..common.validators import parse_id, parse_optional_id, require_fields, require_query_params
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service
    cache = container.cache

    @app.route("/api/schedules", methods=["GET"], endpoint="get_schedules")
    @admin_required
    def get_schedules():
        term_id = parse_id(require_query_params(request.args, ["termId"])["termId"], "termId")
        student_id = parse_optional_id(request.args.get("studentId"), "studentId")

        if student_id is None:
            data = cache.wrapper(
                CacheKeys.schedules_list(term_id),
                CacheTTL.SCHEDULES_LIST,
                lambda: [schedule_to_dict(s) for s in service.list_for_term(term_id)],
            )
        else:
            data = cache.wrapper(
                CacheKeys.student_schedule(student_id, term_id),
                CacheTTL.SCHEDULE,
                lambda: schedule_to_dict(service.get_schedule(student_id=student_id, term_id=term_id)),
            )
        return jsonify(data)

    @app.route("/api/schedules", methods=["POST"], endpoint="save_schedule")
    @admin_required
    def save_schedule():
        body = require_fields(request.get_json(silent=True), ["studentId", "termId", "availability"])
        student_id = parse_id(body["studentId"], "studentId")
        term_id = parse_id(body["termId"], "termId")
        schedule = service.save_schedule(
            student_id=student_id,
            term_id=term_id,
            availability=body["availability"],
            timezone=body.get("timezone"),
        )
        cache.invalidate_student(student_id, term_id)
        cache.delete(CacheKeys.schedules_list(term_id))
        return jsonify(schedule_to_dict(schedule))

    @app.route("/api/schedules", methods=["DELETE"], endpoint="delete_schedule")
    @admin_required
    def delete_schedule():
        args = require_query_params(request.args, ["studentId", "termId"])
        student_id = parse_id(args["studentId"], "studentId")
        term_id = parse_id(args["termId"], "termId")
        service.delete_schedule(student_id=student_id, term_id=term_id)
        cache.invalidate_student(student_id, term_id)
        cache.delete(CacheKeys.schedules_list(term_id))
        return jsonify({"message": "Schedule deleted successfully"})
