from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..auth.guards import admin_required
from ..common.cache import CacheKeys, CacheTTL
from ..common.datetime_utils import parse_timestamp
from ..common.serializers import checkin_to_dict, student_to_dict
from ..common.validators import parse_bool, parse_id, parse_optional_id, require_fields
from ..container import Container
from .model import CheckIn
from .service import parse_checkin_type

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.checkin_service
    cache = container.cache

    def _invalidate(checkin: CheckIn) -> None:
        cache.invalidate_student(checkin.student_id, checkin.term_id)

    @app.route("/api/checkins", methods=["GET"], endpoint="list_checkins")
    @admin_required
    def list_checkins():
        student_id = parse_optional_id(request.args.get("studentId"), "studentId")
        term_id = parse_optional_id(request.args.get("termId"), "termId")
        start = parse_timestamp(request.args["startDate"]) if request.args.get("startDate") else None
        end = parse_timestamp(request.args["endDate"]) if request.args.get("endDate") else None

        def fetch():
            rows = service.list_checkins(student_id=student_id, term_id=term_id, start=start, end=end)
            return [checkin_to_dict(c) for c in rows]

        if student_id and term_id and start is None and end is None:
            return jsonify(cache.wrapper(CacheKeys.student_checkins(student_id, term_id), CacheTTL.CHECKINS, fetch))
        return jsonify(fetch())

    @app.route("/api/checkins", methods=["POST"], endpoint="create_checkin")
    @admin_required
    def create_checkin():
        body = require_fields(request.get_json(silent=True), ["studentId", "termId", "type"])
        checkin = service.create_checkin(
            student_id=parse_id(body["studentId"], "studentId"),
            term_id=parse_id(body["termId"], "termId"),
            type=parse_checkin_type(body["type"]),
            timestamp=parse_timestamp(body["timestamp"]) if body.get("timestamp") else None,
            is_manual=parse_bool(body.get("isManual")),
        )
        _invalidate(checkin)
        return jsonify(checkin_to_dict(checkin)), 201

    @app.route("/api/checkins/<int:checkin_id>", methods=["PUT"], endpoint="update_checkin")
    @admin_required
    def update_checkin(checkin_id: int):
        body = request.get_json(silent=True) or {}
        checkin = service.update_checkin(
            checkin_id,
            type=parse_checkin_type(body["type"]) if body.get("type") else None,
            timestamp=parse_timestamp(body["timestamp"]) if body.get("timestamp") else None,
        )
        _invalidate(checkin)
        return jsonify(checkin_to_dict(checkin))

    @app.route("/api/checkins/<int:checkin_id>", methods=["DELETE"], endpoint="delete_checkin")
    @admin_required
    def delete_checkin(checkin_id: int):
        checkin = service.delete_checkin(checkin_id)
        _invalidate(checkin)
        return jsonify({"message": "Check-in deleted successfully"})

    # Kiosk endpoint, no admin session.
    @app.route("/api/checkins/swipe", methods=["POST"], endpoint="swipe_card")
    def swipe_card():
        body = request.get_json(silent=True) or {}
        result = service.swipe(str(body.get("cardData") or ""))
        _invalidate(result.checkin)
        action = "clocked in" if result.checkin.type.value == "in" else "clocked out"
        return (
            jsonify(
                {
                    "message": f"{result.student.name} {action}",
                    "student": student_to_dict(result.student),
                    "checkIn": checkin_to_dict(result.checkin),
                }
            ),
            201,
        )
