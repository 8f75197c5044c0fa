from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import admin_required
from ..common.cache import CacheKeys, CacheTTL
from ..common.serializers import student_term_view_to_dict, student_to_dict
from ..common.validators import parse_bool, parse_optional_id, require_fields
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.student_service
    cache = container.cache

    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @admin_required
    def list_students():
        term_id = parse_optional_id(request.args.get("termId"), "termId")
        if term_id is None:
            data = cache.wrapper(
                CacheKeys.STUDENT_LIST,
                CacheTTL.STUDENT_LIST,
                lambda: [student_to_dict(s) for s in service.list_students()],
            )
        else:
            # Live status changes with every swipe; keep this one short.
            data = cache.wrapper(
                CacheKeys.student_list_for_term(term_id),
                CacheTTL.CHECKINS,
                lambda: [student_term_view_to_dict(v) for v in service.list_students_for_term(term_id)],
            )
        return jsonify(data)

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="get_student")
    @admin_required
    def get_student(student_id: int):
        data = cache.wrapper(
            CacheKeys.student_detail(student_id),
            CacheTTL.STUDENT_DETAIL,
            lambda: student_to_dict(service.get_student(student_id)),
        )
        return jsonify(data)

    @app.route("/api/students", methods=["POST"], endpoint="create_student")
    @admin_required
    def create_student():
        body = require_fields(request.get_json(silent=True), ["name", "cardId", "role"])
        student = service.create_student(name=body["name"], card_id=str(body["cardId"]), role=body["role"])
        cache.delete_pattern("students:list*")
        return jsonify(student_to_dict(student)), 201

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="update_student")
    @admin_required
    def update_student(student_id: int):
        body = request.get_json(silent=True) or {}
        student = service.update_student(
            student_id,
            name=body.get("name"),
            card_id=str(body["cardId"]).strip() if body.get("cardId") else None,
            role=body.get("role"),
            is_active=parse_bool(body["isActive"]) if "isActive" in body else None,
        )
        cache.invalidate_student(student_id)
        return jsonify(student_to_dict(student))

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="delete_student")
    @admin_required
    def delete_student(student_id: int):
        service.delete_student(student_id)
        cache.invalidate_student(student_id)
        return jsonify({"message": "Student deleted successfully"})
