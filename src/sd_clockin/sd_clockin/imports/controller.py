from __future__ import annotations

from dataclasses import asdict

from flask import Flask, jsonify, request

from ..auth.guards import admin_required
from ..common.validators import parse_id, require_fields
from ..container import Container
from .csv_importer import MatchedSchedule


def _matched_to_dict(m: MatchedSchedule) -> dict:
    d = asdict(m)
    return {
        "studentId": d["student_id"],
        "studentName": d["student_name"],
        "csvName": d["csv_name"],
        "availability": d["availability"],
        "matched": d["matched"],
    }


def register(app: Flask, container: Container) -> None:
    service = container.import_service
    cache = container.cache

    @app.route("/api/import/preview", methods=["POST"], endpoint="import_preview")
    @admin_required
    def import_preview():
        body = request.get_json(silent=True) or {}
        preview = service.preview(body.get("csvContent") or "")
        return jsonify(
            {
                "success": True,
                "summary": {
                    "totalRows": preview.total_rows,
                    "matched": len(preview.matched),
                    "willCreate": len(preview.to_create),
                },
                "matchedStudents": [_matched_to_dict(m) for m in preview.matched],
                "studentsToCreate": [_matched_to_dict(m) for m in preview.to_create],
            }
        )

    @app.route("/api/import/schedules", methods=["POST"], endpoint="import_schedules")
    @admin_required
    def import_schedules():
        body = require_fields(request.get_json(silent=True), ["csvContent", "termId"])
        term_id = parse_id(body["termId"], "termId")
        result = service.import_schedules(body["csvContent"], term_id)

        cache.delete_pattern("students:list*")
        cache.invalidate_term(term_id)
        return (
            jsonify(
                {
                    "success": True,
                    "message": result.message,
                    "summary": {
                        "totalProcessed": result.total_processed,
                        "saved": len(result.saved),
                        "matched": result.matched_count,
                        "created": len(result.created),
                        "errors": len(result.errors),
                    },
                    "savedSchedules": result.saved,
                    "createdStudents": result.created,
                    "errors": result.errors,
                }
            ),
            201,
        )
