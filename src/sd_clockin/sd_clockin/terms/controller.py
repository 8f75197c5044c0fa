from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import admin_required
from ..common.cache import CacheKeys, CacheTTL
from ..common.datetime_utils import parse_iso_date
from ..common.serializers import term_to_dict
from ..common.validators import parse_bool, require_fields
from ..container import Container
from .service import parse_days_off


def register(app: Flask, container: Container) -> None:
    service = container.term_service
    cache = container.cache

    @app.route("/api/terms", methods=["GET"], endpoint="list_terms")
    @admin_required
    def list_terms():
        data = cache.wrapper(
            CacheKeys.TERMS_LIST,
            CacheTTL.TERMS,
            lambda: [term_to_dict(t) for t in service.list_terms()],
        )
        return jsonify(data)

    # Public: the kiosk needs the active term.
    @app.route("/api/terms/active", methods=["GET"], endpoint="active_term")
    def active_term():
        data = cache.wrapper(
            CacheKeys.ACTIVE_TERM,
            CacheTTL.ACTIVE_TERM,
            lambda: term_to_dict(service.get_active_term()),
        )
        return jsonify(data)

    @app.route("/api/terms/<int:term_id>", methods=["GET"], endpoint="get_term")
    @admin_required
    def get_term(term_id: int):
        data = cache.wrapper(
            CacheKeys.term_detail(term_id),
            CacheTTL.TERMS,
            lambda: term_to_dict(service.get_term(term_id)),
        )
        return jsonify(data)

    @app.route("/api/terms", methods=["POST"], endpoint="create_term")
    @admin_required
    def create_term():
        body = require_fields(request.get_json(silent=True), ["name", "startDate", "endDate"])
        term = service.create_term(
            name=body["name"],
            start_date=parse_iso_date(body["startDate"]),
            end_date=parse_iso_date(body["endDate"]),
            is_active=parse_bool(body.get("isActive")),
            days_off=parse_days_off(body.get("daysOff")),
            notes=body.get("notes"),
        )
        cache.invalidate_term(term.term_id)
        return jsonify(term_to_dict(term)), 201

    @app.route("/api/terms/<int:term_id>", methods=["PUT"], endpoint="update_term")
    @admin_required
    def update_term(term_id: int):
        body = request.get_json(silent=True) or {}
        term = service.update_term(
            term_id,
            name=body.get("name"),
            start_date=parse_iso_date(body["startDate"]) if body.get("startDate") else None,
            end_date=parse_iso_date(body["endDate"]) if body.get("endDate") else None,
            is_active=parse_bool(body["isActive"]) if "isActive" in body else None,
            days_off=parse_days_off(body["daysOff"]) if "daysOff" in body else None,
            notes=body.get("notes"),
        )
        cache.invalidate_term(term_id)
        return jsonify(term_to_dict(term))

    @app.route("/api/terms/<int:term_id>", methods=["DELETE"], endpoint="delete_term")
    @admin_required
    def delete_term(term_id: int):
        service.delete_term(term_id)
        cache.invalidate_term(term_id)
        return jsonify({"message": "Term deleted successfully"})
