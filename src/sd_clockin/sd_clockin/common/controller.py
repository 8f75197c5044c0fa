from __future__ import annotations

from flask import Flask, jsonify

from ..auth.guards import admin_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/", methods=["GET"], endpoint="index")
    def index():
        return jsonify({"message": "hello service desk"})

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "message": "Server is running"})

    @app.route("/api/cache/flush", methods=["POST"], endpoint="flush_cache")
    @admin_required
    def flush_cache():
        if not container.cache.flush_all():
            return jsonify({"success": False, "message": "Cache is not available"}), 503
        return jsonify({"success": True, "message": "Cache flushed successfully"})
