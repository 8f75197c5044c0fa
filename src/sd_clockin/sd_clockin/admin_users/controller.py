from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guards import admin_required
from ..common.serializers import admin_user_to_dict
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.admin_user_service

    @app.route("/api/admin-users", methods=["GET"], endpoint="list_admin_users")
    @admin_required
    def list_admin_users():
        return jsonify([admin_user_to_dict(a) for a in service.list_admins()])

    @app.route("/api/admin-users", methods=["POST"], endpoint="create_admin_user")
    @admin_required
    def create_admin_user():
        body = request.get_json(silent=True) or {}
        admin = service.create_admin(email=body.get("email"), name=body.get("name"), is_active=body.get("isActive"))
        return jsonify(admin_user_to_dict(admin)), 201

    @app.route("/api/admin-users/<int:admin_user_id>", methods=["PUT"], endpoint="update_admin_user")
    @admin_required
    def update_admin_user(admin_user_id: int):
        body = request.get_json(silent=True) or {}
        admin = service.update_admin(
            admin_user_id, email=body.get("email"), name=body.get("name"), is_active=body.get("isActive")
        )
        return jsonify(admin_user_to_dict(admin))

    @app.route("/api/admin-users/<int:admin_user_id>", methods=["DELETE"], endpoint="delete_admin_user")
    @admin_required
    def delete_admin_user(admin_user_id: int):
        service.delete_admin(admin_user_id)
        return jsonify({"message": "Admin user deleted successfully"})

    @app.route("/api/admin-users/authorize", methods=["POST"], endpoint="authorize_admin_user")
    @admin_required
    def authorize_admin_user():
        body = request.get_json(silent=True) or {}
        admin = service.authorize(email=body.get("email"), name=body.get("name"))
        return jsonify({"allowed": True, "adminUser": admin_user_to_dict(admin)})
