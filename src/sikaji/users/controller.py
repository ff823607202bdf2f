from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, session

from ..common.web import domain_error_response, json_body, login_required, system_error_response
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_auth_login")
    def api_auth_login():
        data = json_body()
        try:
            s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("logging in")

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["roles"] = [r.value for r in s_user.roles]

        return jsonify({"success": True, "message": "Login berhasil", "user": s_user.to_dict()}), 200

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_auth_logout")
    def api_auth_logout():
        session.clear()
        return jsonify({"success": True, "message": "Anda telah keluar"}), 200

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_auth_me")
    @login_required
    def api_auth_me():
        return jsonify(
            {
                "success": True,
                "user": {
                    "user_id": int(session["user_id"]),
                    "full_name": session.get("name"),
                    "roles": list(session.get("roles") or []),
                },
            }
        ), 200
