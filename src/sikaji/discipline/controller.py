from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_roles, current_user_id, domain_error_response, login_required, system_error_response
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/discipline/students/<int:student_id>", methods=["GET"], endpoint="api_discipline_student")
    @login_required
    def api_discipline_student(student_id: int):
        try:
            summary, violations = container.discipline_service.summary_for_viewer(
                roles=current_roles(), user_id=current_user_id(), student_id=student_id
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("loading a discipline summary")
        return jsonify(
            {
                "success": True,
                "data": {
                    "summary": summary.to_dict(),
                    "recent_violations": [v.to_dict() for v in violations],
                },
            }
        ), 200
