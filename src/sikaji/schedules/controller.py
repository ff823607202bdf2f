from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import (
    capability_required,
    current_roles,
    domain_error_response,
    json_body,
    login_required,
    system_error_response,
)
from ..container import Container
from ..core.exceptions import DomainError
from ..core.permissions import Capability


def register(app: Flask, container: Container) -> None:
    @app.route("/api/schedules", methods=["GET"], endpoint="api_schedules_list")
    @login_required
    def api_schedules_list():
        try:
            schedules = container.schedule_service.list_schedules()
        except Exception:
            return system_error_response("listing schedules")
        return jsonify({"success": True, "data": [s.to_dict() for s in schedules]}), 200

    @app.route("/api/schedules", methods=["POST"], endpoint="api_schedules_create")
    @capability_required(Capability.MANAGE_SCHEDULES)
    def api_schedules_create():
        try:
            schedule_id = container.schedule_service.create(roles=current_roles(), payload=json_body())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("creating a schedule")
        return jsonify({"success": True, "message": "Jadwal berhasil ditambahkan", "schedule_id": schedule_id}), 201

    @app.route("/api/schedules/<int:schedule_id>", methods=["PUT"], endpoint="api_schedules_update")
    @capability_required(Capability.MANAGE_SCHEDULES)
    def api_schedules_update(schedule_id: int):
        try:
            schedule = container.schedule_service.update(
                roles=current_roles(), schedule_id=schedule_id, payload=json_body()
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("updating a schedule")
        return jsonify({"success": True, "message": "Jadwal berhasil diperbarui", "data": schedule.to_dict()}), 200

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="api_schedules_delete")
    @capability_required(Capability.MANAGE_SCHEDULES)
    def api_schedules_delete(schedule_id: int):
        try:
            container.schedule_service.delete(roles=current_roles(), schedule_id=schedule_id)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("deleting a schedule")
        return jsonify({"success": True, "message": "Jadwal dihapus"}), 200
