from __future__ import annotations

from flask import Flask, jsonify, request

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
    @app.route("/api/locations", methods=["GET"], endpoint="api_locations_list")
    @login_required
    def api_locations_list():
        active_only = request.args.get("active") in {"1", "true", "yes"}
        try:
            locations = container.location_service.list_locations(active_only=active_only)
        except Exception:
            return system_error_response("listing locations")
        return jsonify({"success": True, "data": [loc.to_dict() for loc in locations]}), 200

    @app.route("/api/locations", methods=["POST"], endpoint="api_locations_create")
    @capability_required(Capability.MANAGE_LOCATIONS)
    def api_locations_create():
        data = json_body()
        try:
            location_id = container.location_service.create(
                roles=current_roles(),
                name=data.get("name"),
                latitude=data.get("latitude"),
                longitude=data.get("longitude"),
                radius_meters=data.get("radius_meters"),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("creating a location")
        return jsonify({"success": True, "message": "Lokasi berhasil ditambahkan", "location_id": location_id}), 201

    @app.route("/api/locations/<int:location_id>", methods=["PUT"], endpoint="api_locations_update")
    @capability_required(Capability.MANAGE_LOCATIONS)
    def api_locations_update(location_id: int):
        data = json_body()
        try:
            location = container.location_service.update(
                roles=current_roles(),
                location_id=location_id,
                name=data.get("name"),
                latitude=data.get("latitude"),
                longitude=data.get("longitude"),
                radius_meters=data.get("radius_meters"),
                is_active=data.get("is_active"),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("updating a location")
        return jsonify({"success": True, "message": "Lokasi berhasil diperbarui", "data": location.to_dict()}), 200

    @app.route("/api/locations/<int:location_id>", methods=["DELETE"], endpoint="api_locations_deactivate")
    @capability_required(Capability.MANAGE_LOCATIONS)
    def api_locations_deactivate(location_id: int):
        try:
            container.location_service.deactivate(roles=current_roles(), location_id=location_id)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("deactivating a location")
        return jsonify({"success": True, "message": "Lokasi dinonaktifkan"}), 200
