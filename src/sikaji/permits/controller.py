from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_iso_date
from ..common.web import (
    capability_required,
    current_roles,
    current_user_id,
    domain_error_response,
    json_body,
    login_required,
    system_error_response,
)
from ..container import Container
from ..core.exceptions import DomainError, ValidationError
from ..core.permissions import Capability
from .qr import decode_qr_image


def register(app: Flask, container: Container) -> None:
    @app.route("/api/permits", methods=["POST"], endpoint="api_permits_submit")
    @capability_required(Capability.SUBMIT_PERMIT)
    def api_permits_submit():
        data = json_body()
        try:
            permit_id = container.permit_service.submit(
                roles=current_roles(),
                user_id=current_user_id(),
                permit_type=data.get("permit_type"),
                reason=data.get("reason"),
                start_date=data.get("start_date"),
                end_date=data.get("end_date"),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("submitting a permit")
        return jsonify({"success": True, "message": "Pengajuan izin terkirim", "permit_id": permit_id}), 201

    @app.route("/api/permits/mine", methods=["GET"], endpoint="api_permits_mine")
    @login_required
    def api_permits_mine():
        try:
            permits = container.permit_service.list_mine(user_id=current_user_id())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("listing own permits")
        return jsonify({"success": True, "data": [p.to_dict() for p in permits]}), 200

    @app.route("/api/permits/pending", methods=["GET"], endpoint="api_permits_pending")
    @capability_required(Capability.DECIDE_PERMIT)
    def api_permits_pending():
        try:
            permits = container.permit_service.list_pending(roles=current_roles())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("listing pending permits")
        return jsonify({"success": True, "data": [p.to_dict() for p in permits]}), 200

    @app.route("/api/permits/<int:permit_id>/approve", methods=["POST"], endpoint="api_permits_approve")
    @capability_required(Capability.DECIDE_PERMIT)
    def api_permits_approve(permit_id: int):
        data = json_body()
        try:
            container.permit_service.approve(
                roles=current_roles(),
                reviewer_id=current_user_id(),
                permit_id=permit_id,
                review_notes=data.get("review_notes") or "",
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("approving a permit")
        return jsonify({"success": True, "message": "Izin disetujui"}), 200

    @app.route("/api/permits/<int:permit_id>/reject", methods=["POST"], endpoint="api_permits_reject")
    @capability_required(Capability.DECIDE_PERMIT)
    def api_permits_reject(permit_id: int):
        data = json_body()
        try:
            container.permit_service.reject(
                roles=current_roles(),
                reviewer_id=current_user_id(),
                permit_id=permit_id,
                review_notes=data.get("review_notes") or "",
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("rejecting a permit")
        return jsonify({"success": True, "message": "Izin ditolak"}), 200

    @app.route("/api/permits/<int:permit_id>/qr.png", methods=["GET"], endpoint="api_permits_qr")
    @login_required
    def api_permits_qr(permit_id: int):
        try:
            png = container.permit_service.qr_png(
                roles=current_roles(), user_id=current_user_id(), permit_id=permit_id
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("rendering a permit QR code")
        return send_file(
            io.BytesIO(png),
            mimetype="image/png",
            as_attachment=False,
            download_name=f"izin-{permit_id}.png",
        )

    @app.route("/api/permits/verify", methods=["POST"], endpoint="api_permits_verify")
    @capability_required(Capability.VERIFY_PERMIT)
    def api_permits_verify():
        try:
            upload = request.files.get("image")
            if upload is not None and upload.filename:
                qr_text = decode_qr_image(upload.stream)
                raw_date = request.form.get("date")
            else:
                data = json_body()
                qr_text = str(data.get("qr_text") or "")
                raw_date = data.get("date")

            if not qr_text.strip():
                raise ValidationError("Isi QR code tidak boleh kosong")
            try:
                on_date = parse_iso_date(raw_date) if raw_date else None
            except ValueError:
                raise ValidationError("Tanggal harus berformat YYYY-MM-DD")

            result = container.permit_service.verify(roles=current_roles(), qr_text=qr_text, on_date=on_date)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("verifying a permit")
        return jsonify({"success": True, "data": result.to_dict()}), 200
