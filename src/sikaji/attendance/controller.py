from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.web import (
    capability_required,
    current_roles,
    current_user_id,
    domain_error_response,
    json_body,
    system_error_response,
)
from ..container import Container
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..core.permissions import Capability
from .fingerprint import DeviceInfo
from .positioning import position_sample_from_payload
from .security import AttemptTracker, LocationHistory

HISTORY_SESSION_KEY = "location_history"
ATTEMPTS_SESSION_KEY = "attendance_attempts"


def register(app: Flask, container: Container) -> None:
    def _current_student():
        student = container.students_repo.get_by_user_id(current_user_id())
        if student is None or not student.is_active:
            raise NotFoundError("Data siswa untuk akun ini tidak ditemukan")
        return student

    def _load_history() -> LocationHistory:
        return LocationHistory.from_list(session.get(HISTORY_SESSION_KEY) or [])

    def _save_history(history: LocationHistory) -> None:
        session[HISTORY_SESSION_KEY] = history.to_list()

    def _load_attempts() -> AttemptTracker:
        return AttemptTracker.from_dict(session.get(ATTEMPTS_SESSION_KEY))

    def _save_attempts(attempts: AttemptTracker) -> None:
        session[ATTEMPTS_SESSION_KEY] = attempts.to_dict()

    @app.route("/api/self-attendance/today", methods=["GET"], endpoint="api_self_attendance_today")
    @capability_required(Capability.SELF_ATTENDANCE)
    def api_self_attendance_today():
        try:
            state = container.self_attendance_service.get_today_state(_current_student())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("loading today's attendance")
        return jsonify({"success": True, "data": state.to_dict()}), 200

    @app.route("/api/self-attendance/check-in", methods=["POST"], endpoint="api_self_attendance_check_in")
    @capability_required(Capability.SELF_ATTENDANCE)
    def api_self_attendance_check_in():
        data = json_body()
        now = now_local()
        history = _load_history()
        attempts = _load_attempts()
        try:
            attempts.register(now)
            student = _current_student()
            sample = position_sample_from_payload(data, received_at=now)
            device = DeviceInfo.from_request(
                data.get("device") or {}, user_agent=request.headers.get("User-Agent", "")
            )
            result = container.self_attendance_service.check_in(student, sample, history, device, now=now)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("checking in")
        finally:
            _save_history(history)
            _save_attempts(attempts)

        message = (
            f"Check in berhasil di {result.location.name}"
            if not result.violation_created
            else f"Check in berhasil (terlambat). {result.notes}"
        )
        return jsonify({"success": True, "message": message, "data": result.to_dict()}), 200

    @app.route("/api/self-attendance/check-out", methods=["POST"], endpoint="api_self_attendance_check_out")
    @capability_required(Capability.SELF_ATTENDANCE)
    def api_self_attendance_check_out():
        data = json_body()
        now = now_local()
        history = _load_history()
        attempts = _load_attempts()
        try:
            attempts.register(now)
            student = _current_student()
            sample = position_sample_from_payload(data, received_at=now)
            result = container.self_attendance_service.check_out(student, sample, history, now=now)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("checking out")
        finally:
            _save_history(history)
            _save_attempts(attempts)

        return jsonify({"success": True, "message": "Check out berhasil dicatat", "data": result.to_dict()}), 200

    @app.route("/api/attendance/absence-detection", methods=["POST"], endpoint="api_absence_detection")
    @capability_required(Capability.RUN_ABSENCE_DETECTION)
    def api_absence_detection():
        data = json_body()
        try:
            raw_date = data.get("date")
            try:
                target_date = parse_iso_date(raw_date) if raw_date else now_local().date()
            except ValueError:
                raise ValidationError("Tanggal harus berformat YYYY-MM-DD")

            raw_class = data.get("class_id")
            try:
                class_id = int(raw_class) if raw_class not in (None, "") else None
            except (TypeError, ValueError):
                raise ValidationError("Kelas tidak valid")

            summary = container.absence_service.run(roles=current_roles(), target_date=target_date, class_id=class_id)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("running absence detection")
        return jsonify({"success": True, "data": summary.to_dict()}), 200
