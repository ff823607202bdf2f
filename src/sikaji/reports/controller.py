from __future__ import annotations

import csv
import io
from datetime import date, timedelta
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.web import capability_required, current_roles, domain_error_response, system_error_response
from ..container import Container
from ..core.exceptions import DomainError, ValidationError
from ..core.permissions import Capability
from .service import RECAP_FIELDS, ReportData


def register(app: Flask, container: Container) -> None:
    def _parse_date(value: Optional[str], default: date) -> date:
        if not value:
            return default
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError("Tanggal harus berformat YYYY-MM-DD")

    def _build() -> tuple[ReportData, date, date]:
        today = now_local().date()
        start = _parse_date(request.args.get("start"), today - timedelta(days=30))
        end = _parse_date(request.args.get("end"), today)
        class_id_s = request.args.get("class_id")
        class_id = int(class_id_s) if class_id_s and class_id_s.isdigit() else None
        data = container.report_service.build_class_recap(
            roles=current_roles(), start=start, end=end, class_id=class_id
        )
        return data, start, end

    def _write_report_csv(*, data: ReportData, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=RECAP_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="api_reports_attendance")
    @capability_required(Capability.VIEW_ATTENDANCE_REPORTS)
    def api_reports_attendance():
        try:
            data, _, _ = _build()
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("building the attendance recap")
        return jsonify({"success": True, "rows": data.rows, "summary": data.summary}), 200

    @app.route("/api/reports/attendance.csv", methods=["GET"], endpoint="api_reports_attendance_csv")
    @capability_required(Capability.VIEW_ATTENDANCE_REPORTS)
    def api_reports_attendance_csv():
        try:
            data, start, end = _build()
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return system_error_response("exporting the attendance recap")
        return _write_report_csv(data=data, filename=f"rekap_presensi_{start:%Y%m%d}_{end:%Y%m%d}.csv")
