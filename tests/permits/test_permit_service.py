import io
import json
from datetime import date, datetime

import pytest

from sikaji.core.enums import PermitStatus, Role
from sikaji.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from sikaji.permits.qr import build_qr_payload, decode_qr_image, parse_qr_payload

NOW = datetime(2026, 2, 2, 9, 0, 0)
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _submit(container, **overrides):
    fields = dict(
        roles=[Role.STUDENT],
        user_id=100,
        permit_type="kegiatan_setelah_jam_sekolah",
        reason="Latihan paduan suara",
        start_date="2026-02-02",
        end_date="2026-02-04",
    )
    fields.update(overrides)
    return container.permit_service.submit(**fields)


def _approved(container):
    permit_id = _submit(container)
    container.permit_service.approve(roles=[Role.HOMEROOM_TEACHER], reviewer_id=2, permit_id=permit_id, now=NOW)
    return permit_id


def test_student_submits_pending_permit(container, repos):
    permit_id = _submit(container)

    permit = repos.permits.get_by_id(permit_id)
    assert permit.status == PermitStatus.PENDING
    assert permit.student_id == 10
    assert permit.start_date == date(2026, 2, 2)
    assert [p.permit_id for p in container.permit_service.list_mine(user_id=100)] == [permit_id]


@pytest.mark.parametrize(
    "overrides",
    [
        {"permit_type": "liburan"},
        {"reason": "   "},
        {"start_date": "02/02/2026"},
        {"start_date": "2026-02-05", "end_date": "2026-02-04"},
    ],
)
def test_invalid_submissions(container, overrides):
    with pytest.raises(ValidationError):
        _submit(container, **overrides)


def test_only_students_submit(container):
    with pytest.raises(AuthorizationError):
        _submit(container, roles=[Role.PARENT], user_id=200)


def test_homeroom_teacher_approves(container, repos):
    permit_id = _approved(container)

    permit = repos.permits.get_by_id(permit_id)
    assert permit.status == PermitStatus.APPROVED
    assert permit.reviewed_by == 2
    assert permit.reviewed_at == NOW
    assert repos.permits.has_approved_permit(10, date(2026, 2, 3)) is True
    assert repos.permits.has_approved_permit(10, date(2026, 2, 5)) is False


def test_decided_permit_cannot_be_decided_again(container):
    permit_id = _approved(container)

    with pytest.raises(ValidationError) as exc:
        container.permit_service.reject(
            roles=[Role.ADMIN], reviewer_id=1, permit_id=permit_id, review_notes="Tidak ada surat"
        )
    assert str(exc.value) == "Izin ini sudah diproses"


def test_reject_needs_a_reason(container):
    permit_id = _submit(container)

    with pytest.raises(ValidationError):
        container.permit_service.reject(roles=[Role.ADMIN], reviewer_id=1, permit_id=permit_id)


def test_plain_teacher_cannot_review(container):
    permit_id = _submit(container)

    with pytest.raises(AuthorizationError):
        container.permit_service.approve(roles=[Role.TEACHER], reviewer_id=2, permit_id=permit_id)
    with pytest.raises(AuthorizationError):
        container.permit_service.list_pending(roles=[Role.TEACHER])


def test_unknown_permit(container):
    with pytest.raises(NotFoundError):
        container.permit_service.approve(roles=[Role.ADMIN], reviewer_id=1, permit_id=99)


def test_qr_only_for_approved_permits(container):
    permit_id = _submit(container)

    with pytest.raises(ValidationError):
        container.permit_service.qr_png(roles=[Role.STUDENT], user_id=100, permit_id=permit_id)


def test_owner_downloads_qr_png(container):
    permit_id = _approved(container)

    png = container.permit_service.qr_png(roles=[Role.STUDENT], user_id=100, permit_id=permit_id, now=NOW)

    assert png.startswith(PNG_MAGIC)


def test_other_users_cannot_download_qr(container):
    permit_id = _approved(container)

    with pytest.raises(AuthorizationError):
        container.permit_service.qr_png(roles=[Role.PARENT], user_id=200, permit_id=permit_id)


def _qr_text(container, repos, permit_id, nis="2024001"):
    permit = repos.permits.get_by_id(permit_id)
    return build_qr_payload(permit, nis=nis, verify_url="http://testserver/permits/verify", now=NOW)


def test_qr_payload_shape(container, repos):
    permit_id = _approved(container)

    data = json.loads(_qr_text(container, repos, permit_id))

    assert data["id"] == permit_id
    assert data["valid_from"] == "2026-02-02"
    assert data["valid_until"] == "2026-02-04"
    assert data["verify_url"] == f"http://testserver/permits/verify/{permit_id}"


def test_verify_valid_permit(container, repos):
    permit_id = _approved(container)

    result = container.permit_service.verify(
        roles=[Role.TEACHER], qr_text=_qr_text(container, repos, permit_id), on_date=date(2026, 2, 3)
    )

    assert result.is_valid is True
    assert result.student_name == "Andi Pratama"


def test_verify_outside_validity_window(container, repos):
    permit_id = _approved(container)

    result = container.permit_service.verify(
        roles=[Role.TEACHER], qr_text=_qr_text(container, repos, permit_id), on_date=date(2026, 2, 10)
    )

    assert result.is_valid is False
    assert result.message == "Izin tidak berlaku pada tanggal ini"


def test_verify_rejects_tampered_nis(container, repos):
    permit_id = _approved(container)

    result = container.permit_service.verify(
        roles=[Role.TEACHER], qr_text=_qr_text(container, repos, permit_id, nis="9999999"), on_date=date(2026, 2, 3)
    )

    assert result.is_valid is False


def test_verify_pending_permit(container, repos):
    permit_id = _submit(container)

    result = container.permit_service.verify(
        roles=[Role.TEACHER], qr_text=_qr_text(container, repos, permit_id), on_date=date(2026, 2, 3)
    )

    assert result.is_valid is False
    assert result.message == "Izin belum disetujui"


def test_verify_unknown_permit(container):
    text = json.dumps({"id": 42, "nis": "2024001", "valid_from": "2026-02-02", "valid_until": "2026-02-02"})

    result = container.permit_service.verify(roles=[Role.ADMIN], qr_text=text)

    assert result.is_valid is False
    assert result.permit_id == 42


@pytest.mark.parametrize("text", ["hello", "[]", '{"id": "x", "nis": 1, "valid_from": 1, "valid_until": 1}', '{"id": 1}'])
def test_unreadable_qr_text(text):
    with pytest.raises(ValidationError):
        parse_qr_payload(text)


def test_students_cannot_verify(container, repos):
    permit_id = _approved(container)

    with pytest.raises(AuthorizationError):
        container.permit_service.verify(roles=[Role.STUDENT], qr_text=_qr_text(container, repos, permit_id))


def test_scanned_png_decodes_back_to_payload(container, repos):
    pytest.importorskip("pyzbar.pyzbar")
    permit_id = _approved(container)
    png = container.permit_service.qr_png(roles=[Role.STUDENT], user_id=100, permit_id=permit_id, now=NOW)

    assert parse_qr_payload(decode_qr_image(io.BytesIO(png)))["id"] == permit_id
