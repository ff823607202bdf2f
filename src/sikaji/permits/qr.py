"""QR codes for approved permits.

The payload is plain JSON so any scanner app shows something readable;
verification always goes back to the database.
"""

from __future__ import annotations

import io
import json
from datetime import datetime
from typing import IO, Any, Dict

import qrcode
from PIL import Image

from ..core.exceptions import ValidationError
from .model import Permit

REQUIRED_KEYS = ("id", "nis", "valid_from", "valid_until")


def build_qr_payload(permit: Permit, *, nis: str, verify_url: str, now: datetime) -> str:
    return json.dumps(
        {
            "id": permit.permit_id,
            "nis": nis,
            "valid_from": permit.start_date.isoformat(),
            "valid_until": permit.end_date.isoformat(),
            "verify_url": f"{verify_url.rstrip('/')}/{permit.permit_id}",
            "generated_at": now.isoformat(timespec="seconds"),
        },
        ensure_ascii=False,
    )


def parse_qr_payload(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        raise ValidationError("Isi QR code tidak dikenali")
    if not isinstance(data, dict) or any(k not in data for k in REQUIRED_KEYS):
        raise ValidationError("Isi QR code tidak dikenali")
    try:
        data["id"] = int(data["id"])
    except (TypeError, ValueError):
        raise ValidationError("Isi QR code tidak dikenali")
    return data


def render_qr_png(text: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=2,
    )
    qr.add_data(text)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_qr_image(stream: IO[bytes]) -> str:
    """Return the text of the first QR code found in an uploaded image."""

    # needs the system zbar library, so only load it when an image is scanned
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except (OSError, ValueError):
        raise ValidationError("File bukan gambar yang valid")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("QR code tidak ditemukan pada gambar")
    return decoded[0].data.decode("utf-8")
