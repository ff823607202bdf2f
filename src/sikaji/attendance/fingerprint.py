from __future__ import annotations

import base64
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Union

UNKNOWN = "unknown"


@dataclass(frozen=True)
class DeviceInfo:
    """Browser traits posted with a check-in. All fields are optional hints."""

    user_agent: str = ""
    language: str = ""
    platform: str = ""
    screen: str = ""
    timezone: str = ""
    canvas_data: str = ""
    memory: Optional[Union[int, float, str]] = None
    cores: Optional[Union[int, str]] = None

    @classmethod
    def from_request(cls, data: Mapping[str, Any], *, user_agent: str = "") -> "DeviceInfo":
        data = data or {}
        return cls(
            user_agent=str(data.get("user_agent") or user_agent or ""),
            language=str(data.get("language") or ""),
            platform=str(data.get("platform") or ""),
            screen=str(data.get("screen") or ""),
            timezone=str(data.get("timezone") or ""),
            canvas_data=str(data.get("canvas") or ""),
            memory=data.get("memory"),
            cores=data.get("cores"),
        )


def generate_device_fingerprint(info: DeviceInfo, now: datetime) -> str:
    payload = {
        "userAgent": info.user_agent,
        "language": info.language,
        "platform": info.platform,
        "screen": info.screen,
        "timezone": info.timezone,
        "canvas": hashlib.sha256(info.canvas_data.encode("utf-8")).hexdigest(),
        "memory": info.memory if info.memory not in (None, "") else UNKNOWN,
        "cores": info.cores if info.cores not in (None, "") else UNKNOWN,
        "timestamp": int(now.timestamp() * 1000),
    }
    raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_device_fingerprint(blob: str) -> dict:
    return json.loads(base64.b64decode(blob.encode("ascii")).decode("utf-8"))
