from __future__ import annotations

from datetime import datetime

from ...core.constants import LATE_CHECKOUT_CUTOFF
from ...core.enums import AttendanceStatus
from .base import StatusDecision
from .normal_strategy import NormalStrategy

_CUTOFF = LATE_CHECKOUT_CUTOFF.strftime("%H:%M")


class LateDepartureStrategy(NormalStrategy):
    """Check-out after the fixed cutoff with no approved permit for today.

    The check-out still goes through; only a note and a warning are added.
    """

    def decide_checkout(self, *, now: datetime, current: AttendanceStatus) -> StatusDecision:
        at = now.strftime("%H:%M:%S")
        return StatusDecision(
            status=current,
            note=f"Pulang setelah jam {_CUTOFF} tanpa izin (pulang jam {at})",
            warning=f"Anda pulang setelah jam {_CUTOFF} tanpa izin yang disetujui",
        )
