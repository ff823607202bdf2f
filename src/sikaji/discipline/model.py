from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import DisciplineStatus


@dataclass(frozen=True)
class Violation:
    violation_id: int
    student_id: int
    violation_type: str
    violation_date: date
    point_deduction: int
    status: str = "active"
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "violation_id": self.violation_id,
            "violation_type": self.violation_type,
            "violation_date": self.violation_date.isoformat(),
            "point_deduction": self.point_deduction,
            "status": self.status,
            "description": self.description,
        }


@dataclass(frozen=True)
class PointTotals:
    violation_points: int = 0
    violation_count: int = 0
    achievement_points: int = 0
    achievement_count: int = 0


@dataclass(frozen=True)
class DisciplineSummary:
    student_id: int
    total_violation_points: int
    total_achievement_points: int
    violation_count: int
    achievement_count: int
    final_score: int
    discipline_status: DisciplineStatus

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "total_violation_points": self.total_violation_points,
            "total_achievement_points": self.total_achievement_points,
            "violation_count": self.violation_count,
            "achievement_count": self.achievement_count,
            "final_score": self.final_score,
            "discipline_status": self.discipline_status.value,
        }
