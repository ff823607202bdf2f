from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    student_id: int
    user_id: Optional[int]
    full_name: str
    nis: str
    class_id: Optional[int]
    parent_user_id: Optional[int] = None
    is_active: bool = True
