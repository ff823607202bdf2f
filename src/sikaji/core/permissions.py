"""Role -> capability mapping.

Controllers and services never compare role strings directly; they ask
``can(roles, Capability.X)``.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from .enums import Role


class Capability(str, Enum):
    SELF_ATTENDANCE = "self_attendance"
    MANAGE_LOCATIONS = "manage_locations"
    MANAGE_SCHEDULES = "manage_schedules"
    RUN_ABSENCE_DETECTION = "run_absence_detection"
    VIEW_ATTENDANCE_REPORTS = "view_attendance_reports"
    SUBMIT_PERMIT = "submit_permit"
    DECIDE_PERMIT = "decide_permit"
    VERIFY_PERMIT = "verify_permit"
    VIEW_ALL_DISCIPLINE = "view_all_discipline"
    VIEW_CHILD_DISCIPLINE = "view_child_discipline"


_STUDENT_AFFAIRS = frozenset(
    {
        Role.ADMIN,
        Role.PRINCIPAL,
        Role.VICE_PRINCIPAL,
        Role.STUDENT_AFFAIRS_ADMIN,
    }
)

_CAPABILITIES: dict[Capability, frozenset[Role]] = {
    Capability.SELF_ATTENDANCE: frozenset({Role.STUDENT}),
    Capability.MANAGE_LOCATIONS: frozenset({Role.ADMIN, Role.STUDENT_AFFAIRS_ADMIN}),
    Capability.MANAGE_SCHEDULES: frozenset({Role.ADMIN, Role.STUDENT_AFFAIRS_ADMIN}),
    Capability.RUN_ABSENCE_DETECTION: frozenset({Role.ADMIN, Role.STUDENT_AFFAIRS_ADMIN}),
    Capability.VIEW_ATTENDANCE_REPORTS: _STUDENT_AFFAIRS
    | {Role.HOMEROOM_TEACHER, Role.COUNSELOR, Role.DISCIPLINE_TEAM},
    Capability.SUBMIT_PERMIT: frozenset({Role.STUDENT}),
    Capability.DECIDE_PERMIT: _STUDENT_AFFAIRS | {Role.HOMEROOM_TEACHER},
    Capability.VERIFY_PERMIT: _STUDENT_AFFAIRS
    | {Role.HOMEROOM_TEACHER, Role.TEACHER, Role.DISCIPLINE_TEAM, Role.EXTRACURRICULAR_COACH},
    Capability.VIEW_ALL_DISCIPLINE: _STUDENT_AFFAIRS
    | {Role.HOMEROOM_TEACHER, Role.COUNSELOR, Role.DISCIPLINE_TEAM},
    Capability.VIEW_CHILD_DISCIPLINE: frozenset({Role.PARENT}),
}


def can(roles: Iterable[Role], capability: Capability) -> bool:
    allowed = _CAPABILITIES.get(capability, frozenset())
    return any(role in allowed for role in roles)


def parse_roles(values: Iterable[str]) -> list[Role]:
    """Convert stored role strings into Role members, dropping unknown ones."""

    roles: list[Role] = []
    for value in values:
        try:
            roles.append(Role(value))
        except ValueError:
            continue
    return roles
