import pytest

from sikaji.core.enums import Role
from sikaji.core.permissions import Capability, can, parse_roles


@pytest.mark.parametrize(
    "roles,capability,expected",
    [
        ([Role.STUDENT], Capability.SELF_ATTENDANCE, True),
        ([Role.PARENT], Capability.SELF_ATTENDANCE, False),
        ([Role.TEACHER, Role.HOMEROOM_TEACHER], Capability.DECIDE_PERMIT, True),
        ([Role.TEACHER], Capability.DECIDE_PERMIT, False),
        ([Role.TEACHER], Capability.VERIFY_PERMIT, True),
        ([Role.STUDENT_AFFAIRS_ADMIN], Capability.MANAGE_LOCATIONS, True),
        ([Role.PRINCIPAL], Capability.MANAGE_SCHEDULES, False),
        ([Role.COUNSELOR], Capability.VIEW_ATTENDANCE_REPORTS, True),
        ([], Capability.VIEW_ATTENDANCE_REPORTS, False),
    ],
)
def test_capabilities(roles, capability, expected):
    assert can(roles, capability) is expected


def test_parse_roles_drops_unknown_values():
    assert parse_roles(["siswa", "superuser", "orang_tua"]) == [Role.STUDENT, Role.PARENT]
