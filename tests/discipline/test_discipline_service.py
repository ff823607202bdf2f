from datetime import date, datetime, time

import pytest

from sikaji.core.enums import DisciplineStatus, Role
from sikaji.core.exceptions import AuthorizationError, NotFoundError
from sikaji.discipline.service import classify_score


@pytest.mark.parametrize(
    "score,status",
    [
        (110, DisciplineStatus.EXCELLENT),
        (90, DisciplineStatus.EXCELLENT),
        (89, DisciplineStatus.GOOD),
        (75, DisciplineStatus.GOOD),
        (60, DisciplineStatus.WARNING),
        (40, DisciplineStatus.PROBATION),
        (39, DisciplineStatus.CRITICAL),
    ],
)
def test_classify_score(score, status):
    assert classify_score(score) == status


def test_summary_combines_violations_and_achievements(container, repos):
    svc = container.discipline_service
    for day in (2, 3, 4):
        svc.record_late_arrival(student_id=10, at=datetime(2026, 2, day, 7, 45), check_in_end=time(7, 30))
    repos.discipline.achievements.append((10, 10, "verified"))
    repos.discipline.achievements.append((10, 50, "pending"))

    summary = svc.summary(10)

    assert summary.total_violation_points == 15
    assert summary.total_achievement_points == 10
    assert summary.final_score == 95
    assert summary.discipline_status == DisciplineStatus.EXCELLENT


def test_late_arrival_description(container, repos):
    container.discipline_service.record_late_arrival(
        student_id=10, at=datetime(2026, 2, 2, 7, 45, 10), check_in_end=time(7, 30)
    )

    [v] = repos.discipline.violations
    assert v.violation_date == date(2026, 2, 2)
    assert "07:45:10" in v.description
    assert "07:30:00" in v.description


@pytest.mark.parametrize(
    "roles,user_id",
    [([Role.STUDENT], 100), ([Role.PARENT], 200), ([Role.HOMEROOM_TEACHER], 2)],
)
def test_who_may_view_a_student(container, roles, user_id):
    summary, violations = container.discipline_service.summary_for_viewer(roles=roles, user_id=user_id, student_id=10)

    assert summary.final_score == 100
    assert list(violations) == []


@pytest.mark.parametrize("roles,user_id", [([Role.STUDENT], 101), ([Role.PARENT], 201), ([Role.TEACHER], 2)])
def test_others_are_refused(container, roles, user_id):
    with pytest.raises(AuthorizationError):
        container.discipline_service.summary_for_viewer(roles=roles, user_id=user_id, student_id=10)


def test_unknown_student(container):
    with pytest.raises(NotFoundError):
        container.discipline_service.summary_for_viewer(roles=[Role.ADMIN], user_id=1, student_id=404)


def test_late_arrival_is_recorded_once_per_day(container, repos):
    svc = container.discipline_service
    first = svc.record_late_arrival(student_id=10, at=datetime(2026, 2, 2, 7, 45), check_in_end=time(7, 30))
    again = svc.record_late_arrival(student_id=10, at=datetime(2026, 2, 2, 8, 5), check_in_end=time(7, 30))

    assert again == first
    assert len(repos.discipline.violations) == 1
    assert svc.summary(10).final_score == 95
