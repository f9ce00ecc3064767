"""Profile directory lookups."""

from __future__ import annotations

import uuid

import pytest

from leavedesk.common.constants import UserRole
from leavedesk.common.exceptions import NotFoundException
from leavedesk.profiles.directory import ProfileDirectory
from leavedesk.profiles.models import Profile


def _p(name, role=UserRole.employee, department=None, manager_id=None):
    return Profile(
        id=uuid.uuid4(),
        email=f"{name.lower()}@example.com",
        full_name=name,
        role=role,
        department=department,
        manager_id=manager_id,
    )


@pytest.fixture
def people():
    maya = _p("Maya", UserRole.manager, "Engineering")
    omar = _p("Omar", UserRole.manager, "Sales")
    alice = _p("Alice", department="Engineering", manager_id=maya.id)
    bob = _p("Bob", department="Engineering", manager_id=maya.id)
    hana = _p("Hana", UserRole.hr, "People")
    return {"maya": maya, "omar": omar, "alice": alice, "bob": bob, "hana": hana}


def test_require_unknown_raises(people):
    directory = ProfileDirectory(people.values())
    with pytest.raises(NotFoundException):
        directory.require(uuid.uuid4())


def test_department_lookup(people):
    directory = ProfileDirectory(people.values())
    assert directory.department_of(people["alice"].id) == "Engineering"
    assert directory.department_of(uuid.uuid4()) is None


def test_direct_reports_sorted_by_name(people):
    directory = ProfileDirectory(people.values())
    reports = directory.direct_reports(people["maya"].id)
    assert [p.full_name for p in reports] == ["Alice", "Bob"]


def test_partition_by_role_covers_every_role(people):
    groups = ProfileDirectory(people.values()).partition_by_role()
    assert set(groups) == set(UserRole)
    assert len(groups[UserRole.employee]) == 2
    assert len(groups[UserRole.manager]) == 2
    assert groups[UserRole.admin] == []


def test_departments_distinct_sorted(people):
    assert ProfileDirectory(people.values()).departments() == ["Engineering", "People", "Sales"]


def test_managers_excludes_self(people):
    directory = ProfileDirectory(people.values())
    names = [p.full_name for p in directory.managers(exclude_id=people["maya"].id)]
    assert names == ["Omar"]
