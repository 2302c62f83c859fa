# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for branch-scoped authorization."""

import pytest
from sqlalchemy import select

from src.domains.access.scope import (
    BranchScope,
    assert_branch_access,
    assert_can_write,
    assert_superadmin,
    resolve_branch_for_write,
    resolve_pair_branch,
    resolve_scope,
)
from src.domains.auth import AuthUser
from src.domains.errors import (
    BranchAccessForbiddenError,
    CrossBranchPairError,
    NoBranchAssignedError,
    RoleForbiddenError,
    UnassignedBranchError,
)
from src.infrastructure.database.models import Course, Enrollment, Student
from src.models.common import UserRole


@pytest.fixture
def superadmin() -> AuthUser:
    return AuthUser(id=1, role=UserRole.SUPERADMIN)


@pytest.fixture
def admin() -> AuthUser:
    return AuthUser(id=2, role=UserRole.ADMIN, branch_id=10)


@pytest.fixture
def reader() -> AuthUser:
    return AuthUser(id=3, role=UserRole.USER, branch_id=10)


@pytest.fixture
def admin_without_branch() -> AuthUser:
    return AuthUser(id=4, role=UserRole.ADMIN, branch_id=None)


def student_in(branch_id: int | None) -> Student:
    return Student(name="Sam", email="sam@example.com", branch_id=branch_id)


def course_in(branch_id: int | None) -> Course:
    return Course(title="Algebra", capacity=5, seats_available=5, branch_id=branch_id)


@pytest.mark.unit
class TestResolveScope:
    """Tests for list query scoping."""

    def test_superadmin_is_unscoped(self, superadmin: AuthUser) -> None:
        scope = resolve_scope(superadmin)

        assert scope.is_unscoped
        query = select(Enrollment)
        assert scope.apply(query, Enrollment.branch_id) is query

    def test_scoped_user_filters_on_branch(self, reader: AuthUser) -> None:
        """Test that a branch user gets a WHERE clause on their branch."""
        scope = resolve_scope(reader)

        assert scope == BranchScope(branch_id=10)
        query = scope.apply(select(Enrollment), Enrollment.branch_id)
        assert "branch_id" in str(query.whereclause)

    def test_user_without_branch_is_rejected(self, admin_without_branch: AuthUser) -> None:
        with pytest.raises(NoBranchAssignedError):
            resolve_scope(admin_without_branch)


@pytest.mark.unit
class TestBranchAccess:
    """Tests for single-record access checks."""

    def test_superadmin_accesses_any_branch(self, superadmin: AuthUser) -> None:
        assert_branch_access(superadmin, 99)
        assert_branch_access(superadmin, None)

    def test_same_branch_allowed(self, admin: AuthUser, reader: AuthUser) -> None:
        assert_branch_access(admin, 10)
        assert_branch_access(reader, 10)

    def test_other_branch_forbidden(self, admin: AuthUser) -> None:
        with pytest.raises(BranchAccessForbiddenError):
            assert_branch_access(admin, 11)

    def test_unowned_record_forbidden_for_scoped_user(self, admin: AuthUser) -> None:
        with pytest.raises(BranchAccessForbiddenError):
            assert_branch_access(admin, None)

    def test_missing_branch_reported_before_mismatch(
        self,
        admin_without_branch: AuthUser,
    ) -> None:
        with pytest.raises(NoBranchAssignedError):
            assert_branch_access(admin_without_branch, 10)


@pytest.mark.unit
class TestRoleChecks:
    """Tests for role gates."""

    def test_writers(self, superadmin: AuthUser, admin: AuthUser) -> None:
        assert_can_write(superadmin)
        assert_can_write(admin)

    def test_reader_cannot_write(self, reader: AuthUser) -> None:
        with pytest.raises(RoleForbiddenError):
            assert_can_write(reader)

    def test_superadmin_only(self, superadmin: AuthUser, admin: AuthUser) -> None:
        """Test that admins are rejected with the supplied message."""
        assert_superadmin(superadmin)

        with pytest.raises(RoleForbiddenError) as exc_info:
            assert_superadmin(admin, "Only superadmin can do this")

        assert exc_info.value.message == "Only superadmin can do this"


@pytest.mark.unit
class TestResolvePairBranch:
    """Tests for the branch of a (student, course) pair."""

    def test_same_branch_pair(self, admin: AuthUser) -> None:
        assert resolve_pair_branch(student_in(10), course_in(10), admin) == 10

    def test_superadmin_pair(self, superadmin: AuthUser) -> None:
        assert resolve_pair_branch(student_in(7), course_in(7), superadmin) == 7

    @pytest.mark.parametrize(("student_branch", "course_branch"), [(None, 10), (10, None)])
    def test_unassigned_records(
        self,
        superadmin: AuthUser,
        student_branch: int | None,
        course_branch: int | None,
    ) -> None:
        """Test that a pair with an unassigned side is rejected first."""
        with pytest.raises(UnassignedBranchError):
            resolve_pair_branch(student_in(student_branch), course_in(course_branch), superadmin)

    def test_cross_branch_pair_for_superadmin(self, superadmin: AuthUser) -> None:
        with pytest.raises(CrossBranchPairError):
            resolve_pair_branch(student_in(7), course_in(8), superadmin)

    def test_foreign_student_is_forbidden_for_admin(self, admin: AuthUser) -> None:
        """Test that access is checked before the branch mismatch."""
        with pytest.raises(BranchAccessForbiddenError):
            resolve_pair_branch(student_in(11), course_in(10), admin)

    def test_foreign_course_is_forbidden_for_admin(self, admin: AuthUser) -> None:
        with pytest.raises(BranchAccessForbiddenError):
            resolve_pair_branch(student_in(10), course_in(11), admin)


@pytest.mark.unit
class TestResolveBranchForWrite:
    """Tests for the owning branch of new records."""

    def test_superadmin_names_branch(self, superadmin: AuthUser) -> None:
        assert resolve_branch_for_write(5, superadmin) == 5
        assert resolve_branch_for_write(None, superadmin) is None

    def test_admin_pinned_to_own_branch(self, admin: AuthUser) -> None:
        assert resolve_branch_for_write(None, admin) == 10
        assert resolve_branch_for_write(10, admin) == 10

    def test_admin_cannot_name_other_branch(self, admin: AuthUser) -> None:
        with pytest.raises(BranchAccessForbiddenError):
            resolve_branch_for_write(11, admin)

    def test_admin_without_branch(self, admin_without_branch: AuthUser) -> None:
        with pytest.raises(NoBranchAssignedError):
            resolve_branch_for_write(None, admin_without_branch)
