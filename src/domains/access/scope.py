# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Branch-scoped authorization.

Decides whether an acting user may touch a record owned by a branch, and
which branch filter list queries must carry. Superadmins are unscoped;
admins and users are confined to their own branch, and only superadmins
and admins may mutate.

Example:
    scope = resolve_scope(user)
    query = scope.apply(select(Enrollment), Enrollment.branch_id)

    assert_branch_access(user, course.branch_id)
"""

from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, Select

from src.domains.auth.context import AuthUser
from src.domains.errors import (
    BranchAccessForbiddenError,
    CrossBranchPairError,
    NoBranchAssignedError,
    RoleForbiddenError,
    UnassignedBranchError,
)
from src.infrastructure.database.models import Course, Student

SelectT = TypeVar("SelectT", bound=Select[Any])


@dataclass(frozen=True)
class BranchScope:
    """Branch filter derived from the acting user.

    Attributes:
        branch_id: Branch every row must belong to; None means unscoped.
    """

    branch_id: int | None

    @property
    def is_unscoped(self) -> bool:
        return self.branch_id is None

    def apply(self, query: SelectT, column: ColumnElement[Any]) -> SelectT:
        """Add the branch filter to a query as a WHERE clause."""
        if self.branch_id is None:
            return query
        return query.where(column == self.branch_id)


def require_branch_id(user: AuthUser) -> int:
    """Get the acting user's branch.

    Raises:
        NoBranchAssignedError: If the user has no branch.
    """
    if not user.branch_id:
        raise NoBranchAssignedError()
    return user.branch_id


def resolve_scope(user: AuthUser) -> BranchScope:
    """Resolve the branch filter for list and roster queries.

    Raises:
        NoBranchAssignedError: If a scoped user has no branch.
    """
    if user.is_superadmin:
        return BranchScope(branch_id=None)
    return BranchScope(branch_id=require_branch_id(user))


def assert_branch_access(user: AuthUser, branch_id: int | None) -> None:
    """Check that the user may access a record owned by ``branch_id``.

    Raises:
        NoBranchAssignedError: If a scoped user has no branch.
        BranchAccessForbiddenError: If the record belongs to another branch.
    """
    if user.is_superadmin:
        return
    if branch_id != require_branch_id(user):
        raise BranchAccessForbiddenError()


def assert_can_write(user: AuthUser) -> None:
    """Check that the role may mutate enrollments and courses.

    Raises:
        RoleForbiddenError: For read-only roles.
    """
    if not user.can_write:
        raise RoleForbiddenError()


def assert_superadmin(user: AuthUser, message: str | None = None) -> None:
    """Check that the acting user is a superadmin.

    Raises:
        RoleForbiddenError: For any other role.
    """
    if not user.is_superadmin:
        raise RoleForbiddenError(message)


def resolve_pair_branch(student: Student, course: Course, user: AuthUser) -> int:
    """Resolve the branch an enrollment of ``student`` in ``course`` belongs to.

    The user must be able to access both records, and both must belong to
    the same branch.

    Returns:
        The shared branch id.

    Raises:
        UnassignedBranchError: If either record has no branch.
        NoBranchAssignedError: If a scoped user has no branch.
        BranchAccessForbiddenError: If either record is outside the user's branch.
        CrossBranchPairError: If student and course belong to different branches.
    """
    if not student.branch_id or not course.branch_id:
        raise UnassignedBranchError()

    assert_branch_access(user, course.branch_id)
    assert_branch_access(user, student.branch_id)

    if student.branch_id != course.branch_id:
        raise CrossBranchPairError()

    return course.branch_id


def resolve_branch_for_write(requested_branch_id: int | None, user: AuthUser) -> int | None:
    """Resolve the owning branch of a record being created.

    Superadmins must name the branch (existence is checked by the caller).
    Scoped users are pinned to their own branch and may not name another.

    Returns:
        The branch id to store, or None when a superadmin named none.

    Raises:
        NoBranchAssignedError: If a scoped user has no branch.
        BranchAccessForbiddenError: If a scoped user names another branch.
    """
    if user.is_superadmin:
        return requested_branch_id

    branch_id = require_branch_id(user)
    if requested_branch_id and requested_branch_id != branch_id:
        raise BranchAccessForbiddenError("You can only manage records within your branch")
    return branch_id
