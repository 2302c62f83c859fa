# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain error taxonomy.

Every failure a caller can act on is a DomainError with a stable ``kind``
and ``code``. The kind is one of ``not_found``, ``conflict``, ``forbidden``
or ``bad_request``; the HTTP layer maps it to a status code. Unexpected
store failures are not domain errors, see DatabaseError in
src.infrastructure.database.connection.
"""

from typing import ClassVar, Literal

ErrorKind = Literal["not_found", "conflict", "forbidden", "bad_request"]


class DomainError(Exception):
    """Base exception for domain errors.

    Attributes:
        message: Human-readable error description.
        kind: Error category.
        code: Stable machine-readable error code.
    """

    kind: ClassVar[ErrorKind]
    code: ClassVar[str]
    default_message: ClassVar[str] = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# =============================================================================
# Not found
# =============================================================================


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    kind = "not_found"
    code = "not_found"
    default_message = "Record not found"


class BranchNotFoundError(NotFoundError):
    code = "branch_not_found"


class StudentNotFoundError(NotFoundError):
    code = "student_not_found"


class CourseNotFoundError(NotFoundError):
    code = "course_not_found"


class InstructorNotFoundError(NotFoundError):
    code = "instructor_not_found"


class EnrollmentNotFoundError(NotFoundError):
    code = "enrollment_not_found"


# =============================================================================
# Conflict
# =============================================================================


class ConflictError(DomainError):
    """Raised when the requested change collides with current state."""

    kind = "conflict"
    code = "conflict"
    default_message = "Conflicting state"


class CourseEndedError(ConflictError):
    code = "course_ended"
    default_message = "Course already completed"


class CapacityExceededError(ConflictError):
    code = "capacity_exceeded"
    default_message = "Course has no available seats"


class DuplicateEnrollmentError(ConflictError):
    code = "duplicate_enrollment"
    default_message = "Student is already enrolled in this course"


class AlreadyCompletedError(ConflictError):
    code = "already_completed"
    default_message = "Student has already completed this course"


class CanceledEnrollmentError(ConflictError):
    code = "canceled_enrollment"
    default_message = "Cannot complete a canceled enrollment"


class CompletedEnrollmentError(ConflictError):
    code = "completed_enrollment"
    default_message = "Cannot unenroll a completed enrollment"


class CrossBranchPairError(ConflictError):
    code = "cross_branch_pair"
    default_message = "Student and course belong to different branches"


class CourseHasActiveEnrollmentsError(ConflictError):
    code = "course_has_active_enrollments"
    default_message = "Cannot delete a course with active enrollments"


class CourseEndedInstructorChangeError(ConflictError):
    code = "course_ended_instructor_change"
    default_message = "Cannot change instructor for a completed course"


class CourseBranchChangeError(ConflictError):
    code = "course_branch_change"
    default_message = "Cannot move a course with enrollments to another branch"


# =============================================================================
# Forbidden
# =============================================================================


class ForbiddenError(DomainError):
    """Raised when the acting user may not perform the operation."""

    kind = "forbidden"
    code = "forbidden"
    default_message = "Operation not allowed"


class BranchAccessForbiddenError(ForbiddenError):
    code = "branch_access_forbidden"
    default_message = "Operation restricted to your branch"


class RoleForbiddenError(ForbiddenError):
    code = "role_forbidden"
    default_message = "Your role does not allow this operation"


class InstructorBranchMismatchError(ForbiddenError):
    code = "instructor_branch_mismatch"
    default_message = "Instructor belongs to another branch"


# =============================================================================
# Bad request
# =============================================================================


class BadRequestError(DomainError):
    """Raised when the request itself is malformed or incomplete."""

    kind = "bad_request"
    code = "bad_request"
    default_message = "Invalid request"


class NoBranchAssignedError(BadRequestError):
    code = "no_branch_assigned"
    default_message = "Branch is not assigned to current user"


class UnassignedBranchError(BadRequestError):
    code = "unassigned_branch"
    default_message = "Student and course must be assigned to a branch"


class InvalidDateRangeError(BadRequestError):
    code = "invalid_date_range"
    default_message = "startDate must be earlier than endDate"


class InvalidCapacityError(BadRequestError):
    code = "invalid_capacity"
    default_message = "Capacity must be a positive integer"
