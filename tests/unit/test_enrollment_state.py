# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the enrollment state machine."""

from datetime import datetime, timezone

import pytest

from src.domains.enrollment.state import (
    EnrollmentEvent,
    SeatEffect,
    apply_transition,
    plan_transition,
)
from src.domains.errors import (
    AlreadyCompletedError,
    CanceledEnrollmentError,
    CompletedEnrollmentError,
    ConflictError,
    DuplicateEnrollmentError,
)
from src.infrastructure.database.models import Enrollment
from src.models.common import EnrollmentState, derive_state

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
EARLIER = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)

ACTIVE = EnrollmentState.ACTIVE
COMPLETED = EnrollmentState.COMPLETED
CANCELED = EnrollmentState.CANCELED


def make_enrollment(state: EnrollmentState) -> Enrollment:
    """Build a transient enrollment row in the given state."""
    enrollment = Enrollment(
        student_id=1,
        course_id=1,
        branch_id=1,
        enrolled_date=EARLIER,
        completed=state is COMPLETED,
        completion_date=EARLIER if state is COMPLETED else None,
        canceled_at=EARLIER if state is CANCELED else None,
    )
    return enrollment


@pytest.mark.unit
class TestDeriveState:
    """Tests for state derivation from stored fields."""

    def test_active(self) -> None:
        """Test that a row with neither flag set is Active."""
        assert derive_state(False, None) is ACTIVE

    def test_canceled(self) -> None:
        """Test that canceled_at alone makes a row Canceled."""
        assert derive_state(False, NOW) is CANCELED

    def test_completed_wins_over_canceled_at(self) -> None:
        """Test that a completed row is Completed even with canceled_at set."""
        assert derive_state(True, NOW) is COMPLETED
        assert derive_state(True, None) is COMPLETED

    @pytest.mark.parametrize("state", list(EnrollmentState))
    def test_row_state(self, state: EnrollmentState) -> None:
        """Test that Enrollment.state reports the state the row was built in."""
        enrollment = make_enrollment(state)

        assert enrollment.state is state
        assert enrollment.is_active is (state is ACTIVE)

    def test_row_state_completed_and_canceled(self) -> None:
        """Test that Enrollment.state follows the same precedence as derive_state."""
        enrollment = make_enrollment(COMPLETED)
        enrollment.canceled_at = NOW

        assert enrollment.state is COMPLETED

    def test_row_state_follows_field_changes(self) -> None:
        """Test that Enrollment.state is recomputed from the current fields."""
        enrollment = make_enrollment(ACTIVE)

        enrollment.canceled_at = NOW
        assert enrollment.state is CANCELED

        enrollment.canceled_at = None
        assert enrollment.state is ACTIVE


@pytest.mark.unit
class TestPlanTransition:
    """Tests for the transition table."""

    @pytest.mark.parametrize(
        ("source", "event", "target", "seats"),
        [
            (None, EnrollmentEvent.ENROLL, ACTIVE, SeatEffect.RESERVE),
            (CANCELED, EnrollmentEvent.ENROLL, ACTIVE, SeatEffect.RESERVE),
            (ACTIVE, EnrollmentEvent.COMPLETE, COMPLETED, SeatEffect.RELEASE),
            (ACTIVE, EnrollmentEvent.UNENROLL, CANCELED, SeatEffect.RELEASE),
            (COMPLETED, EnrollmentEvent.COMPLETE, COMPLETED, SeatEffect.NONE),
            (CANCELED, EnrollmentEvent.UNENROLL, CANCELED, SeatEffect.NONE),
        ],
    )
    def test_legal_transitions(self, source, event, target, seats) -> None:
        """Test that legal events produce the expected target and seat effect."""
        transition = plan_transition(source, event)

        assert transition.source is source
        assert transition.target is target
        assert transition.seats is seats

    @pytest.mark.parametrize(
        ("source", "event", "error"),
        [
            (ACTIVE, EnrollmentEvent.ENROLL, DuplicateEnrollmentError),
            (COMPLETED, EnrollmentEvent.ENROLL, AlreadyCompletedError),
            (CANCELED, EnrollmentEvent.COMPLETE, CanceledEnrollmentError),
            (COMPLETED, EnrollmentEvent.UNENROLL, CompletedEnrollmentError),
        ],
    )
    def test_rejected_transitions(self, source, event, error) -> None:
        """Test that illegal events raise conflict errors."""
        with pytest.raises(error) as exc_info:
            plan_transition(source, event)

        assert isinstance(exc_info.value, ConflictError)
        assert exc_info.value.kind == "conflict"

    def test_idempotent_events_are_noops(self) -> None:
        assert plan_transition(COMPLETED, EnrollmentEvent.COMPLETE).is_noop
        assert plan_transition(CANCELED, EnrollmentEvent.UNENROLL).is_noop
        assert not plan_transition(ACTIVE, EnrollmentEvent.UNENROLL).is_noop

    @pytest.mark.parametrize(
        ("source", "seats"),
        [
            (ACTIVE, SeatEffect.RELEASE),
            (COMPLETED, SeatEffect.NONE),
            (CANCELED, SeatEffect.NONE),
        ],
    )
    def test_delete_releases_only_active(self, source, seats) -> None:
        transition = plan_transition(source, EnrollmentEvent.DELETE)

        assert transition.target is None
        assert transition.seats is seats
        assert not transition.is_noop

    @pytest.mark.parametrize(
        "event",
        [EnrollmentEvent.COMPLETE, EnrollmentEvent.UNENROLL, EnrollmentEvent.DELETE],
    )
    def test_events_without_row(self, event) -> None:
        """Test that events other than enroll need an existing row."""
        with pytest.raises(ValueError):
            plan_transition(None, event)


@pytest.mark.unit
class TestApplyTransition:
    """Tests for field changes written by transitions."""

    def test_reenroll_resets_fields(self) -> None:
        """Test that re-enrolling clears cancellation and resets the date."""
        enrollment = make_enrollment(CANCELED)
        transition = plan_transition(enrollment.state, EnrollmentEvent.ENROLL)

        apply_transition(enrollment, transition, NOW)

        assert enrollment.state is ACTIVE
        assert enrollment.canceled_at is None
        assert enrollment.completion_date is None
        assert enrollment.completed is False
        assert enrollment.enrolled_date == NOW

    def test_complete_stamps_completion_date(self) -> None:
        enrollment = make_enrollment(ACTIVE)
        transition = plan_transition(enrollment.state, EnrollmentEvent.COMPLETE)

        apply_transition(enrollment, transition, NOW)

        assert enrollment.state is COMPLETED
        assert enrollment.completion_date == NOW

    def test_unenroll_stamps_canceled_at(self) -> None:
        enrollment = make_enrollment(ACTIVE)
        transition = plan_transition(enrollment.state, EnrollmentEvent.UNENROLL)

        apply_transition(enrollment, transition, NOW)

        assert enrollment.state is CANCELED
        assert enrollment.canceled_at == NOW

    def test_noop_leaves_row_untouched(self) -> None:
        enrollment = make_enrollment(COMPLETED)
        transition = plan_transition(enrollment.state, EnrollmentEvent.COMPLETE)

        apply_transition(enrollment, transition, NOW)

        assert enrollment.completion_date == EARLIER
