# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment state machine.

States are derived from the row, never stored:

    Active     canceled_at is NULL and completed is false
    Completed  completed is true (terminal)
    Canceled   canceled_at is set and completed is false (re-enrollable)

``plan_transition`` checks an event against the table below and returns a
Transition describing the target state and the seat movement the capacity
ledger must apply in the same unit of work. ``apply_transition`` writes the
new field values onto the row.

    source     event      target     seats
    (none)     enroll     Active     reserve
    Active     enroll     DuplicateEnrollmentError
    Canceled   enroll     Active     reserve   (same row, timestamps reset)
    Completed  enroll     AlreadyCompletedError
    Active     complete   Completed  release
    Completed  complete   no-op
    Canceled   complete   CanceledEnrollmentError
    Active     unenroll   Canceled   release
    Canceled   unenroll   no-op
    Completed  unenroll   CompletedEnrollmentError
    any        delete     removed    release if Active
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from src.domains.errors import (
    AlreadyCompletedError,
    CanceledEnrollmentError,
    CompletedEnrollmentError,
    DomainError,
    DuplicateEnrollmentError,
)
from src.infrastructure.database.models import Enrollment
from src.models.common import EnrollmentState


class EnrollmentEvent(str, Enum):
    """Events accepted by the state machine."""

    ENROLL = "enroll"
    COMPLETE = "complete"
    UNENROLL = "unenroll"
    DELETE = "delete"


class SeatEffect(int, Enum):
    """Seat movement paired with a transition."""

    RESERVE = -1
    NONE = 0
    RELEASE = 1


@dataclass(frozen=True)
class Transition:
    """Outcome of a legal event.

    Attributes:
        source: State before the event, None for a pair with no row yet.
        event: The event applied.
        target: State after the event, None once the row is removed.
        seats: Seat movement to apply on the course.
    """

    source: EnrollmentState | None
    event: EnrollmentEvent
    target: EnrollmentState | None
    seats: SeatEffect

    @property
    def is_noop(self) -> bool:
        """True when the row and the ledger are left untouched."""
        return (
            self.event is not EnrollmentEvent.DELETE
            and self.source is self.target
            and self.seats is SeatEffect.NONE
        )


_A = EnrollmentState.ACTIVE
_C = EnrollmentState.COMPLETED
_X = EnrollmentState.CANCELED

_TABLE: dict[
    tuple[EnrollmentState | None, EnrollmentEvent],
    tuple[EnrollmentState, SeatEffect] | type[DomainError],
] = {
    (None, EnrollmentEvent.ENROLL): (_A, SeatEffect.RESERVE),
    (_A, EnrollmentEvent.ENROLL): DuplicateEnrollmentError,
    (_X, EnrollmentEvent.ENROLL): (_A, SeatEffect.RESERVE),
    (_C, EnrollmentEvent.ENROLL): AlreadyCompletedError,
    (_A, EnrollmentEvent.COMPLETE): (_C, SeatEffect.RELEASE),
    (_C, EnrollmentEvent.COMPLETE): (_C, SeatEffect.NONE),
    (_X, EnrollmentEvent.COMPLETE): CanceledEnrollmentError,
    (_A, EnrollmentEvent.UNENROLL): (_X, SeatEffect.RELEASE),
    (_X, EnrollmentEvent.UNENROLL): (_X, SeatEffect.NONE),
    (_C, EnrollmentEvent.UNENROLL): CompletedEnrollmentError,
}


def plan_transition(
    source: EnrollmentState | None,
    event: EnrollmentEvent,
) -> Transition:
    """Validate an event against the current state.

    Args:
        source: Current state, None when the pair has no row.
        event: Requested event.

    Returns:
        The legal transition.

    Raises:
        DuplicateEnrollmentError: Enrolling an Active pair.
        AlreadyCompletedError: Enrolling a Completed pair.
        CanceledEnrollmentError: Completing a Canceled enrollment.
        CompletedEnrollmentError: Unenrolling a Completed enrollment.
        ValueError: For events that need an existing row but got none.
    """
    if event is EnrollmentEvent.DELETE:
        if source is None:
            raise ValueError("Cannot delete an enrollment that does not exist")
        seats = SeatEffect.RELEASE if source is _A else SeatEffect.NONE
        return Transition(source=source, event=event, target=None, seats=seats)

    outcome = _TABLE.get((source, event))
    if outcome is None:
        raise ValueError(f"Event {event.value} requires an existing enrollment")
    if isinstance(outcome, type):
        raise outcome()

    target, seats = outcome
    return Transition(source=source, event=event, target=target, seats=seats)


def apply_transition(enrollment: Enrollment, transition: Transition, now: datetime) -> None:
    """Write the field changes of a transition onto the row.

    No-ops and deletions leave the row as it is.

    Args:
        enrollment: Row to mutate.
        transition: Transition returned by plan_transition.
        now: Timestamp for the changed date fields.
    """
    if transition.is_noop or transition.target is None:
        return

    if transition.event is EnrollmentEvent.ENROLL:
        enrollment.canceled_at = None
        enrollment.completion_date = None
        enrollment.completed = False
        enrollment.enrolled_date = now
    elif transition.event is EnrollmentEvent.COMPLETE:
        enrollment.completed = True
        enrollment.completion_date = now
    elif transition.event is EnrollmentEvent.UNENROLL:
        enrollment.canceled_at = now
