# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests against a file-backed SQLite store

Seeded layout:
    branch A: admin, user, students s1/s2/s3, courses open (capacity 2),
              single (capacity 1), ended (end date in the past)
    branch B: admin, student s4, course open_b (capacity 2)
    no branch: superadmin, an admin without a branch, an unassigned student
"""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.domains.auth import AuthUser
from src.infrastructure.database import (
    TransactionCoordinator,
    build_engine,
    build_sessionmaker,
    create_schema,
)
from src.infrastructure.database.models import (
    Branch,
    Course,
    Instructor,
    Student,
    User,
)
from src.core.config.settings import DatabaseSettings
from src.models.common import UserRole
from src.utils.datetime import days_ago, days_from_now


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a SQLite store)"
    )


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def db_settings(tmp_path: Path) -> DatabaseSettings:
    """Database settings pointing at a fresh SQLite file."""
    return DatabaseSettings(
        url=f"sqlite+aiosqlite:///{tmp_path / 'coursedesk.db'}",
        max_retries=3,
        retry_backoff=0.01,
    )


@pytest.fixture
async def engine(db_settings: DatabaseSettings) -> AsyncGenerator[AsyncEngine, None]:
    """Engine with the schema created."""
    engine = build_engine(db_settings)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test store."""
    return build_sessionmaker(engine)


@pytest.fixture
def coordinator(
    session_factory: async_sessionmaker[AsyncSession],
    db_settings: DatabaseSettings,
) -> TransactionCoordinator:
    """Transaction coordinator with a short backoff."""
    return TransactionCoordinator(
        session_factory,
        max_retries=db_settings.max_retries,
        retry_backoff=db_settings.retry_backoff,
    )


# =============================================================================
# Seed Data
# =============================================================================


@dataclass
class Seed:
    """Ids and acting users of the seeded store."""

    branch_a: int
    branch_b: int

    superadmin: AuthUser
    admin_a: AuthUser
    user_a: AuthUser
    admin_b: AuthUser
    admin_no_branch: AuthUser

    instructor_a: int
    instructor_b: int

    s1: int
    s2: int
    s3: int
    s4: int
    s_unassigned: int

    open_course: int
    single_seat_course: int
    ended_course: int
    open_course_b: int


def _auth(user: User) -> AuthUser:
    return AuthUser(
        id=user.id,
        role=UserRole(user.role),
        branch_id=user.branch_id,
        email=user.email,
        full_name=user.full_name,
    )


@pytest.fixture
async def seed(session_factory: async_sessionmaker[AsyncSession]) -> Seed:
    """Populate two branches with users, instructors, students and courses."""
    async with session_factory() as session:
        branch_a = Branch(name="Branch A")
        branch_b = Branch(name="Branch B")
        session.add_all([branch_a, branch_b])
        await session.flush()

        def user(email: str, role: UserRole, branch_id: int | None) -> User:
            return User(
                full_name=email.split("@")[0],
                email=email,
                password_hash="not-a-real-hash",
                role=role.value,
                branch_id=branch_id,
            )

        superadmin = user("root@example.com", UserRole.SUPERADMIN, None)
        admin_a = user("admin.a@example.com", UserRole.ADMIN, branch_a.id)
        user_a = user("user.a@example.com", UserRole.USER, branch_a.id)
        admin_b = user("admin.b@example.com", UserRole.ADMIN, branch_b.id)
        admin_no_branch = user("admin.none@example.com", UserRole.ADMIN, None)
        session.add_all([superadmin, admin_a, user_a, admin_b, admin_no_branch])

        instructor_a = Instructor(name="Ada", email="ada@example.com", branch_id=branch_a.id)
        instructor_b = Instructor(name="Bob", email="bob@example.com", branch_id=branch_b.id)
        session.add_all([instructor_a, instructor_b])

        def student(name: str, branch_id: int | None) -> Student:
            return Student(name=name, email=f"{name}@example.com", branch_id=branch_id)

        s1 = student("s1", branch_a.id)
        s2 = student("s2", branch_a.id)
        s3 = student("s3", branch_a.id)
        s4 = student("s4", branch_b.id)
        s_unassigned = student("s_unassigned", None)
        session.add_all([s1, s2, s3, s4, s_unassigned])

        def course(title: str, capacity: int, branch_id: int, *, ended: bool = False) -> Course:
            return Course(
                title=title,
                description="",
                start_date=days_ago(60) if ended else days_ago(1),
                end_date=days_ago(1) if ended else days_from_now(30),
                capacity=capacity,
                seats_available=capacity,
                branch_id=branch_id,
            )

        open_course = course("Open", 2, branch_a.id)
        single_seat_course = course("Single", 1, branch_a.id)
        ended_course = course("Ended", 2, branch_a.id, ended=True)
        open_course_b = course("Open B", 2, branch_b.id)
        session.add_all([open_course, single_seat_course, ended_course, open_course_b])

        await session.commit()

        return Seed(
            branch_a=branch_a.id,
            branch_b=branch_b.id,
            superadmin=_auth(superadmin),
            admin_a=_auth(admin_a),
            user_a=_auth(user_a),
            admin_b=_auth(admin_b),
            admin_no_branch=_auth(admin_no_branch),
            instructor_a=instructor_a.id,
            instructor_b=instructor_b.id,
            s1=s1.id,
            s2=s2.id,
            s3=s3.id,
            s4=s4.id,
            s_unassigned=s_unassigned.id,
            open_course=open_course.id,
            single_seat_course=single_seat_course.id,
            ended_course=ended_course.id,
            open_course_b=open_course_b.id,
        )
