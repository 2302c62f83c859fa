# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for CourseDesk.

This package contains domain services that encapsulate business logic.

Domains:
    errors: Error taxonomy shared by every domain.
    auth: Acting-user context and bearer token decoding.
    access: Branch-scoped authorization resolver.
    lookup: Branch/student/course/instructor/enrollment lookups.
    enrollment: Enrollment state machine, capacity ledger and queries.
    course: Course lifecycle operations that touch capacity.
"""
