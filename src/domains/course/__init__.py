# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course lifecycle: creation, capacity edits, deletion and schedule status."""

from src.domains.course.service import CourseService, course_status

__all__ = ["CourseService", "course_status"]
