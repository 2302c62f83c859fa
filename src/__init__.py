"""CourseDesk Backend.

Branch-scoped course enrollment service: seat-capacity accounting and the
enrollment lifecycle for a multi-branch training organization.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
