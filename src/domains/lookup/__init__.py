# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Record lookups resolving ids to rows or NotFound errors."""

from src.domains.lookup.service import EntityLookup

__all__ = ["EntityLookup"]
