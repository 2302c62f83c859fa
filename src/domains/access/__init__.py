# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Branch-scoped authorization resolver."""

from src.domains.access.scope import (
    BranchScope,
    assert_branch_access,
    assert_can_write,
    assert_superadmin,
    require_branch_id,
    resolve_branch_for_write,
    resolve_pair_branch,
    resolve_scope,
)

__all__ = [
    "BranchScope",
    "assert_branch_access",
    "assert_can_write",
    "assert_superadmin",
    "require_branch_id",
    "resolve_branch_for_write",
    "resolve_pair_branch",
    "resolve_scope",
]
