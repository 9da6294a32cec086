#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Retention Policy Module for Stale Branch Pruner

Contains:
- branch_age_days for whole-day branch ages
- select_branches_to_delete, the retention policy selector
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from config import Branch, RetentionPolicy, DEFAULT_RETENTION_POLICY


def branch_age_days(branch: Branch, now: datetime) -> int:
    """Whole days elapsed since the branch's last commit, truncated toward the past."""
    return (now - branch.committed_date).days


def select_branches_to_delete(
    branches: Iterable[Branch],
    policy: RetentionPolicy = DEFAULT_RETENTION_POLICY,
    now: datetime | None = None,
) -> list[Branch]:
    """
    Decide which branches are stale under the retention policy.

    Branches are ranked newest first. The newest ``policy.min_num_branches``
    are always kept; any later branch is selected once it is at least
    ``policy.days_to_keep_branches`` whole days old.

    Branches sharing a commit timestamp keep their input order (``sorted`` is
    stable). Which of them falls inside the protected newest set is therefore
    decided by the caller's ordering, and is not part of the contract.

    Args:
        branches: Branches to evaluate, in any order
        policy: Retention rules to apply
        now: Reference instant for ages (defaults to the current UTC time)

    Returns:
        Branches selected for deletion, in ranking order. The input is not modified.

    Example:
        >>> stale = select_branches_to_delete(branches)
        >>> [b.name for b in stale]
        ['feature/old-experiment']
    """
    if now is None:
        now = datetime.now(timezone.utc)

    newest_first = sorted(branches, key=lambda branch: branch.committed_date, reverse=True)

    to_delete = []
    for rank, branch in enumerate(newest_first):
        if rank < policy.min_num_branches:
            continue
        if branch_age_days(branch, now) < policy.days_to_keep_branches:
            continue
        to_delete.append(branch)
    return to_delete
