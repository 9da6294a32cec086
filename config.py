#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Configuration and Data Models for Stale Branch Pruner

Contains:
- Branch dataclass for remote branch records
- RetentionPolicy dataclass with the default retention constants
- PrunerConfig dataclass for application configuration
- Protected branch names and repository parsing utilities
"""

from dataclasses import dataclass, field
from datetime import datetime


# Retention defaults: keep the newest 20 branches, and anything younger than 28 days
MIN_NUM_BRANCHES = 20
DAYS_TO_KEEP_BRANCHES = 28

# Common primary branch names that are never deleted, whatever the default branch is
PROTECTED_BRANCH_NAMES = ("master", "main", "default", "develop")

# Display format for commit timestamps in console output
DISPLAY_FORMAT = '%Y-%m-%d %H:%M UTC'


class ConfigurationError(Exception):
    """Raised when required configuration (credentials, repository) is missing or invalid."""
    pass


@dataclass(frozen=True)
class Branch:
    """
    A remote branch and the timestamp of its most recent commit.

    Attributes:
        name: Branch name without the refs/heads/ prefix
        committed_date: Timezone-aware UTC instant of the tip commit
    """
    name: str
    committed_date: datetime


@dataclass(frozen=True)
class RetentionPolicy:
    """
    Retention rules used to decide which branches are stale.

    The newest ``min_num_branches`` branches are always kept. Beyond those,
    a branch is kept while it is younger than ``days_to_keep_branches`` whole days.

    Example:
        >>> policy = RetentionPolicy(min_num_branches=5, days_to_keep_branches=7)
    """
    min_num_branches: int = MIN_NUM_BRANCHES
    days_to_keep_branches: int = DAYS_TO_KEEP_BRANCHES


DEFAULT_RETENTION_POLICY = RetentionPolicy()


@dataclass
class PrunerConfig:
    """
    Configuration settings for Stale Branch Pruner.

    Attributes:
        token: GitHub token used for API authentication
        owner: Repository owner (user or organization)
        repo: Repository name
        policy: Retention policy applied to the branch listing
        page_size: Number of branches requested per GraphQL page
        max_workers: Upper bound on concurrent deletion requests
        dry_run: Report the selection without deleting anything
        extra_protected: Branch names protected in addition to PROTECTED_BRANCH_NAMES

    Example:
        >>> config = PrunerConfig(token="ghp_123", owner="octocat", repo="hello-world")
    """
    token: str
    owner: str
    repo: str
    policy: RetentionPolicy = DEFAULT_RETENTION_POLICY
    page_size: int = 100
    max_workers: int = 10
    dry_run: bool = False
    extra_protected: list[str] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repository(value: str | None) -> tuple[str, str]:
    """
    Split an ``owner/name`` repository string.

    Args:
        value: Repository in ``owner/name`` form

    Returns:
        Tuple of (owner, name)

    Raises:
        ConfigurationError: If the value is empty or not in ``owner/name`` form
    """
    if not value:
        raise ConfigurationError(
            "Repository not set. Pass --repo OWNER/NAME or set GITHUB_REPOSITORY."
        )
    owner, sep, name = value.strip().partition('/')
    if not sep or not owner or not name or '/' in name:
        raise ConfigurationError(f"Invalid repository '{value}', expected OWNER/NAME")
    return owner, name
