#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Main Business Logic Module for Stale Branch Pruner

Contains:
- BranchPruner class composing listing, selection and deletion
- Console reporting of selected branches and results
"""

from datetime import datetime, timezone

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from api_client import APIClient
from branches import DeletionResult, delete_branches, list_branches
from config import Branch, PrunerConfig, DISPLAY_FORMAT
from logger_config import get_logger
from retention import branch_age_days, select_branches_to_delete

logger = get_logger(__name__)

console = Console()


def format_success_message(num_deleted: int) -> str:
    """
    Build the summary line printed after a run.

    Example:
        >>> format_success_message(1)
        'Successfully deleted 1 old branch'
    """
    if num_deleted == 1:
        return f"Successfully deleted {num_deleted} old branch"
    if num_deleted > 1:
        return f"Successfully deleted {num_deleted} old branches"
    return "No branches to delete"


def build_branch_table(branches: list[Branch], now: datetime, title: str) -> Table:
    """Render branches as a table of name, last commit and age."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Branch", style="cyan")
    table.add_column("Last Commit", style="yellow")
    table.add_column("Age (days)", justify="right", style="magenta")

    for branch in branches:
        table.add_row(
            escape(branch.name),
            branch.committed_date.strftime(DISPLAY_FORMAT),
            str(branch_age_days(branch, now)),
        )
    return table


class BranchPruner:
    """Orchestrates one pruning run: list, select, delete, report."""

    def __init__(self, config: PrunerConfig, api_client: APIClient) -> None:
        """
        Initialize the pruner.

        Args:
            config: Configuration settings
            api_client: GitHub API client shared by the lister and the deleter
        """
        self.config = config
        self.api = api_client

    def select(self, now: datetime | None = None) -> list[Branch]:
        """Fetch the repository's branches and apply the retention policy."""
        branches = list_branches(
            self.api,
            self.config.owner,
            self.config.repo,
            page_size=self.config.page_size,
            extra_protected=self.config.extra_protected,
        )
        stale = select_branches_to_delete(branches, self.config.policy, now)
        logger.info(
            f"{len(stale)} of {len(branches)} branches selected for deletion "
            f"(keep newest {self.config.policy.min_num_branches}, "
            f"keep younger than {self.config.policy.days_to_keep_branches} days)"
        )
        return stale

    def run(self) -> DeletionResult:
        """
        Execute a full pruning run.

        Returns:
            DeletionResult for the run; empty when nothing was stale or in dry-run mode

        Raises:
            APIError: If the branch listing fails
        """
        now = datetime.now(timezone.utc)
        stale = self.select(now)

        if not stale:
            console.print(f"[green]{format_success_message(0)}[/green]")
            return DeletionResult()

        title = "Branches (Dry Run)" if self.config.dry_run else "Branches to Delete"
        console.print(build_branch_table(stale, now, title))

        if self.config.dry_run:
            console.print(f"[yellow]Dry run: {len(stale)} branch(es) would be deleted[/yellow]")
            return DeletionResult()

        result = delete_branches(
            self.api,
            self.config.owner,
            self.config.repo,
            stale,
            max_workers=self.config.max_workers,
        )

        if result.deleted_count:
            console.print(f"[green]{format_success_message(result.deleted_count)}[/green]")
        if result.failed_count:
            console.print(f"[red]Failed to delete {result.failed_count} branch(es):[/red]")
            for branch, error in result.failed:
                console.print(f"  [red]- {escape(branch.name)}: {escape(str(error))}[/red]")
        return result
