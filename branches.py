#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Remote Branch Operations for Stale Branch Pruner

Contains:
- list_branches for paginated branch listing over GraphQL
- delete_branches for bounded-concurrency ref deletion
- DeletionResult for per-branch deletion outcomes
"""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import quote

from api_client import APIClient, APIError
from config import Branch, PROTECTED_BRANCH_NAMES
from logger_config import get_logger

logger = get_logger(__name__)


LIST_BRANCHES_QUERY = """
query listBranches($owner: String!, $name: String!, $after: String, $pageSize: Int!) {
  repository(owner: $owner, name: $name) {
    defaultBranchRef { name }
    refs(refPrefix: "refs/heads/", first: $pageSize, after: $after) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        name
        target {
          ... on Commit { committedDate }
        }
      }
    }
  }
}
"""


@dataclass
class DeletionResult:
    """Outcome of a batch deletion: branches deleted and branches that failed with their error."""
    deleted: list[Branch] = field(default_factory=list)
    failed: list[tuple[Branch, Exception]] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed


def parse_commit_date(value: str) -> datetime:
    """
    Parse a GitHub ISO-8601 timestamp into an aware UTC datetime.

    Example:
        >>> parse_commit_date("2024-03-01T12:00:00Z")
        datetime.datetime(2024, 3, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def list_branches(
    client: APIClient,
    owner: str,
    repo: str,
    page_size: int = 100,
    extra_protected: Iterable[str] = (),
) -> list[Branch]:
    """
    Fetch every deletable branch of a repository.

    Pages through the GraphQL ``refs`` connection until ``hasNextPage`` is
    false, then drops the default branch and the protected names.

    Args:
        client: GitHub API client
        owner: Repository owner
        repo: Repository name
        page_size: Branches requested per page
        extra_protected: Names protected in addition to PROTECTED_BRANCH_NAMES

    Returns:
        Branches eligible for the retention policy, in listing order

    Raises:
        APIError: If a page fetch fails or the repository does not exist
    """
    branches: list[Branch] = []
    default_branch_name = ''
    cursor = None
    has_next_page = True
    page = 0

    while has_next_page:
        page += 1
        logger.debug(f"Fetching branch page {page} for {owner}/{repo}")
        data = client.graphql(
            LIST_BRANCHES_QUERY,
            {'owner': owner, 'name': repo, 'after': cursor, 'pageSize': page_size},
        )
        repository = data.get('repository')
        if repository is None:
            raise APIError(f"Repository {owner}/{repo} not found or not accessible")

        default_ref = repository.get('defaultBranchRef') or {}
        default_branch_name = default_ref.get('name') or default_branch_name

        refs = repository['refs']
        for node in refs['nodes']:
            committed_date = (node.get('target') or {}).get('committedDate')
            if not committed_date:
                logger.debug(f"Skipping ref {node['name']}: target is not a commit")
                continue
            branches.append(Branch(name=node['name'], committed_date=parse_commit_date(committed_date)))

        page_info = refs['pageInfo']
        cursor = page_info['endCursor']
        has_next_page = page_info['hasNextPage']

    # Never delete the default branch or common primary branch names
    safe_names = {default_branch_name, *PROTECTED_BRANCH_NAMES, *extra_protected}
    eligible = [branch for branch in branches if branch.name not in safe_names]
    logger.info(
        f"Found {len(branches)} branches in {owner}/{repo} "
        f"({len(branches) - len(eligible)} protected, default: {default_branch_name or 'unknown'})"
    )
    return eligible


def delete_branch(client: APIClient, owner: str, repo: str, branch: Branch) -> Branch:
    """Delete a single branch ref and return it."""
    ref = quote(f"heads/{branch.name}", safe='/')
    client.delete(f"/repos/{owner}/{repo}/git/refs/{ref}")
    logger.info(f"Deleted branch: {branch.name}")
    return branch


def delete_branches(
    client: APIClient,
    owner: str,
    repo: str,
    branches: list[Branch],
    max_workers: int = 10,
) -> DeletionResult:
    """
    Delete branches with at most ``max_workers`` requests in flight.

    A failed deletion is recorded and the remaining deletions still run.
    Deletions already issued are not rolled back.

    Args:
        client: GitHub API client
        owner: Repository owner
        repo: Repository name
        branches: Branches to delete
        max_workers: Upper bound on concurrent requests

    Returns:
        DeletionResult with deleted and failed branches
    """
    result = DeletionResult()
    if not branches:
        return result

    effective_workers = max(1, min(max_workers, len(branches)))

    with ThreadPoolExecutor(max_workers=effective_workers) as pool:
        futures = {
            pool.submit(delete_branch, client, owner, repo, branch): branch
            for branch in branches
        }
        for future in as_completed(futures):
            branch = futures[future]
            try:
                future.result()
            except APIError as e:
                logger.error(f"Failed to delete branch {branch.name}: {e}")
                result.failed.append((branch, e))
            else:
                result.deleted.append(branch)

    return result
