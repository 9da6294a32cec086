#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Unit tests for pruner.py module.

Tests cover:
- Success message wording
- Full runs with and without stale branches
- Dry-run mode
- Reporting of failed deletions
"""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

from api_client import APIError, NotFoundError
from branches import DeletionResult
from config import Branch, PrunerConfig, RetentionPolicy
from pruner import BranchPruner, build_branch_table, format_success_message


def page_for(branches, default_branch='main'):
    return {
        'repository': {
            'defaultBranchRef': {'name': default_branch},
            'refs': {
                'pageInfo': {'hasNextPage': False, 'endCursor': None},
                'nodes': [
                    {'name': b.name, 'target': {'committedDate': b.committed_date.isoformat()}}
                    for b in branches
                ],
            },
        }
    }


def aged_branches(ages):
    now = datetime.now(timezone.utc)
    return [Branch(name=f'feature/{age}d', committed_date=now - timedelta(days=age)) for age in ages]


class TestFormatSuccessMessage(unittest.TestCase):

    def test_singular(self):
        self.assertEqual(format_success_message(1), 'Successfully deleted 1 old branch')

    def test_plural(self):
        self.assertEqual(format_success_message(7), 'Successfully deleted 7 old branches')

    def test_nothing(self):
        self.assertEqual(format_success_message(0), 'No branches to delete')


class TestBuildBranchTable(unittest.TestCase):

    def test_one_row_per_branch(self):
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        branches = [Branch(name='[wip] idea', committed_date=now - timedelta(days=40))]

        table = build_branch_table(branches, now, 'Branches to Delete')

        self.assertEqual(table.row_count, 1)
        self.assertEqual(len(table.columns), 3)


@patch('pruner.console')
class TestBranchPruner(unittest.TestCase):
    """Tests for the BranchPruner orchestrator."""

    def setUp(self):
        self.client = MagicMock()
        self.config = PrunerConfig(token='t', owner='octocat', repo='hello')

    def test_nothing_stale(self, mock_console):
        self.client.graphql.return_value = page_for(aged_branches(range(25)))

        result = BranchPruner(self.config, self.client).run()

        self.assertEqual(result.deleted_count, 0)
        self.assertTrue(result.ok)
        self.client.delete.assert_not_called()
        mock_console.print.assert_called_once_with('[green]No branches to delete[/green]')

    def test_deletes_stale_branches(self, mock_console):
        """Test a run deletes exactly the branches the policy selects."""
        self.client.graphql.return_value = page_for(aged_branches(range(13, 38)))

        result = BranchPruner(self.config, self.client).run()

        self.assertEqual(result.deleted_count, 5)
        self.assertEqual(
            sorted(b.name for b in result.deleted),
            sorted(f'feature/{age}d' for age in range(33, 38)),
        )
        self.assertEqual(self.client.delete.call_count, 5)
        printed = [call[0][0] for call in mock_console.print.call_args_list if isinstance(call[0][0], str)]
        self.assertIn('[green]Successfully deleted 5 old branches[/green]', printed)

    def test_protected_branches_never_selected(self, mock_console):
        branches = aged_branches(range(20)) + [
            Branch(name='main', committed_date=datetime(2020, 1, 1, tzinfo=timezone.utc)),
            Branch(name='develop', committed_date=datetime(2020, 1, 1, tzinfo=timezone.utc)),
        ]
        self.client.graphql.return_value = page_for(branches)

        stale = BranchPruner(self.config, self.client).select()

        self.assertEqual(stale, [])

    def test_dry_run_does_not_delete(self, mock_console):
        self.config.dry_run = True
        self.client.graphql.return_value = page_for(aged_branches(range(29)))

        result = BranchPruner(self.config, self.client).run()

        self.client.delete.assert_not_called()
        self.assertEqual(result.deleted_count, 0)
        printed = [call[0][0] for call in mock_console.print.call_args_list if isinstance(call[0][0], str)]
        self.assertIn('[yellow]Dry run: 1 branch(es) would be deleted[/yellow]', printed)

    def test_custom_policy_is_applied(self, mock_console):
        self.config.policy = RetentionPolicy(min_num_branches=1, days_to_keep_branches=5)
        self.client.graphql.return_value = page_for(aged_branches([0, 3, 5, 10]))

        stale = BranchPruner(self.config, self.client).select()

        self.assertEqual([b.name for b in stale], ['feature/5d', 'feature/10d'])

    def test_reports_failed_deletions(self, mock_console):
        self.client.graphql.return_value = page_for(aged_branches(range(22)) + aged_branches([40, 50]))

        with patch('pruner.delete_branches') as mock_delete:
            failed_branch = Branch(name='feature/50d', committed_date=datetime(2024, 1, 1, tzinfo=timezone.utc))
            mock_delete.return_value = DeletionResult(
                deleted=[Branch(name='feature/40d', committed_date=datetime(2024, 1, 1, tzinfo=timezone.utc))],
                failed=[(failed_branch, NotFoundError('HTTP 404: Not Found'))],
            )
            result = BranchPruner(self.config, self.client).run()

        self.assertFalse(result.ok)
        mock_delete.assert_called_once()
        self.assertEqual(mock_delete.call_args.kwargs['max_workers'], 10)
        printed = [call[0][0] for call in mock_console.print.call_args_list if isinstance(call[0][0], str)]
        self.assertIn('[green]Successfully deleted 1 old branch[/green]', printed)
        self.assertIn('[red]Failed to delete 1 branch(es):[/red]', printed)

    def test_listing_failure_propagates(self, mock_console):
        self.client.graphql.side_effect = APIError('HTTP 502: Bad Gateway')

        with self.assertRaises(APIError):
            BranchPruner(self.config, self.client).run()

        self.client.delete.assert_not_called()


if __name__ == '__main__':
    unittest.main()
