#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Entry Point and CLI Module for Stale Branch Pruner

Contains:
- main() function with CLI argument parsing
- Application orchestration
- Top-level error handling and exit codes
"""

import argparse
import logging
import os
import sys

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from api_client import APIError, GitHubAPIClient
from auth import get_github_token
from config import ConfigurationError, PrunerConfig, parse_repository
from logger_config import setup_logging
from pruner import BranchPruner
from version import __version__

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="branch-pruner",
        description=(
            "Delete stale branches from a GitHub repository. The newest 20 branches "
            "and any branch with a commit in the last 28 days are kept.\n"
            "Requires a GITHUB_TOKEN environment variable."
        ),
    )
    parser.add_argument('--repo', type=str, default=os.environ.get('GITHUB_REPOSITORY'),
                        help='Repository as OWNER/NAME (default: GITHUB_REPOSITORY env)')
    parser.add_argument('--dry-run', action='store_true', help='Show which branches would be deleted without deleting')
    parser.add_argument('--max-workers', type=int, default=10, help='Maximum concurrent deletion requests (default: 10)')
    parser.add_argument('--page-size', type=int, default=100, help='Branches fetched per API page (default: 100)')
    parser.add_argument('--protect', action='append', default=[], metavar='NAME',
                        help='Additional branch name to never delete (repeatable)')
    parser.add_argument('--log-file', type=str, help='Also write logs to this file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose (debug) logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def load_config(args: argparse.Namespace) -> PrunerConfig:
    """
    Build the run configuration from parsed arguments and the environment.

    Raises:
        ConfigurationError: If the token or repository is missing or invalid
    """
    token = get_github_token()
    owner, repo = parse_repository(args.repo)
    if args.max_workers < 1:
        raise ConfigurationError("--max-workers must be at least 1")
    if not 1 <= args.page_size <= 100:
        raise ConfigurationError("--page-size must be between 1 and 100")
    return PrunerConfig(
        token=token,
        owner=owner,
        repo=repo,
        page_size=args.page_size,
        max_workers=args.max_workers,
        dry_run=args.dry_run,
        extra_protected=list(args.protect),
    )


def handle_error(logger: logging.Logger, error: Exception) -> int:
    """Log a fatal error and return the process exit code."""
    if isinstance(error, (ConfigurationError, APIError)):
        logger.error(str(error))
    else:
        logger.exception(f"Unexpected error: {error}")
    console.print(Panel(
        f"[red]{escape(str(error))}[/red]",
        title=type(error).__name__,
        style="red"
    ))
    return 1


def main(argv: list[str] | None = None) -> int:
    """
    Entrypoint for Stale Branch Pruner.

    Example:
        GITHUB_TOKEN=... python main.py --repo octocat/hello-world --dry-run

    Returns:
        Process exit code: 0 on success, 1 on any fatal error or failed deletion
    """
    args = build_parser().parse_args(argv)
    logger = setup_logging(
        log_level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )

    try:
        config = load_config(args)
        console.print(Panel(
            f"[bold blue]Stale Branch Pruner[/bold blue] {escape(config.full_name)}",
            subtitle="dry run" if config.dry_run else None,
            border_style="bright_blue"
        ))
        client = GitHubAPIClient(config.token)
        result = BranchPruner(config, client).run()
    except Exception as e:
        return handle_error(logger, e)

    return 0 if result.ok else 1


if __name__ == '__main__':
    sys.exit(main())
