#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
GitHub API Client Module

Contains:
- APIClient protocol for structural typing
- GitHubAPIClient class for GraphQL queries and REST deletions
- Error hierarchy for API failures
- Retry logic with exponential backoff for transient errors
"""

import requests
import time
import random
from typing import Any, Protocol
from logger_config import get_logger

logger = get_logger(__name__)


class APIError(Exception):
    """Base exception for API-related errors."""
    pass


class AuthenticationError(APIError):
    """Raised when API authentication fails."""
    pass


class NotFoundError(APIError):
    """Raised when the requested repository or ref does not exist."""
    pass


class GraphQLError(APIError):
    """Raised when a GraphQL response carries an ``errors`` list."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        messages = '; '.join(str(err.get('message', err)) for err in errors)
        super().__init__(f"GraphQL query failed: {messages}")


class APIClient(Protocol):
    """Protocol defining the interface for GitHub API clients."""

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` payload."""
        ...

    def delete(self, endpoint: str) -> None:
        """Issue a REST DELETE request."""
        ...


class GitHubAPIClient:
    """HTTP client for the GitHub API with error handling and retry logic."""

    BASE_URL = 'https://api.github.com'
    GRAPHQL_ENDPOINT = '/graphql'
    API_VERSION = '2022-11-28'

    # Retry configuration
    MAX_RETRIES = 3
    INITIAL_BACKOFF = 1  # seconds
    MAX_BACKOFF = 30  # seconds
    RETRYABLE_STATUS_CODES = {502, 503, 504, 429}  # Bad Gateway, Service Unavailable, Gateway Timeout, Rate Limit

    def __init__(self, token: str) -> None:
        """
        Initialize the GitHub API client.

        Args:
            token: GitHub token for authentication
        """
        self.headers = {
            'Authorization': f'Bearer {token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': self.API_VERSION,
        }

    def _exponential_backoff_with_jitter(self, attempt: int) -> float:
        """
        Calculate exponential backoff time with jitter.

        Args:
            attempt: Current retry attempt (0-indexed)

        Returns:
            Time to wait in seconds
        """
        backoff = min(self.INITIAL_BACKOFF * (2 ** attempt), self.MAX_BACKOFF)
        jitter = random.uniform(0, backoff * 0.1)  # Add up to 10% jitter
        return backoff + jitter

    def _request(self, method: str, endpoint: str, payload: dict[str, Any] | None = None) -> requests.Response:
        """
        Send a request to the GitHub API, retrying transient failures.

        Args:
            method: HTTP method
            endpoint: API endpoint (without base URL)
            payload: Optional JSON body

        Returns:
            The successful response

        Raises:
            AuthenticationError: If the token is invalid or expired
            NotFoundError: If the endpoint refers to a missing resource
            APIError: If the request fails for other reasons
        """
        url = f"{self.BASE_URL}{endpoint}"

        for attempt in range(self.MAX_RETRIES):
            try:
                resp = requests.request(method, url, headers=self.headers, json=payload, timeout=30)
            except requests.exceptions.Timeout:
                if attempt < self.MAX_RETRIES - 1:
                    wait_time = self._exponential_backoff_with_jitter(attempt)
                    logger.warning(
                        f"Request timeout. Retrying in {wait_time:.2f}s "
                        f"(attempt {attempt + 1}/{self.MAX_RETRIES})..."
                    )
                    time.sleep(wait_time)
                    continue
                raise APIError(f"Network timeout while accessing {url}") from None
            except requests.exceptions.ConnectionError as e:
                if attempt < self.MAX_RETRIES - 1:
                    wait_time = self._exponential_backoff_with_jitter(attempt)
                    logger.warning(
                        f"Connection error. Retrying in {wait_time:.2f}s "
                        f"(attempt {attempt + 1}/{self.MAX_RETRIES})..."
                    )
                    time.sleep(wait_time)
                    continue
                raise APIError(f"Network error while accessing {url}: {e}") from e
            except requests.exceptions.RequestException as e:
                raise APIError(f"Network error while accessing {url}: {e}") from e

            # Authentication errors are never retried
            if resp.status_code == 401:
                break

            if resp.status_code in self.RETRYABLE_STATUS_CODES and attempt < self.MAX_RETRIES - 1:
                wait_time = self._exponential_backoff_with_jitter(attempt)
                logger.warning(
                    f"API returned {resp.status_code}. "
                    f"Retrying in {wait_time:.2f}s (attempt {attempt + 1}/{self.MAX_RETRIES})..."
                )
                time.sleep(wait_time)
                continue

            break

        if resp.status_code == 401:
            raise AuthenticationError(
                "API authentication failed. Please check your GITHUB_TOKEN."
            )

        if not resp.ok:
            try:
                detail = resp.json().get('message', resp.text)
            except ValueError:
                detail = resp.text
            logger.debug(f"{method} {url} failed with status {resp.status_code}: {detail}")

            if resp.status_code == 404:
                raise NotFoundError(f"HTTP 404: {detail} ({method} {endpoint})")
            raise APIError(f"HTTP {resp.status_code}: {detail} ({method} {endpoint})")

        return resp

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Run a GraphQL query against the GitHub API.

        Args:
            query: GraphQL query document
            variables: Query variables

        Returns:
            The ``data`` member of the response

        Raises:
            GraphQLError: If the response carries errors
            APIError: If the request fails or the body is not valid JSON
        """
        resp = self._request('POST', self.GRAPHQL_ENDPOINT, {'query': query, 'variables': variables or {}})
        try:
            body = resp.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON response from {self.BASE_URL}{self.GRAPHQL_ENDPOINT}: {e}") from e

        if body.get('errors'):
            raise GraphQLError(body['errors'])
        return body.get('data') or {}

    def delete(self, endpoint: str) -> None:
        """
        Issue a DELETE request to the GitHub REST API.

        Args:
            endpoint: API endpoint (without base URL)
        """
        self._request('DELETE', endpoint)
