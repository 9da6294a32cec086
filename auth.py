#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Authentication Module for Stale Branch Pruner

Contains:
- GitHub token retrieval from the process environment
"""

import os
from typing import TypeAlias

from config import ConfigurationError
from logger_config import get_logger

# Initialize logger for this module
logger = get_logger(__name__)

# Type aliases for clarity
SecretValue: TypeAlias = str | None

TOKEN_ENV_VAR = 'GITHUB_TOKEN'


def get_github_token(env_var: str = TOKEN_ENV_VAR) -> str:
    """
    Read the GitHub token from the environment.

    Args:
        env_var: Name of the environment variable holding the token

    Returns:
        The token, stripped of surrounding whitespace

    Raises:
        ConfigurationError: If the variable is unset or blank
    """
    token: SecretValue = os.environ.get(env_var)
    if not token or not token.strip():
        raise ConfigurationError(f"{env_var} token not set")
    logger.debug(f"GitHub token loaded from {env_var}.")
    return token.strip()
