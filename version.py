"""Version information for Stale Branch Pruner."""

__version__ = "1.0.0"
__description__ = (
    "Stale Branch Pruner - Delete old branches from a GitHub repository under a retention policy"
)

PYTHON_REQUIRES = ">=3.10"
