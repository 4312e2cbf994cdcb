"""
Shared utilities.
"""
from bedflow.utils.logger import configure_logging

__all__ = [
    "configure_logging",
]
