"""
CLI commands.
"""

from .evaluate import evaluate
from .policies import policies

__all__ = ["evaluate", "policies"]
