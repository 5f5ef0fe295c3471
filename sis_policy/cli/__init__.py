"""
Command line interface for SIS_POLICY.
"""

from .main import cli

__all__ = ["cli"]
