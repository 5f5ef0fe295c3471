"""
Utility functions for CLI commands.

This module provides shared utilities for CLI operations.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import click

from ..repositories import Dataset, default_dataset


def load_json_file(file_path: Path, kind: str = "JSON") -> Any:
    """
    Load a JSON file.

    Args:
        file_path: Path to the file
        kind: What the file holds, used in error messages

    Returns:
        Parsed JSON value

    Raises:
        click.ClickException: If file doesn't exist or is invalid JSON
    """
    if not file_path.exists():
        raise click.ClickException(f"{kind} file not found: {file_path}")

    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {kind.lower()} file: {e}") from e


def load_dataset(file_path: Path | None) -> Dataset:
    """Load a dataset file, or the built-in sample data when no file is given."""
    if file_path is None:
        return default_dataset()

    data = load_json_file(file_path, kind="Dataset")
    if not isinstance(data, dict):
        raise click.ClickException(f"Dataset file must contain a JSON object: {file_path}")
    return Dataset.from_dict(data)


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO 8601 timestamp option.

    Raises:
        click.BadParameter: If the value is not ISO 8601
    """
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise click.BadParameter(f"Not an ISO 8601 timestamp: {value}", param_hint="--at") from e


def format_matrix_output(matrix: dict[str, dict[str, list[str]]], format_type: str) -> str:
    """
    Format a policy matrix for output.

    Args:
        matrix: Mapping of resource type to role capabilities
        format_type: Output format ('json' or 'pretty')

    Returns:
        Formatted string representation
    """
    if format_type == "pretty":
        lines = []
        for resource_type, roles in matrix.items():
            lines.append(f"{resource_type}:")
            for role, capabilities in roles.items():
                lines.append(f"  {role}: {', '.join(capabilities)}")
        return "\n".join(lines)
    return json.dumps(matrix, indent=2)
