"""
Evaluate command for CLI.

Runs one policy request against an in-memory lookup.
"""

import asyncio
import json
import sys
from pathlib import Path

import click

from ...dispatch import PolicyDispatcher
from ...engine import AccessDecisionEngine
from ...policies.table import ResourceType
from ...repositories import InMemoryLookup
from ..utils import load_dataset, parse_timestamp


@click.command()
@click.argument(
    "resource_type", type=click.Choice([rt.value for rt in ResourceType], case_sensitive=False)
)
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--dataset",
    "dataset_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON dataset to evaluate against (defaults to the built-in sample data)",
)
@click.option("--at", "at", help="Evaluate as of this ISO 8601 timestamp")
def evaluate(resource_type: str, payload_file: Path, dataset_file: Path | None, at: str | None) -> None:
    """
    Evaluate a policy request payload.

    RESOURCE_TYPE: assignment, attendance, grade or student

    PAYLOAD_FILE: Path to the JSON request body

    Examples:
        sis-policy evaluate grade request.json
        sis-policy evaluate attendance mark.json --at 2024-01-15T09:00:00
    """
    now = parse_timestamp(at)
    lookup = InMemoryLookup(load_dataset(dataset_file), clock=(lambda: now) if now else None)
    engine = AccessDecisionEngine(lookup)
    dispatcher = PolicyDispatcher(resource_type.lower(), engine.for_resource(resource_type.lower()))

    try:
        payload = payload_file.read_text(encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Failed to read payload file: {e}") from e

    response = asyncio.run(dispatcher.handle(payload))
    click.echo(json.dumps(response.body, indent=2))

    if response.status_code != 200:
        click.echo(click.style(f"Request failed with status {response.status_code}", fg="red"), err=True)
        sys.exit(1)
    sys.exit(0)
