"""
Policies command for CLI.

Prints the role capability matrix.
"""

import click

from ...policies.table import ResourceType, policy_matrix
from ..utils import format_matrix_output


@click.command()
@click.argument(
    "resource_type",
    required=False,
    type=click.Choice([rt.value for rt in ResourceType], case_sensitive=False),
)
@click.option(
    "--format",
    "format_type",
    type=click.Choice(["json", "pretty"], case_sensitive=False),
    default="pretty",
    help="Output format",
)
def policies(resource_type: str | None, format_type: str) -> None:
    """
    Show the capabilities each role has.

    RESOURCE_TYPE: Limit output to one resource type

    Examples:
        sis-policy policies
        sis-policy policies grade --format json
    """
    resource_types = [ResourceType(resource_type.lower())] if resource_type else list(ResourceType)
    matrix = {rt.value: policy_matrix(rt) for rt in resource_types}
    click.echo(format_matrix_output(matrix, format_type.lower()))
