"""CLI for sf-metasearch."""

import asyncio
import subprocess
from dataclasses import asdict
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from sf_metasearch import __version__
from sf_metasearch.config import (
    API_VERSION,
    ENV_ACCESS_TOKEN,
    ENV_API_VERSION,
    ENV_INSTANCE_URL,
    ENV_TOKEN_COMMAND,
    MAX_RESULTS,
)
from sf_metasearch.errors import SalesforceError, TokenExpiredError

app = typer.Typer(
    name="sf-metasearch",
    help="Search and browse Salesforce org metadata.",
    no_args_is_help=True,
)
console = Console()

InstanceUrl = Annotated[
    str | None,
    typer.Option("--instance-url", envvar=ENV_INSTANCE_URL, help="Org instance URL"),
]
AccessToken = Annotated[
    str | None,
    typer.Option("--token", envvar=ENV_ACCESS_TOKEN, help="OAuth access token", show_default=False),
]
ApiVersion = Annotated[
    str, typer.Option("--api-version", envvar=ENV_API_VERSION, help="REST API version")
]
JsonOutput = Annotated[bool, typer.Option("--json", help="Output as JSON")]
Verbose = Annotated[bool, typer.Option("--verbose", help="Log each remote call")]


def version_callback(value: bool) -> None:
    if value:
        console.print(f"sf-metasearch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Search and browse Salesforce org metadata."""
    pass


def require_credentials(instance_url: str | None, token: str | None) -> tuple[str, str]:
    if not instance_url or not token:
        console.print(
            f"[red]Error: instance URL and access token required "
            f"(--instance-url/--token or {ENV_INSTANCE_URL}/{ENV_ACCESS_TOKEN})[/red]"
        )
        raise typer.Exit(1)
    return instance_url, token


def report_failure(exc: Exception) -> None:
    """Print a failure and exit; an expired session exits with 2."""
    if isinstance(exc, TokenExpiredError):
        console.print(f"[red]Session expired: {exc.message}. Reauthorize and try again.[/red]")
        raise typer.Exit(2)
    console.print(f"[red]Error: {exc}[/red]")
    raise typer.Exit(1)


@app.command()
def search(
    term: Annotated[str, typer.Argument(help="Text to find in metadata")],
    instance_url: InstanceUrl = None,
    token: AccessToken = None,
    api_version: ApiVersion = API_VERSION,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Number of results")] = MAX_RESULTS,
    json_output: JsonOutput = False,
    token_command: Annotated[
        str | None,
        typer.Option(
            "--token-command",
            envvar=ENV_TOKEN_COMMAND,
            help="Shell command printing a fresh token, run once if the session expired",
        ),
    ] = None,
    verbose: Verbose = False,
) -> None:
    """Search code, flows and metadata definitions for a term."""
    if not term.strip():
        console.print("[red]Error: Search term required[/red]")
        raise typer.Exit(1)

    instance_url, token = require_credentials(instance_url, token)

    from sf_metasearch.logs import setup_logging
    from sf_metasearch.searcher import perform_search

    setup_logging(verbose)
    try:
        perform_search(
            term,
            instance_url,
            token,
            api_version=api_version,
            limit=limit,
            json_output=json_output,
            token_command=token_command,
        )
    except (SalesforceError, ValueError, subprocess.CalledProcessError) as exc:
        report_failure(exc)


@app.command()
def objects(
    instance_url: InstanceUrl = None,
    token: AccessToken = None,
    api_version: ApiVersion = API_VERSION,
    custom: Annotated[bool, typer.Option("--custom", "-c", help="Only custom objects")] = False,
    json_output: JsonOutput = False,
    verbose: Verbose = False,
) -> None:
    """List queryable objects."""
    instance_url, token = require_credentials(instance_url, token)

    from sf_metasearch.browse import fetch_objects
    from sf_metasearch.client import SalesforceClient
    from sf_metasearch.logs import setup_logging

    setup_logging(verbose)

    async def run():
        async with SalesforceClient(instance_url, token, api_version=api_version) as client:
            return await fetch_objects(client)

    try:
        object_list = asyncio.run(run())
    except (SalesforceError, ValueError) as exc:
        report_failure(exc)

    if custom:
        object_list = [obj for obj in object_list if obj.custom]

    if json_output:
        console.print_json(data={"objects": [asdict(obj) for obj in object_list]})
        return

    for obj in object_list:
        suffix = " [dim](custom)[/dim]" if obj.custom else ""
        console.print(f"[cyan]{obj.label}[/cyan] {obj.name}{suffix}")


@app.command()
def fields(
    object_name: Annotated[str, typer.Argument(help="Object API name, e.g. Account")],
    instance_url: InstanceUrl = None,
    token: AccessToken = None,
    api_version: ApiVersion = API_VERSION,
    json_output: JsonOutput = False,
    verbose: Verbose = False,
) -> None:
    """Describe the fields of an object."""
    instance_url, token = require_credentials(instance_url, token)

    from sf_metasearch.browse import fetch_object_fields
    from sf_metasearch.client import SalesforceClient
    from sf_metasearch.logs import setup_logging
    from sf_metasearch.standard_values import get_standard_value_set_name

    setup_logging(verbose)

    async def run():
        async with SalesforceClient(instance_url, token, api_version=api_version) as client:
            return await fetch_object_fields(client, object_name)

    try:
        field_list = asyncio.run(run())
    except (SalesforceError, ValueError) as exc:
        report_failure(exc)

    if json_output:
        console.print_json(data={"object": object_name, "fields": [asdict(f) for f in field_list]})
        return

    table = Table(title=object_name)
    table.add_column("Label", style="cyan")
    table.add_column("API Name")
    table.add_column("Type")
    table.add_column("Required")
    table.add_column("Values")
    for field in field_list:
        field_type = field.type
        if field.reference_to:
            field_type += f" ({', '.join(field.reference_to)})"
        values = []
        if field.picklist_values:
            values.append(f"{len(field.picklist_values)} picklist")
        value_set = get_standard_value_set_name(object_name, field.name)
        if value_set:
            values.append(f"standard: {value_set}")
        table.add_row(field.label, field.name, field_type, "yes" if field.required else "", ", ".join(values))
    console.print(table)


@app.command()
def values(
    object_name: Annotated[str, typer.Argument(help="Object API name")],
    field_name: Annotated[str, typer.Argument(help="Field API name")],
    instance_url: InstanceUrl = None,
    token: AccessToken = None,
    api_version: ApiVersion = API_VERSION,
    json_output: JsonOutput = False,
    verbose: Verbose = False,
) -> None:
    """Show picklist and standard values of a field."""
    instance_url, token = require_credentials(instance_url, token)

    from sf_metasearch.browse import fetch_field_values
    from sf_metasearch.client import SalesforceClient
    from sf_metasearch.logs import setup_logging

    setup_logging(verbose)

    async def run():
        async with SalesforceClient(instance_url, token, api_version=api_version) as client:
            return await fetch_field_values(client, object_name, field_name)

    try:
        field_values = asyncio.run(run())
    except (SalesforceError, ValueError) as exc:
        report_failure(exc)

    if json_output:
        console.print_json(data=asdict(field_values))
        return

    field = field_values.field
    console.print(f"[bold]{field.label}[/bold] {object_name}.{field.name} [dim]{field.type}[/dim]")

    if field.picklist_values:
        table = Table(title="Picklist values")
        table.add_column("Label", style="cyan")
        table.add_column("API Name")
        table.add_column("Active")
        for value in field.picklist_values:
            table.add_row(value.label, value.value, "yes" if value.active else "")
        console.print(table)

    if field_values.standard_values:
        table = Table(title=f"Standard values ({field_values.standard_value_set})")
        table.add_column("Label", style="cyan")
        table.add_column("API Name")
        table.add_column("Description", style="dim")
        for value in field_values.standard_values:
            table.add_row(value.label, value.value, value.description or "")
        console.print(table)

    if not field.picklist_values and not field_values.standard_values:
        console.print(f"[yellow]No picklist or standard values for {object_name}.{field.name}[/yellow]")


@app.command()
def refs(
    object_name: Annotated[str, typer.Argument(help="Object API name")],
    field_name: Annotated[str, typer.Argument(help="Field API name")],
    instance_url: InstanceUrl = None,
    token: AccessToken = None,
    api_version: ApiVersion = API_VERSION,
    json_output: JsonOutput = False,
    verbose: Verbose = False,
) -> None:
    """Find metadata that may reference a field."""
    instance_url, token = require_credentials(instance_url, token)

    from sf_metasearch.browse import find_field_references
    from sf_metasearch.client import SalesforceClient
    from sf_metasearch.logs import setup_logging

    setup_logging(verbose)

    async def run():
        async with SalesforceClient(instance_url, token, api_version=api_version) as client:
            return await find_field_references(client, object_name, field_name)

    try:
        references = asyncio.run(run())
    except (SalesforceError, ValueError) as exc:
        report_failure(exc)

    if json_output:
        console.print_json(data={"references": [asdict(ref) for ref in references]})
        return

    if not references:
        console.print(f"[yellow]No references found for {object_name}.{field_name}[/yellow]")
        return

    for ref in references:
        contexts = ", ".join(r.context for r in ref.references if r.context)
        console.print(f"[cyan]{ref.file_name}[/cyan] [dim]{ref.type}[/dim] {contexts}")


if __name__ == "__main__":
    app()
