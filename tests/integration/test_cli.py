"""Integration tests for the CLI."""

import json
import os
import subprocess
import sys

import pytest
from rich.console import Console
from typer.testing import CliRunner

from sf_metasearch import searcher
from sf_metasearch.cli import app
from sf_metasearch.errors import ApiError, SalesforceError, TokenExpiredError
from sf_metasearch.models import FieldValues, PicklistValue, SalesforceField
from sf_metasearch.standard_values import get_standard_value_set_name, get_standard_values

CREDENTIALS = ["--instance-url", "https://example.my.salesforce.com", "--token", "00Dxx0000000001!AQ4AQFakeToken"]

runner = CliRunner()


def run_cli(*args, env=None):
    clean_env = {key: value for key, value in os.environ.items() if not key.startswith("SF_")}
    clean_env.update(env or {})
    return subprocess.run(
        [sys.executable, "-m", "sf_metasearch.cli", *args],
        capture_output=True,
        text=True,
        env=clean_env,
    )


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr("sf_metasearch.logs.setup_logging", lambda verbose=False, console=None: None)


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr("sf_metasearch.cli.console", Console(width=200))


def test_cli_help():
    """Test that --help works."""
    result = run_cli("--help")
    assert result.returncode == 0
    assert "search" in result.stdout
    assert "objects" in result.stdout
    assert "fields" in result.stdout
    assert "refs" in result.stdout
    assert "values" in result.stdout


def test_cli_version():
    """Test that --version works."""
    result = run_cli("--version")
    assert result.returncode == 0
    assert "sf-metasearch" in result.stdout


def test_search_requires_credentials():
    result = run_cli("search", "Account")
    assert result.returncode == 1
    assert "access token required" in result.stdout


def test_search_short_term_needs_no_network():
    """A one-letter term returns no results without contacting the org."""
    result = run_cli("search", "a", env={"SF_INSTANCE_URL": "https://localhost.invalid", "SF_ACCESS_TOKEN": "x"})
    assert result.returncode == 0
    assert "No metadata matched" in result.stdout


def test_search_short_term_json_output():
    result = run_cli("search", "a", "--json", *CREDENTIALS)
    assert result.returncode == 0
    data = json.loads(result.stdout)
    assert data["results"] == []
    assert data["query"] == "a"
    assert "search_time_ms" in data


def test_search_blank_term():
    result = runner.invoke(app, ["search", "   ", *CREDENTIALS])
    assert result.exit_code == 1
    assert "Search term required" in result.output


def test_search_passes_options(monkeypatch):
    calls = []
    monkeypatch.setattr(searcher, "perform_search", lambda *args, **kwargs: calls.append((args, kwargs)))

    result = runner.invoke(app, ["search", "Account", "-n", "5", "--json", *CREDENTIALS])

    assert result.exit_code == 0
    args, kwargs = calls[0]
    assert args == ("Account", "https://example.my.salesforce.com", "00Dxx0000000001!AQ4AQFakeToken")
    assert kwargs["limit"] == 5
    assert kwargs["json_output"] is True


def test_search_reads_environment(monkeypatch):
    calls = []
    monkeypatch.setattr(searcher, "perform_search", lambda *args, **kwargs: calls.append(kwargs))

    result = runner.invoke(
        app,
        ["search", "Account"],
        env={
            "SF_INSTANCE_URL": "https://example.my.salesforce.com",
            "SF_ACCESS_TOKEN": "tok",
            "SF_API_VERSION": "v60.0",
            "SF_TOKEN_COMMAND": "sf org display --json",
        },
    )

    assert result.exit_code == 0
    assert calls[0]["api_version"] == "v60.0"
    assert calls[0]["token_command"] == "sf org display --json"


def test_expired_session_exits_2(monkeypatch):
    def expired(*args, **kwargs):
        raise TokenExpiredError("Session expired or invalid")

    monkeypatch.setattr(searcher, "perform_search", expired)

    result = runner.invoke(app, ["search", "Account", *CREDENTIALS])

    assert result.exit_code == 2
    assert "Session expired" in result.output


def test_api_error_exits_1(monkeypatch):
    def failing(*args, **kwargs):
        raise ApiError(503, "Service Unavailable")

    monkeypatch.setattr(searcher, "perform_search", failing)

    result = runner.invoke(app, ["search", "Account", *CREDENTIALS])

    assert result.exit_code == 1
    assert "Service Unavailable" in result.output


def test_values_lists_picklist_and_standard_values(monkeypatch):
    async def fake_field_values(client, object_name, field_name):
        field = SalesforceField(
            name="Rating",
            label="Account Rating",
            type="picklist",
            length=40,
            custom=False,
            required=False,
            picklist_values=[PicklistValue("Hot", "Hot", True), PicklistValue("Lukewarm", "Lukewarm", False)],
        )
        return FieldValues(
            object_name=object_name,
            field=field,
            standard_value_set=get_standard_value_set_name(object_name, field_name),
            standard_values=get_standard_values(object_name, field_name) or [],
        )

    monkeypatch.setattr("sf_metasearch.browse.fetch_field_values", fake_field_values)

    result = runner.invoke(app, ["values", "Account", "Rating", *CREDENTIALS])

    assert result.exit_code == 0
    assert "Picklist values" in result.output
    assert "Lukewarm" in result.output
    assert "Standard values (AccountRating)" in result.output
    assert "Medium priority account" in result.output


def test_values_json(monkeypatch):
    async def fake_field_values(client, object_name, field_name):
        field = SalesforceField(
            name="Region__c", label="Region", type="picklist", length=255, custom=True, required=False
        )
        return FieldValues(object_name=object_name, field=field)

    monkeypatch.setattr("sf_metasearch.browse.fetch_field_values", fake_field_values)

    result = runner.invoke(app, ["values", "Account", "Region__c", "--json", *CREDENTIALS])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["field"]["name"] == "Region__c"
    assert data["standard_value_set"] is None
    assert data["standard_values"] == []


def test_values_unknown_field_exits_1(monkeypatch):
    async def missing(client, object_name, field_name):
        raise SalesforceError(f"No field {field_name} on {object_name}")

    monkeypatch.setattr("sf_metasearch.browse.fetch_field_values", missing)

    result = runner.invoke(app, ["values", "Account", "Nope__c", *CREDENTIALS])

    assert result.exit_code == 1
    assert "No field Nope__c on Account" in result.output


def test_fields_table_shows_value_sources(monkeypatch):
    async def fake_fields(client, object_name):
        return [
            SalesforceField(name="Name", label="Account Name", type="string", length=255, custom=False, required=True),
            SalesforceField(
                name="Type",
                label="Account Type",
                type="picklist",
                length=40,
                custom=False,
                required=False,
                picklist_values=[PicklistValue("Prospect", "Prospect", True)],
            ),
        ]

    monkeypatch.setattr("sf_metasearch.browse.fetch_object_fields", fake_fields)

    result = runner.invoke(app, ["fields", "Account", *CREDENTIALS])

    assert result.exit_code == 0
    assert "1 picklist, standard: AccountType" in result.output
