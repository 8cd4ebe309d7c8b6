"""Pytest fixtures for sf-metasearch tests."""

import asyncio
import re

import httpx
import pytest

FROM_CLAUSE = re.compile(r"\bFROM\s+(\w+)", re.IGNORECASE)


class FakeOrg:
    """A stand-in Salesforce org behind httpx.MockTransport.

    Responses are keyed by route:
      "tooling:<SObject>", "data:<SObject>"  query records
      "search"                               SOSL searchRecords
      "document:<Id>"                        XML body of a Tooling sObject
      "describe_global", "describe:<SObject>" describe payloads
    An entry in `failures` (an httpx.Response or an exception) replaces the
    normal response for that route; `delays` sleeps before answering.
    """

    def __init__(self) -> None:
        self.records: dict[str, list[dict]] = {}
        self.documents: dict[str, str] = {}
        self.payloads: dict[str, dict] = {}
        self.failures: dict[str, object] = {}
        self.delays: dict[str, float] = {}
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def route(self, request: httpx.Request) -> str:
        path = request.url.path
        if path.endswith("/tooling/query/"):
            return "tooling:" + FROM_CLAUSE.search(request.url.params["q"]).group(1)
        if path.endswith("/query/"):
            return "data:" + FROM_CLAUSE.search(request.url.params["q"]).group(1)
        if path.endswith("/search/"):
            return "search"
        if "/tooling/sobjects/" in path:
            return "document:" + path.rstrip("/").rsplit("/", 1)[1]
        if path.endswith("/describe/"):
            return "describe:" + path.rstrip("/").split("/")[-2]
        if path.endswith("/sobjects/"):
            return "describe_global"
        raise AssertionError(f"Unexpected request: {request.url}")

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = self.route(request)

        if key in self.delays:
            await asyncio.sleep(self.delays[key])

        failure = self.failures.get(key)
        if isinstance(failure, httpx.Response):
            return httpx.Response(failure.status_code, headers=failure.headers, content=failure.content)
        if isinstance(failure, Exception):
            raise failure

        if key == "search":
            return httpx.Response(200, json={"searchRecords": self.records.get("search", [])})
        if key.startswith("document:"):
            return httpx.Response(200, text=self.documents.get(key.split(":", 1)[1], ""))
        if key.startswith("describe"):
            return httpx.Response(200, json=self.payloads.get(key, {}))
        return httpx.Response(200, json={"totalSize": 0, "done": True, "records": self.records.get(key, [])})

    def routes_requested(self) -> list[str]:
        return [self.route(request) for request in self.requests]


@pytest.fixture
def org():
    """An empty fake org; tests fill in the records they need."""
    return FakeOrg()


@pytest.fixture
def apex_body():
    """An Apex class mentioning Account on lines 5 and 40."""
    lines = [f"    // filler line {n}" for n in range(1, 46)]
    lines[0] = "public with sharing class CustomerService {"
    lines[4] = "    public List<Account> loadAccounts() {"
    lines[39] = "        update new Account(Name = 'Acme');"
    lines[44] = "}"
    return "\n".join(lines)


@pytest.fixture
def flow_xml():
    """A small Flow metadata document."""
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<Flow xmlns="http://soap.sforce.com/2006/04/metadata">',
            "    <decisions>",
            "        <label>Check Account Status</label>",
            "        <name>Check_Status</name>",
            "    </decisions>",
            "",
            "    <formulas>",
            "        <formula>{!$Record.Account.Rating}</formula>",
            "    </formulas>",
            "</Flow>",
        ]
    )


@pytest.fixture
def expired_response():
    """The response Salesforce sends for a revoked or expired token."""
    return httpx.Response(
        401,
        json=[{"message": "Session expired or invalid", "errorCode": "INVALID_SESSION_ID"}],
    )
