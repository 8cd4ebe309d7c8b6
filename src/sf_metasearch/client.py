"""Async client for the Salesforce REST, Tooling and Search APIs."""

import asyncio
import logging
from typing import Any

import httpx

from sf_metasearch.config import API_VERSION, DEFAULT_TIMEOUT
from sf_metasearch.errors import ApiError, SalesforceError, TokenExpiredError

logger = logging.getLogger(__name__)

SESSION_INVALID_CODE = "INVALID_SESSION_ID"


def raise_for_api_error(response: httpx.Response) -> None:
    """Raise TokenExpiredError or ApiError for a non-2xx response.

    Salesforce reports errors as a JSON list of {"errorCode", "message"}.
    A 401, the INVALID_SESSION_ID code, or a "Session expired" message all
    mean the bearer token is no longer accepted.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = None

    first: dict[str, Any] = {}
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        first = payload[0]
    error_code = first.get("errorCode")
    message = first.get("message")

    if (
        response.status_code == 401
        or error_code == SESSION_INVALID_CODE
        or (isinstance(message, str) and "Session expired" in message)
    ):
        raise TokenExpiredError(message or "Session expired or invalid")

    raise ApiError(response.status_code, message or response.text, error_code)


class SalesforceClient:
    """Bearer-token client bound to one org instance."""

    def __init__(
        self,
        instance_url: str,
        access_token: str,
        *,
        api_version: str = API_VERSION,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not instance_url:
            raise ValueError("Instance URL is required")
        if not access_token:
            raise ValueError("Access token is required")

        self.instance_url = instance_url.rstrip("/")
        self.api_version = api_version
        self._http = httpx.AsyncClient(
            base_url=self.instance_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "SalesforceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def data_path(self, path: str) -> str:
        return f"/services/data/{self.api_version}/{path}"

    async def get(
        self,
        path: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """GET a path, cancelling the request after `timeout` seconds."""
        logger.debug("GET %s", path)
        request = self._http.get(path, params=params, headers=headers)
        if timeout is None:
            response = await request
        else:
            response = await asyncio.wait_for(request, timeout)

        if response.is_error:
            raise_for_api_error(response)
        return response

    async def query(
        self, soql: str, *, tooling: bool = False, timeout: float | None = None
    ) -> list[dict[str, Any]]:
        """Run a SOQL query against the data or Tooling endpoint."""
        path = self.data_path("tooling/query/" if tooling else "query/")
        response = await self.get(path, params={"q": soql}, timeout=timeout)
        return _list_field(response.json(), "records")

    async def search(self, sosl: str, *, timeout: float | None = None) -> list[dict[str, Any]]:
        """Run a SOSL search and return its searchRecords."""
        response = await self.get(self.data_path("search/"), params={"q": sosl}, timeout=timeout)
        return _list_field(response.json(), "searchRecords")

    async def fetch_document(
        self, sobject_type: str, record_id: str, *, timeout: float | None = None
    ) -> str:
        """Fetch a Tooling sObject as XML text."""
        response = await self.get(
            self.data_path(f"tooling/sobjects/{sobject_type}/{record_id}"),
            headers={"Accept": "application/xml"},
            timeout=timeout,
        )
        return response.text

    async def describe_global(self, *, timeout: float | None = None) -> dict[str, Any]:
        response = await self.get(self.data_path("sobjects/"), timeout=timeout)
        return response.json()

    async def describe(self, object_name: str, *, timeout: float | None = None) -> dict[str, Any]:
        response = await self.get(self.data_path(f"sobjects/{object_name}/describe/"), timeout=timeout)
        return response.json()


def _list_field(payload: Any, key: str) -> list[dict[str, Any]]:
    if not isinstance(payload, dict):
        raise SalesforceError(f"Malformed response: expected an object with '{key}'")
    values = payload.get(key) or []
    if not isinstance(values, list):
        raise SalesforceError(f"Malformed response: '{key}' is not a list")
    return values
