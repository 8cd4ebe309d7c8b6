"""Metadata content search: entry point and result display."""

import asyncio
import inspect
import logging
import subprocess
import time
from collections.abc import Awaitable, Callable

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from sf_metasearch.categories import get_spec
from sf_metasearch.client import SalesforceClient
from sf_metasearch.config import API_VERSION, MAX_RESULTS, MIN_TERM_LENGTH
from sf_metasearch.dispatcher import dispatch
from sf_metasearch.errors import SalesforceError, TokenExpiredError
from sf_metasearch.merger import combine
from sf_metasearch.models import SearchResult
from sf_metasearch.scanner import compile_term

console = Console()
logger = logging.getLogger(__name__)

TokenRefresher = Callable[[], str | Awaitable[str]]


async def search(
    term: str,
    instance_url: str,
    access_token: str,
    *,
    api_version: str = API_VERSION,
    limit: int = MAX_RESULTS,
    log: logging.Logger | logging.LoggerAdapter | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[SearchResult]:
    """Search an org's metadata for a term.

    Terms shorter than two characters return [] without touching the
    network. Raises TokenExpiredError when the org rejects the token, and
    ValueError when the instance URL or token is missing.
    """
    term = term.strip()
    if len(term) < MIN_TERM_LENGTH:
        return []

    log = log or logger
    started = time.perf_counter()
    async with SalesforceClient(
        instance_url, access_token, api_version=api_version, transport=transport
    ) as client:
        structured, fallback = await dispatch(term, client, log=log)

    results = combine(structured, fallback, limit=limit)
    duration_ms = int((time.perf_counter() - started) * 1000)
    log.info(
        "search %r: %d results in %dms",
        term,
        len(results),
        duration_ms,
        extra={"term": term, "results": len(results), "duration_ms": duration_ms},
    )
    return results


async def search_with_refresh(
    term: str,
    instance_url: str,
    access_token: str,
    refresh: TokenRefresher,
    **kwargs,
) -> list[SearchResult]:
    """Run a search, reauthorizing and retrying once if the token expired."""
    try:
        return await search(term, instance_url, access_token, **kwargs)
    except TokenExpiredError:
        logger.warning("Session expired; refreshing token and retrying search once")

    if inspect.iscoroutinefunction(refresh):
        token = await refresh()
    else:
        # Sync refreshers run in a worker thread
        token = await asyncio.to_thread(refresh)
    if inspect.isawaitable(token):
        token = await token
    return await search(term, instance_url, token, **kwargs)


def run_token_command(command: str) -> str:
    """Get a fresh access token from a shell command's stdout."""
    proc = subprocess.run(command, shell=True, capture_output=True, text=True, check=True)
    token = proc.stdout.strip()
    if not token:
        raise SalesforceError(f"Token command printed no token: {command}")
    return token


def highlight_matches(text: str, term: str) -> Text:
    """Highlight occurrences of the term in plain text."""
    rendered = Text(text)
    rendered.highlight_regex(compile_term(term), style="bold yellow")
    return rendered


def format_human_output(results: list[SearchResult], term: str, search_time_ms: int) -> None:
    """Format results for human-readable output."""
    if not results:
        console.print(f"[yellow]No metadata matched '{term}'. Try a different term.[/yellow]")
        return

    for i, result in enumerate(results, 1):
        header = Text()
        header.append(f"[{i}] ", style="bold cyan")
        header.append(result.label, style="green")
        header.append(f" | {get_spec(result.category).display_name}", style="dim")
        header.append(f" | {result.total_matches} matches", style="dim")

        body = Text()
        for match in result.matches:
            if body:
                body.append("\n\n")
            body.append(match.context, style="bold")
            body.append("\n")
            body.append_text(highlight_matches(match.content, term))

        console.print(
            Panel(body, title=header, subtitle=f"→ {result.file_name}", subtitle_align="left")
        )
        console.print()

    console.print("─" * 50)
    total = sum(r.total_matches for r in results)
    console.print(f"Found {total} matches in {len(results)} items in {search_time_ms}ms")


def format_json_output(results: list[SearchResult], term: str, search_time_ms: int) -> None:
    """Format results as JSON for programmatic use."""
    output = {
        "results": [{"rank": i + 1, **result.to_dict()} for i, result in enumerate(results)],
        "query": term,
        "total_results": len(results),
        "search_time_ms": search_time_ms,
    }
    console.print_json(data=output)


def perform_search(
    term: str,
    instance_url: str,
    access_token: str,
    *,
    api_version: str = API_VERSION,
    limit: int = MAX_RESULTS,
    json_output: bool = False,
    token_command: str | None = None,
) -> None:
    """Perform a search and display results."""
    start_time = time.time()

    if token_command:
        coro = search_with_refresh(
            term,
            instance_url,
            access_token,
            lambda: run_token_command(token_command),
            api_version=api_version,
            limit=limit,
        )
    else:
        coro = search(term, instance_url, access_token, api_version=api_version, limit=limit)
    results = asyncio.run(coro)

    search_time_ms = int((time.time() - start_time) * 1000)

    if json_output:
        format_json_output(results, term, search_time_ms)
    else:
        format_human_output(results, term, search_time_ms)
