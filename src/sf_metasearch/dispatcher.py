"""Fan-out of remote queries, one branch per metadata category."""

import logging
import re
from functools import partial

from sf_metasearch.categories import CATEGORIES, Category, CategorySpec
from sf_metasearch.client import SalesforceClient
from sf_metasearch.config import (
    DOCUMENT_FETCH_CONCURRENCY,
    DOCUMENT_FETCH_TIMEOUT,
    FALLBACK_SEARCH_TIMEOUT,
)
from sf_metasearch.errors import ApiError
from sf_metasearch.models import CandidateItem, MatchRecord, SearchResult
from sf_metasearch.scanner import compile_term, scan_body, scan_field
from sf_metasearch.soql import build_sosl, escape_sosl
from sf_metasearch.tasks import Branch, run_branches

logger = logging.getLogger(__name__)

FALLBACK_BRANCH = "sosl-fallback"

# SOSL object types searched by the fallback branch
FALLBACK_TYPES = {
    "ApexClass": Category.APEX_CLASS,
    "ApexTrigger": Category.APEX_TRIGGER,
}

Log = logging.Logger | logging.LoggerAdapter


async def dispatch(
    term: str,
    client: SalesforceClient,
    *,
    log: Log | None = None,
) -> tuple[list[list[SearchResult]], list[SearchResult]]:
    """Query every category concurrently.

    Returns the per-category results in declaration order, whatever order
    the branches finished in, and the SOSL fallback results separately.
    """
    log = log or logger
    pattern = compile_term(term)

    branches: list[Branch[SearchResult]] = []
    for spec in CATEGORIES.values():
        if spec.document_type:
            # Listing and each document fetch carry their own timeouts
            run = partial(search_documents, client, spec, pattern, log)
            branches.append(Branch(spec.category.value, run))
        else:
            run = partial(search_category, client, spec, pattern)
            branches.append(Branch(spec.category.value, run, timeout=spec.timeout))
    branches.append(
        Branch(FALLBACK_BRANCH, partial(search_fallback, client, term, log), timeout=FALLBACK_SEARCH_TIMEOUT)
    )

    *structured, fallback = await run_branches(branches, log=log)
    return structured, fallback


def match_fields(item: CandidateItem, spec: CategorySpec, pattern: re.Pattern[str]) -> list[MatchRecord]:
    """Match the term against the category's name and label columns."""
    matches = []
    for name_field in spec.name_fields:
        match = scan_field(
            item.record.get(name_field.api_name),
            pattern,
            name_field.caption,
            name_field.context,
            name_field.line,
        )
        if match is not None:
            matches.append(match)
    return matches


async def search_category(
    client: SalesforceClient, spec: CategorySpec, pattern: re.Pattern[str]
) -> list[SearchResult]:
    """List a category and keep the items whose fields or body match."""
    records = await client.query(spec.query, tooling=spec.tooling)

    results = []
    for record in records:
        item = spec.to_candidate(record)
        matches = match_fields(item, spec, pattern)
        if spec.body_field:
            matches += scan_body(item.body, pattern, spec.display_name)
        if matches:
            results.append(SearchResult.from_candidate(item, matches))
    return results


async def search_documents(
    client: SalesforceClient,
    spec: CategorySpec,
    pattern: re.Pattern[str],
    log: Log,
) -> list[SearchResult]:
    """List a category, then fetch and scan one XML document per item."""
    records = await client.query(spec.query, tooling=spec.tooling, timeout=spec.timeout)
    items = [spec.to_candidate(record) for record in records]

    fetches = [
        Branch(
            f"{spec.category.value}:{item.logical_id}",
            partial(scan_document, client, spec, item, pattern),
            timeout=DOCUMENT_FETCH_TIMEOUT,
        )
        for item in items
    ]
    documents = await run_branches(fetches, log=log, concurrency=DOCUMENT_FETCH_CONCURRENCY)

    results = []
    for item, document_matches in zip(items, documents):
        matches = match_fields(item, spec, pattern) + document_matches
        if matches:
            results.append(SearchResult.from_candidate(item, matches))
    return results


async def scan_document(
    client: SalesforceClient,
    spec: CategorySpec,
    item: CandidateItem,
    pattern: re.Pattern[str],
) -> list[MatchRecord]:
    body = await client.fetch_document(spec.document_type, item.logical_id)
    return scan_body(body, pattern, spec.display_name, structured=True)


async def search_fallback(client: SalesforceClient, term: str, log: Log) -> list[SearchResult]:
    """Broad SOSL search over Apex, for items the listings did not reach."""
    try:
        records = await client.search(build_sosl(term, tuple(FALLBACK_TYPES)))
    except ApiError as exc:
        if exc.error_code == "MALFORMED_SEARCH" or "mismatched character" in exc.message:
            log.warning("SOSL rejected term %r (escaped as %r)", term, escape_sosl(term))
        raise

    results = []
    for record in records:
        category = FALLBACK_TYPES.get((record.get("attributes") or {}).get("type"))
        if category is None:
            continue
        item = CATEGORIES[category].to_candidate(record)
        item.label = item.name
        match = MatchRecord(
            line=1,
            snippet=f'Contains "{term}"',
            content=f'Found via SOSL search - contains "{term}"',
            context="SOSL Search Result",
        )
        results.append(SearchResult.from_candidate(item, [match]))
    return results
