"""Merge, deduplicate and rank search results from every branch."""

from collections.abc import Iterable

from sf_metasearch.config import MAX_MATCHES_PER_ITEM, MAX_RESULTS
from sf_metasearch.models import MatchRecord, SearchResult


def merge_matches(*groups: Iterable[MatchRecord], limit: int = MAX_MATCHES_PER_ITEM) -> list[MatchRecord]:
    """Union match lists, dropping repeats of the same (line, snippet)."""
    seen: set[tuple[int, str]] = set()
    merged: list[MatchRecord] = []
    for group in groups:
        for match in group:
            key = (match.line, match.snippet)
            if key in seen:
                continue
            seen.add(key)
            merged.append(match)
    merged.sort(key=lambda m: m.line)
    return merged[:limit]


def _check(result: object) -> SearchResult:
    if not isinstance(result, SearchResult):
        raise TypeError(f"Expected SearchResult, got {type(result).__name__}")
    return result


def _copy(result: SearchResult) -> SearchResult:
    matches = merge_matches(result.matches)
    return SearchResult(
        id=result.id,
        category=result.category,
        name=result.name,
        label=result.label,
        file_name=result.file_name,
        matches=matches,
        total_matches=len(matches),
    )


def merge_results(
    branch_results: Iterable[Iterable[SearchResult]],
    fallback: Iterable[SearchResult] = (),
) -> list[SearchResult]:
    """Group results by id, merging their matches.

    The first result seen for an id keeps its label and file name; later
    duplicates only contribute matches. Fallback results are added only for
    ids no structured branch produced.
    """
    grouped: dict[str, SearchResult] = {}
    for results in branch_results:
        for result in results:
            result = _check(result)
            existing = grouped.get(result.id)
            if existing is None:
                grouped[result.id] = _copy(result)
            else:
                existing.matches = merge_matches(existing.matches, result.matches)
                existing.total_matches = len(existing.matches)

    for result in fallback:
        result = _check(result)
        if result.id not in grouped:
            grouped[result.id] = _copy(result)
    return list(grouped.values())


def rank_key(result: SearchResult) -> tuple[int, str, str, str]:
    return (-result.total_matches, result.name.casefold(), result.category, result.id)


def rank_results(results: Iterable[SearchResult], limit: int = MAX_RESULTS) -> list[SearchResult]:
    """Most matches first, then by name; truncated to `limit`."""
    return sorted(results, key=rank_key)[:limit]


def combine(
    branch_results: Iterable[Iterable[SearchResult]],
    fallback: Iterable[SearchResult] = (),
    limit: int = MAX_RESULTS,
) -> list[SearchResult]:
    """Merge every branch's results and return the ranked, truncated list."""
    return rank_results(merge_results(branch_results, fallback), limit=limit)
