"""Line-level matching over fetched metadata bodies."""

import re

from sf_metasearch.config import (
    MAX_DOCUMENT_MATCHES,
    MAX_FIELD_SNIPPET,
    MAX_MATCHES_PER_ITEM,
    SNIPPET_RADIUS,
)
from sf_metasearch.models import MatchRecord

ELLIPSIS = "..."

OPENING_TAG = re.compile(r"<(\w+)[^>]*>")

# Flow metadata element tags and how they read to a person
ELEMENT_LABELS = {
    "label": "Element Label",
    "name": "Element Name",
    "description": "Element Description",
    "helpText": "Help Text",
    "value": "Value",
    "stringValue": "String Value",
    "formula": "Formula",
    "elementReference": "Element Reference",
    "choiceText": "Choice Text",
    "defaultValue": "Default Value",
    "errorMessage": "Error Message",
    "validationRule": "Validation Rule",
    "screenField": "Screen Field",
    "inputParameter": "Input Parameter",
    "outputParameter": "Output Parameter",
    "variable": "Variable",
    "textTemplate": "Text Template",
    "recordLookup": "Record Lookup",
    "recordCreate": "Record Create",
    "recordUpdate": "Record Update",
    "assignment": "Assignment",
    "decision": "Decision",
    "screen": "Screen",
    "subflow": "Subflow",
    "loop": "Loop",
    "wait": "Wait",
    "actionCall": "Action Call",
    "collectionProcessor": "Collection Processor",
}


def compile_term(term: str) -> re.Pattern[str]:
    """Compile a user term into a literal, case-insensitive pattern."""
    return re.compile(re.escape(term), re.IGNORECASE)


def highlight_snippet(line: str, match: re.Match[str], radius: int = SNIPPET_RADIUS) -> str:
    """Trim a line to `radius` characters either side of a match."""
    start = max(0, match.start() - radius)
    end = min(len(line), match.end() + radius)
    snippet = line[start:end].strip()
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(line):
        snippet += ELLIPSIS
    return snippet


def context_block(lines: list[str], index: int) -> str:
    """Numbered previous, current and next lines, skipping blank neighbours."""
    block = []
    if index > 0 and lines[index - 1].strip():
        block.append(f"{index}: {lines[index - 1].strip()}")
    block.append(f"{index + 1}: {lines[index].strip()}")
    if index < len(lines) - 1 and lines[index + 1].strip():
        block.append(f"{index + 2}: {lines[index + 1].strip()}")
    return "\n".join(block)


def element_label(line: str, display_name: str) -> str:
    """Describe an XML line by its first opening tag."""
    tag = OPENING_TAG.search(line)
    if tag is None:
        return f"{display_name} XML"
    return ELEMENT_LABELS.get(tag.group(1), f"{display_name} XML ({tag.group(1)})")


def scan_body(
    body: str | None,
    pattern: re.Pattern[str],
    display_name: str,
    *,
    structured: bool = False,
    limit: int | None = None,
) -> list[MatchRecord]:
    """Find every matching line in a body, stopping at the cap.

    Plain source gets "Line N (<display name>)" labels; structured (XML)
    bodies are labelled by the element on the matching line.
    """
    if not body or not body.strip():
        return []
    if limit is None:
        limit = MAX_DOCUMENT_MATCHES if structured else MAX_MATCHES_PER_ITEM

    lines = body.split("\n")
    matches: list[MatchRecord] = []
    for index, line in enumerate(lines):
        if len(matches) >= limit:
            break
        hit = pattern.search(line)
        if hit is None:
            continue

        line_number = index + 1
        if structured:
            context = f"{element_label(line, display_name)} Line {line_number}"
        else:
            context = f"Line {line_number} ({display_name})"
        matches.append(
            MatchRecord(
                line=line_number,
                snippet=highlight_snippet(line, hit),
                content=context_block(lines, index),
                context=context,
            )
        )
    return matches


def scan_field(value: str | None, pattern: re.Pattern[str], caption: str, context: str, line: int) -> MatchRecord | None:
    """Match a single record field, e.g. a component name or description."""
    if not value or pattern.search(value) is None:
        return None
    snippet = value
    if len(snippet) > MAX_FIELD_SNIPPET:
        snippet = snippet[:MAX_FIELD_SNIPPET] + ELLIPSIS
    return MatchRecord(line=line, snippet=snippet, content=f"{caption}: {value}", context=context)
