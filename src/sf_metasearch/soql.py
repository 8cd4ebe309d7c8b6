"""Helpers for building SOSL and SOQL query text."""

import re

# Reserved in SOSL: ? & | ! { } [ ] ( ) ^ ~ * : \ " ' + -
SOSL_RESERVED = re.compile(r"""([?&|!{}\[\]()^~*:\\"'+\-])""")

DEFAULT_RETURNING = ("ApexClass", "ApexTrigger")


def escape_sosl(term: str) -> str:
    """Backslash-escape every SOSL-reserved character in a search term."""
    return SOSL_RESERVED.sub(r"\\\1", term)


def build_sosl(term: str, object_types: tuple[str, ...] | list[str] = DEFAULT_RETURNING) -> str:
    """Build a FIND query over all fields returning Id and Name of each type."""
    returning = ", ".join(f"{object_type}(Id,Name)" for object_type in object_types)
    return f'FIND {{"{escape_sosl(term)}"}} IN ALL FIELDS RETURNING {returning}'


def quote_literal(value: str) -> str:
    """Quote a SOQL string literal."""
    return "'" + re.sub(r"([\\'])", r"\\\1", value) + "'"


def like_literal(value: str) -> str:
    """Quoted "contains" pattern for SOQL LIKE; % and _ in the value match literally."""
    return "'%" + re.sub(r"([\\'%_])", r"\\\1", value) + "%'"
