"""Data models for sf-metasearch."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class MatchRecord:
    """A single line-level hit inside a metadata item."""

    line: int
    snippet: str
    content: str  # "N: text" lines around the hit
    context: str  # human label, e.g. "Line 5 (Apex Class)"


@dataclass
class CandidateItem:
    """One record enumerated for a metadata category."""

    category: str
    logical_id: str
    name: str
    label: str
    file_name: str
    body: str | None = None
    record: dict[str, Any] = field(default_factory=dict)

    @property
    def result_id(self) -> str:
        return f"{self.category}-{self.logical_id}"


@dataclass
class SearchResult:
    """A metadata item with the lines that matched the search term."""

    id: str
    category: str
    name: str
    label: str
    file_name: str
    matches: list[MatchRecord] = field(default_factory=list)
    total_matches: int = 0

    @classmethod
    def from_candidate(cls, item: CandidateItem, matches: list[MatchRecord]) -> "SearchResult":
        return cls(
            id=item.result_id,
            category=item.category,
            name=item.name,
            label=item.label,
            file_name=item.file_name,
            matches=list(matches),
            total_matches=len(matches),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SalesforceObject:
    """A queryable sObject from the global describe."""

    name: str
    label: str
    custom: bool
    queryable: bool


@dataclass
class PicklistValue:
    value: str
    label: str
    active: bool


@dataclass
class ChildRelationship:
    child_sobject: str
    field: str
    relationship_name: str | None


@dataclass
class SalesforceField:
    """A field from an sObject describe."""

    name: str
    label: str
    type: str
    length: int
    custom: bool
    required: bool
    unique: bool = False
    nillable: bool = True
    reference_to: list[str] = field(default_factory=list)
    relationship_name: str | None = None
    child_relationships: list[ChildRelationship] = field(default_factory=list)
    restricted_picklist: bool = False
    cascade_delete: bool = False
    picklist_values: list[PicklistValue] = field(default_factory=list)


@dataclass
class Reference:
    line: int
    snippet: str
    context: str | None = None


@dataclass
class MetadataReference:
    """A metadata item that may reference a given field."""

    id: str
    file_name: str
    type: str
    references: list[Reference] = field(default_factory=list)


@dataclass
class StandardValue:
    """One entry of a Salesforce StandardValueSet."""

    value: str
    label: str
    description: str | None = None


@dataclass
class FieldValues:
    """The picklist and standard values known for one field."""

    object_name: str
    field: SalesforceField
    standard_value_set: str | None = None
    standard_values: list[StandardValue] = field(default_factory=list)
