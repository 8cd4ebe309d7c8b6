"""Metadata categories searched by the aggregator."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from sf_metasearch.models import CandidateItem


class Category(str, Enum):
    APEX_CLASS = "apex-class"
    APEX_TRIGGER = "apex-trigger"
    FLOW = "flow"
    LWC_BUNDLE = "lwc-bundle"
    AURA_BUNDLE = "aura-bundle"
    VALIDATION_RULE = "validation-rule"
    PAGE_LAYOUT = "page-layout"
    RECORD_TYPE = "record-type"


@dataclass(frozen=True)
class NameField:
    """A record column matched directly against the term."""

    api_name: str
    caption: str
    context: str
    line: int


@dataclass(frozen=True)
class CategorySpec:
    """How to enumerate and present one metadata category."""

    category: Category
    display_name: str
    query: str
    name_field: str
    file_template: str
    label_template: str
    timeout: float
    tooling: bool = True
    default_name: str = ""
    body_field: str | None = None
    document_type: str | None = None
    name_fields: tuple[NameField, ...] = ()

    def to_candidate(self, record: dict[str, Any]) -> CandidateItem:
        """Build a CandidateItem from a query record."""
        name = record.get(self.name_field) or self.default_name
        values = {key: "" if value is None else value for key, value in record.items()}
        values[self.name_field] = name
        body = record.get(self.body_field) if self.body_field else None
        return CandidateItem(
            category=self.category.value,
            logical_id=str(record.get("Id", "")),
            name=name,
            label=_render(self.label_template, values) or name,
            file_name=_render(self.file_template, values),
            body=body,
            record=record,
        )


class _Blank(dict):
    def __missing__(self, key: str) -> str:
        return ""


def _render(template: str, values: dict[str, Any]) -> str:
    return template.format_map(_Blank(values))


CATEGORIES: dict[Category, CategorySpec] = {
    Category.APEX_CLASS: CategorySpec(
        category=Category.APEX_CLASS,
        display_name="Apex Class",
        query=(
            "SELECT Id, Name, Body, NamespacePrefix FROM ApexClass "
            "ORDER BY LastModifiedDate DESC LIMIT 50"
        ),
        name_field="Name",
        file_template="{Name}.cls",
        label_template="{Name}",
        timeout=8.0,
        body_field="Body",
    ),
    Category.APEX_TRIGGER: CategorySpec(
        category=Category.APEX_TRIGGER,
        display_name="Apex Trigger",
        query=(
            "SELECT Id, Name, Body, TableEnumOrId FROM ApexTrigger "
            "ORDER BY LastModifiedDate DESC LIMIT 30"
        ),
        name_field="Name",
        file_template="{Name}.trigger",
        label_template="{Name} ({TableEnumOrId})",
        timeout=8.0,
        body_field="Body",
    ),
    Category.FLOW: CategorySpec(
        category=Category.FLOW,
        display_name="Flow",
        query=(
            "SELECT Id, MasterLabel, Status FROM Flow "
            "WHERE Status = 'Active' AND MasterLabel != null "
            "ORDER BY LastModifiedDate DESC LIMIT 50"
        ),
        name_field="MasterLabel",
        file_template="{MasterLabel}.flow",
        label_template="{MasterLabel}",
        timeout=15.0,
        default_name="Flow",
        document_type="Flow",
        name_fields=(NameField("MasterLabel", "Flow Name", "Flow Name", 1),),
    ),
    Category.LWC_BUNDLE: CategorySpec(
        category=Category.LWC_BUNDLE,
        display_name="Lightning Web Component",
        query=(
            "SELECT Id, DeveloperName, MasterLabel, Description FROM LightningComponentBundle "
            "ORDER BY LastModifiedDate DESC LIMIT 30"
        ),
        name_field="DeveloperName",
        file_template="{DeveloperName}.js",
        label_template="{MasterLabel}",
        timeout=8.0,
        name_fields=(
            NameField("DeveloperName", "Component Name", "LWC Name", 1),
            NameField("MasterLabel", "Label", "LWC Label", 2),
            NameField("Description", "Description", "LWC Description", 3),
        ),
    ),
    Category.AURA_BUNDLE: CategorySpec(
        category=Category.AURA_BUNDLE,
        display_name="Aura Component",
        query=(
            "SELECT Id, DeveloperName, MasterLabel, Description FROM AuraDefinitionBundle "
            "ORDER BY LastModifiedDate DESC LIMIT 30"
        ),
        name_field="DeveloperName",
        file_template="{DeveloperName}.cmp",
        label_template="{MasterLabel}",
        timeout=8.0,
        name_fields=(
            NameField("DeveloperName", "Component Name", "Aura Name", 1),
            NameField("MasterLabel", "Label", "Aura Label", 2),
            NameField("Description", "Description", "Aura Description", 3),
        ),
    ),
    Category.VALIDATION_RULE: CategorySpec(
        category=Category.VALIDATION_RULE,
        display_name="Validation Rule",
        query=(
            "SELECT Id, ValidationName, ErrorMessage, ErrorDisplayField, Active "
            "FROM ValidationRule ORDER BY LastModifiedDate DESC LIMIT 30"
        ),
        name_field="ValidationName",
        file_template="{ValidationName}.validationRule",
        label_template="{ValidationName}",
        timeout=8.0,
        name_fields=(
            NameField("ValidationName", "Rule Name", "Validation Rule Name", 1),
            NameField("ErrorMessage", "Error Message", "Error Message", 2),
        ),
    ),
    Category.PAGE_LAYOUT: CategorySpec(
        category=Category.PAGE_LAYOUT,
        display_name="Page Layout",
        query=(
            "SELECT Id, Name, TableEnumOrId FROM Layout "
            "ORDER BY LastModifiedDate DESC LIMIT 30"
        ),
        name_field="Name",
        file_template="{TableEnumOrId}.{Name}.layout",
        label_template="{Name} ({TableEnumOrId})",
        timeout=8.0,
        name_fields=(NameField("Name", "Layout Name", "Page Layout Name", 1),),
    ),
    Category.RECORD_TYPE: CategorySpec(
        category=Category.RECORD_TYPE,
        display_name="Record Type",
        # RecordType exposes Description on the data API, not the Tooling API
        query=(
            "SELECT Id, Name, SobjectType, Description FROM RecordType "
            "ORDER BY LastModifiedDate DESC LIMIT 30"
        ),
        name_field="Name",
        file_template="{SobjectType}.{Name}.recordType",
        label_template="{Name} ({SobjectType})",
        timeout=10.0,
        tooling=False,
        name_fields=(
            NameField("Name", "Record Type Name", "Record Type Name", 1),
            NameField("Description", "Description", "Record Type Description", 2),
        ),
    ),
}


def get_spec(category: Category | str) -> CategorySpec:
    """Look up a category spec by enum member or slug."""
    return CATEGORIES[Category(category)]
