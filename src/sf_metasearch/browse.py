"""Browse org schema: objects, fields and where a field is referenced."""

import logging
import re
from functools import partial
from typing import Any

from sf_metasearch.client import SalesforceClient
from sf_metasearch.config import REFERENCE_QUERY_LIMIT, REFERENCE_QUERY_TIMEOUT
from sf_metasearch.errors import SalesforceError
from sf_metasearch.models import (
    ChildRelationship,
    FieldValues,
    MetadataReference,
    PicklistValue,
    Reference,
    SalesforceField,
    SalesforceObject,
)
from sf_metasearch.soql import build_sosl, like_literal, quote_literal
from sf_metasearch.standard_values import get_standard_value_set_name, get_standard_values
from sf_metasearch.tasks import Branch, run_branches

logger = logging.getLogger(__name__)

ABBREVIATIONS = {"ID", "URL", "API", "CRM", "ERP", "SLA"}


def generate_label(name: str, original_label: str | None = None, *, field: bool = False) -> str:
    """Use the API label when it says more than the name, else derive one.

    Account_Region__c -> Account Region
    """
    if original_label and original_label.strip() and original_label != name:
        return original_label

    suffixes = r"(__c|__pc|__r)$" if field else r"__c$"
    words = re.sub(r"([a-z])([A-Z])", r"\1 \2", re.sub(suffixes, "", name).replace("_", " ")).split(" ")

    def title(word: str) -> str:
        if field and word.upper() in ABBREVIATIONS:
            return word.upper()
        return word[:1].upper() + word[1:].lower()

    return " ".join(title(word) for word in words)


async def fetch_objects(client: SalesforceClient) -> list[SalesforceObject]:
    """List queryable sObjects, sorted by label."""
    if not client.instance_url.startswith("https://"):
        raise ValueError(f"Invalid instance URL: {client.instance_url}")

    data = await client.describe_global()
    sobjects = data.get("sobjects") if isinstance(data, dict) else None
    if not isinstance(sobjects, list):
        raise SalesforceError("Invalid response structure from Salesforce API")

    objects = [
        SalesforceObject(
            name=obj["name"],
            label=generate_label(obj["name"], obj.get("label")),
            custom=bool(obj.get("custom")),
            queryable=True,
        )
        for obj in sobjects
        if obj.get("queryable")
    ]
    objects.sort(key=lambda o: o.label.casefold())
    logger.debug("Fetched %d queryable objects", len(objects))
    return objects


async def fetch_object_fields(client: SalesforceClient, object_name: str) -> list[SalesforceField]:
    """Describe the fields of one sObject."""
    data = await client.describe(object_name)
    fields = data.get("fields") if isinstance(data, dict) else None
    if not isinstance(fields, list):
        raise SalesforceError("Invalid response structure from Salesforce Fields API")

    child_relationships = data.get("childRelationships") or []
    return [_to_field(field, child_relationships) for field in fields]


async def fetch_field_values(client: SalesforceClient, object_name: str, field_name: str) -> FieldValues:
    """Describe one field and attach its StandardValueSet values, if any."""
    fields = await fetch_object_fields(client, object_name)
    wanted = field_name.casefold()
    match = next((f for f in fields if f.name.casefold() == wanted), None)
    if match is None:
        raise SalesforceError(f"No field {field_name} on {object_name}")

    return FieldValues(
        object_name=object_name,
        field=match,
        standard_value_set=get_standard_value_set_name(object_name, match.name),
        standard_values=get_standard_values(object_name, match.name) or [],
    )


def _to_field(field: dict[str, Any], child_relationships: list[dict[str, Any]]) -> SalesforceField:
    nillable = bool(field.get("nillable"))
    return SalesforceField(
        name=field["name"],
        label=generate_label(field["name"], field.get("label"), field=True),
        type=field.get("type", ""),
        length=field.get("length") or 0,
        custom=bool(field.get("custom")),
        required=not nillable and not field.get("defaultedOnCreate"),
        unique=bool(field.get("unique")),
        nillable=nillable,
        reference_to=field.get("referenceTo") or [],
        relationship_name=field.get("relationshipName"),
        child_relationships=[
            ChildRelationship(
                child_sobject=rel["childSObject"],
                field=rel["field"],
                relationship_name=rel.get("relationshipName"),
            )
            for rel in child_relationships
            if rel.get("field") == field["name"]
        ],
        restricted_picklist=bool(field.get("restrictedPicklist")),
        cascade_delete=bool(field.get("cascadeDelete")),
        picklist_values=[
            PicklistValue(value=p.get("value", ""), label=p.get("label", ""), active=bool(p.get("active")))
            for p in field.get("picklistValues") or []
        ],
    )


# (branch, tooling, SOQL, id prefix, file template, type, context)
_LIKE_QUERIES = (
    (
        "apex-class",
        True,
        "SELECT Id, Name FROM ApexClass WHERE Name LIKE {needle} LIMIT {limit}",
        "apex-class",
        "{Name}.cls",
        "Apex Class",
        "Tooling: ApexClass.Name LIKE",
    ),
    (
        "apex-trigger",
        True,
        "SELECT Id, Name FROM ApexTrigger WHERE Name LIKE {needle} LIMIT {limit}",
        "apex-trigger",
        "{Name}.trigger",
        "Apex Trigger",
        "Tooling: ApexTrigger.Name LIKE",
    ),
    (
        "aura-bundle",
        True,
        "SELECT Id, DeveloperName FROM AuraDefinitionBundle WHERE DeveloperName LIKE {needle} LIMIT {limit}",
        "aura",
        "{DeveloperName}.cmp",
        "Aura Bundle",
        "Tooling: AuraDefinitionBundle.DeveloperName LIKE",
    ),
    (
        "lwc-bundle",
        True,
        "SELECT Id, DeveloperName FROM LightningComponentBundle WHERE DeveloperName LIKE {needle} LIMIT {limit}",
        "lwc",
        "{DeveloperName}.js",
        "LWC Bundle",
        "Tooling: LightningComponentBundle.DeveloperName LIKE",
    ),
    (
        "validation-rule",
        True,
        "SELECT Id, ValidationName FROM ValidationRule WHERE ValidationName LIKE {needle} LIMIT {limit}",
        "vr",
        "{object}.{ValidationName}.validationRule",
        "Validation Rule",
        "Tooling: ValidationRule.ValidationName LIKE",
    ),
    (
        "record-type",
        False,
        "SELECT Id, Name, SobjectType FROM RecordType "
        "WHERE SobjectType = {object_literal} AND Name LIKE {needle} LIMIT {limit}",
        "recordtype",
        "{SobjectType}.{Name}.recordType",
        "Record Type",
        "Standard API: RecordType.Name LIKE",
    ),
    (
        "page-layout",
        True,
        "SELECT Id, Name, TableEnumOrId FROM Layout "
        "WHERE TableEnumOrId = {object_literal} AND Name LIKE {needle} LIMIT {limit}",
        "layout",
        "{TableEnumOrId}.{Name}.layout",
        "Page Layout",
        "Tooling: Layout.Name LIKE",
    ),
)

_SOSL_TYPES = {
    "ApexClass": ("apex-class", ".cls", "Apex Class"),
    "ApexTrigger": ("apex-trigger", ".trigger", "Apex Trigger"),
}

FLOW_QUERY = (
    "SELECT Id, MasterLabel, Status FROM Flow "
    "WHERE Status = 'Active' AND MasterLabel != null LIMIT {limit}"
)


async def find_field_references(
    client: SalesforceClient,
    object_name: str,
    field_name: str,
    *,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[MetadataReference]:
    """Find metadata whose name or source may mention a field.

    Runs SOSL over Apex plus name LIKE queries over the other metadata
    types concurrently; a failing lookup contributes nothing. References
    are deduplicated by id.
    """
    log = log or logger
    params = {
        "needle": like_literal(field_name),
        "object_literal": quote_literal(object_name),
        "limit": REFERENCE_QUERY_LIMIT,
    }

    def reference(ref_id: str, file_name: str, type_name: str, context: str) -> MetadataReference:
        return MetadataReference(
            id=ref_id,
            file_name=file_name,
            type=type_name,
            references=[Reference(line=1, snippet=f"…{field_name}…", context=context)],
        )

    async def sosl() -> list[MetadataReference]:
        refs = []
        for record in await client.search(build_sosl(field_name)):
            object_type = (record.get("attributes") or {}).get("type")
            if object_type not in _SOSL_TYPES:
                continue
            prefix, extension, type_name = _SOSL_TYPES[object_type]
            refs.append(
                reference(f"{prefix}-{record['Id']}", f"{record['Name']}{extension}", type_name, "Found via SOSL")
            )
        return refs

    async def like(
        tooling: bool, soql: str, prefix: str, file_template: str, type_name: str, context: str
    ) -> list[MetadataReference]:
        records = await client.query(soql.format(**params), tooling=tooling)
        refs = []
        for record in records:
            values = {"object": object_name, **{key: value or "" for key, value in record.items()}}
            refs.append(reference(f"{prefix}-{record['Id']}", file_template.format_map(values), type_name, context))
        return refs

    async def flows() -> list[MetadataReference]:
        # Flow labels cannot be filtered with LIKE, so match client-side
        records = await client.query(FLOW_QUERY.format(**params), tooling=True)
        needle = field_name.lower()
        return [
            reference(f"flow-{record['Id']}", f"{record['MasterLabel']}.flow", "Flow", "Flow: MasterLabel contains term")
            for record in records
            if record.get("MasterLabel") and needle in record["MasterLabel"].lower()
        ]

    branches: list[Branch[MetadataReference]] = [Branch("sosl", sosl, timeout=REFERENCE_QUERY_TIMEOUT)]
    for name, tooling, soql, prefix, file_template, type_name, context in _LIKE_QUERIES:
        run = partial(like, tooling, soql, prefix, file_template, type_name, context)
        branches.append(Branch(name, run, timeout=REFERENCE_QUERY_TIMEOUT))
    branches.append(Branch("flow", flows, timeout=REFERENCE_QUERY_TIMEOUT))

    unique: dict[str, MetadataReference] = {}
    for refs in await run_branches(branches, log=log):
        for ref in refs:
            if ref.id in unique:
                unique[ref.id].references.extend(ref.references)
            else:
                unique[ref.id] = ref
    return list(unique.values())
