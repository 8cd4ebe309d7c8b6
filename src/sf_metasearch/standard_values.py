"""Values of Salesforce StandardValueSets behind standard picklist fields.

Describe calls do not say which StandardValueSet backs a standard field,
so the common ones are tabled here.
"""

from sf_metasearch.models import StandardValue


def _values(*entries: tuple[str, ...]) -> list[StandardValue]:
    """Build values from (value, label) or (value, label, description) tuples."""
    return [StandardValue(*entry) for entry in entries]


def _plain(*names: str) -> list[StandardValue]:
    return [StandardValue(name, name) for name in names]


STANDARD_VALUE_SETS: dict[str, list[StandardValue]] = {
    "AccountType": _values(
        ("Prospect", "Prospect", "Potential customer"),
        ("Customer - Direct", "Customer - Direct", "Direct customer"),
        ("Customer - Channel", "Customer - Channel", "Channel customer"),
        ("Channel Partner / Reseller", "Channel Partner / Reseller", "Partner or reseller"),
        ("Installation Partner", "Installation Partner", "Installation partner"),
        ("Technology Partner", "Technology Partner", "Technology partner"),
        ("Other", "Other", "Other type"),
    ),
    "Industry": _plain(
        "Agriculture",
        "Apparel",
        "Banking",
        "Biotechnology",
        "Chemicals",
        "Communications",
        "Construction",
        "Consulting",
        "Education",
        "Electronics",
        "Energy",
        "Engineering",
        "Entertainment",
        "Environmental",
        "Finance",
        "Food & Beverage",
        "Government",
        "Healthcare",
        "Hospitality",
        "Insurance",
        "Machinery",
        "Manufacturing",
        "Media",
        "Not For Profit",
        "Other",
        "Recreation",
        "Retail",
        "Shipping",
        "Technology",
        "Telecommunications",
        "Transportation",
        "Utilities",
    ),
    "AccountRating": _values(
        ("Hot", "Hot", "High priority account"),
        ("Warm", "Warm", "Medium priority account"),
        ("Cold", "Cold", "Low priority account"),
    ),
    "Salutation": _plain("Mr.", "Ms.", "Mrs.", "Dr.", "Prof."),
    "LeadSource": _plain("Web", "Phone Inquiry", "Partner Referral", "Purchased List", "Other"),
    "LeadStatus": _values(
        ("Open - Not Contacted", "Open - Not Contacted", "New lead not yet contacted"),
        ("Working - Contacted", "Working - Contacted", "Lead has been contacted"),
        ("Closed - Converted", "Closed - Converted", "Lead converted to opportunity"),
        ("Closed - Not Converted", "Closed - Not Converted", "Lead closed without conversion"),
    ),
    "OpportunityStage": _values(
        ("Prospecting", "Prospecting", "Initial stage"),
        ("Qualification", "Qualification", "Qualifying the opportunity"),
        ("Needs Analysis", "Needs Analysis", "Analyzing customer needs"),
        ("Value Proposition", "Value Proposition", "Presenting value proposition"),
        ("Id. Decision Makers", "Id. Decision Makers", "Identifying decision makers"),
        ("Perception Analysis", "Perception Analysis", "Analyzing customer perception"),
        ("Proposal/Price Quote", "Proposal/Price Quote", "Providing proposal or quote"),
        ("Negotiation/Review", "Negotiation/Review", "Negotiating terms"),
        ("Closed Won", "Closed Won", "Successfully closed"),
        ("Closed Lost", "Closed Lost", "Lost opportunity"),
    ),
    "OpportunityType": _plain(
        "Existing Customer - Upgrade",
        "Existing Customer - Replacement",
        "Existing Customer - Downgrade",
        "New Customer",
    ),
    "CaseStatus": _values(
        ("New", "New", "Newly created case"),
        ("Working", "Working", "Case being worked on"),
        ("Escalated", "Escalated", "Case has been escalated"),
        ("Closed", "Closed", "Case is closed"),
    ),
    "CasePriority": _values(
        ("High", "High", "High priority case"),
        ("Medium", "Medium", "Medium priority case"),
        ("Low", "Low", "Low priority case"),
    ),
    "CaseOrigin": _plain("Phone", "Email", "Web"),
    "CaseType": _plain("Question", "Problem", "Feature Request"),
    "CaseReason": _plain(
        "Installation", "Equipment Complexity", "Performance", "Breakdown", "Equipment Design", "Other"
    ),
    "TaskStatus": _values(
        ("Not Started", "Not Started", "Task not yet started"),
        ("In Progress", "In Progress", "Task in progress"),
        ("Completed", "Completed", "Task completed"),
        ("Waiting on someone else", "Waiting on someone else", "Waiting for others"),
        ("Deferred", "Deferred", "Task deferred"),
    ),
    "TaskPriority": _values(
        ("High", "High", "High priority task"),
        ("Normal", "Normal", "Normal priority task"),
        ("Low", "Low", "Low priority task"),
    ),
    "TaskType": _plain("Call", "Email", "Meeting", "Other"),
    "EventType": _plain("Call", "Meeting", "Other"),
    "CampaignStatus": _values(
        ("Planned", "Planned", "Campaign is planned"),
        ("In Progress", "In Progress", "Campaign is active"),
        ("Completed", "Completed", "Campaign completed"),
        ("Aborted", "Aborted", "Campaign was aborted"),
    ),
    "CampaignType": _plain(
        "Conference",
        "Webinar",
        "Trade Show",
        "Public Relations",
        "Partners",
        "Referral Program",
        "Advertisement",
        "Banner Ads",
        "Direct Mail",
        "Email",
        "Telemarketing",
        "Other",
    ),
    "ContractStatus": _values(
        ("Draft", "Draft", "Contract in draft"),
        ("In Approval Process", "In Approval Process", "Contract being approved"),
        ("Activated", "Activated", "Contract is active"),
        ("Terminated", "Terminated", "Contract terminated"),
        ("Expired", "Expired", "Contract expired"),
    ),
    "ProductFamily": _plain("None"),
    "UserType": _values(
        ("Standard", "Standard", "Standard user"),
        ("PowerCustomerSuccess", "Customer Community Plus", "Customer Community Plus user"),
        ("PowerPartner", "Partner Community", "Partner Community user"),
        ("CustomerSuccess", "Customer Community", "Customer Community user"),
        ("CsnOnly", "Chatter Only", "Chatter only user"),
        ("CspLitePortal", "High Volume Customer Portal", "High volume portal user"),
    ),
}

# Object -> field -> StandardValueSet name
STANDARD_FIELD_MAPPING: dict[str, dict[str, str]] = {
    "Account": {"Type": "AccountType", "Industry": "Industry", "Rating": "AccountRating"},
    "Contact": {"Salutation": "Salutation", "LeadSource": "LeadSource"},
    "Lead": {
        "Status": "LeadStatus",
        "LeadSource": "LeadSource",
        "Rating": "AccountRating",
        "Industry": "Industry",
    },
    "Opportunity": {"StageName": "OpportunityStage", "Type": "OpportunityType", "LeadSource": "LeadSource"},
    "Case": {
        "Status": "CaseStatus",
        "Priority": "CasePriority",
        "Origin": "CaseOrigin",
        "Type": "CaseType",
        "Reason": "CaseReason",
    },
    "Task": {"Status": "TaskStatus", "Priority": "TaskPriority", "Type": "TaskType"},
    "Event": {"Type": "EventType"},
    "Campaign": {"Status": "CampaignStatus", "Type": "CampaignType"},
    "Contract": {"Status": "ContractStatus"},
    "Product2": {"Family": "ProductFamily"},
    "User": {"UserType": "UserType"},
}


def get_standard_value_set_name(object_name: str, field_name: str) -> str | None:
    return STANDARD_FIELD_MAPPING.get(object_name, {}).get(field_name)


def get_standard_values(object_name: str, field_name: str) -> list[StandardValue] | None:
    """Standard values for a field, or None when no value set is known."""
    value_set = get_standard_value_set_name(object_name, field_name)
    if value_set is None:
        return None
    return STANDARD_VALUE_SETS.get(value_set)


def has_standard_values(object_name: str, field_name: str) -> bool:
    return get_standard_values(object_name, field_name) is not None
