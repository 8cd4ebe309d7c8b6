"""Tests for category definitions."""

import pytest

from sf_metasearch.categories import CATEGORIES, Category, get_spec


def test_every_category_is_defined():
    assert set(CATEGORIES) == set(Category)


def test_get_spec_accepts_slug():
    assert get_spec("apex-trigger") is CATEGORIES[Category.APEX_TRIGGER]
    with pytest.raises(ValueError):
        get_spec("apex-page")


def test_apex_class_candidate():
    item = get_spec(Category.APEX_CLASS).to_candidate({"Id": "01p1", "Name": "CustomerService", "Body": "x"})

    assert item.result_id == "apex-class-01p1"
    assert item.name == "CustomerService"
    assert item.label == "CustomerService"
    assert item.file_name == "CustomerService.cls"
    assert item.body == "x"


def test_trigger_label_includes_object():
    item = get_spec(Category.APEX_TRIGGER).to_candidate(
        {"Id": "01q1", "Name": "AccountTrigger", "Body": "", "TableEnumOrId": "Account"}
    )

    assert item.label == "AccountTrigger (Account)"
    assert item.file_name == "AccountTrigger.trigger"


def test_missing_template_values_render_blank():
    item = get_spec(Category.PAGE_LAYOUT).to_candidate({"Id": "00h1", "Name": "Account Layout", "TableEnumOrId": None})

    assert item.file_name == ".Account Layout.layout"
    assert item.label == "Account Layout ()"


def test_label_falls_back_to_name():
    item = get_spec(Category.LWC_BUNDLE).to_candidate({"Id": "0Rb1", "DeveloperName": "accountCard", "MasterLabel": None})

    assert item.label == "accountCard"
    assert item.file_name == "accountCard.js"


def test_flow_default_name():
    item = get_spec(Category.FLOW).to_candidate({"Id": "3001", "MasterLabel": None})

    assert item.name == "Flow"
    assert item.file_name == "Flow.flow"


def test_record_types_use_data_endpoint():
    assert CATEGORIES[Category.RECORD_TYPE].tooling is False
    assert all(spec.tooling for category, spec in CATEGORIES.items() if category is not Category.RECORD_TYPE)
