from walletpass.member_dashboard.catalog import get_catalog_item
from walletpass.member_dashboard.schemas import (
    SECTION_SCHEMAS,
    get_all_fields_for_section,
    get_section_schema,
    section_has_config,
)


def test_schemas_describe_catalog_sections():
    for section_key in SECTION_SCHEMAS:
        assert get_catalog_item(section_key) is not None


def test_field_keys_use_supported_namespaces():
    for section_key in SECTION_SCHEMAS:
        for field in get_all_fields_for_section(section_key):
            assert field.key.startswith(("settings.", "rules."))


def test_get_all_fields_lists_appearance_before_behavior():
    keys = [field.key for field in get_all_fields_for_section("qrCheckInButton")]
    assert keys == [
        "settings.style",
        "settings.showCooldown",
        "rules.loyalty.check_in.points",
        "rules.loyalty.check_in.cooldown_hours",
    ]


def test_section_without_schema():
    assert get_section_schema("guideSteps") is None
    assert get_all_fields_for_section("guideSteps") == []
    assert not section_has_config("guideSteps")
    assert section_has_config("activityFeed")


def test_schema_to_dict():
    data = get_section_schema("activityFeed").to_dict()
    assert data["behavior"] == []
    assert data["appearance"][0] == {
        "key": "settings.maxItems",
        "type": "number",
        "label": "Max items to show",
        "min": 3,
        "max": 20,
        "step": 1,
        "help": "Maximum number of recent activities to display",
    }
