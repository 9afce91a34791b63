import pytest

from walletpass.member_dashboard.catalog import (
    DEFAULT_PRESETS,
    SECTION_CATALOG,
    TOP,
    Preset,
    ProgramType,
    get_catalog_item,
    get_default_sections,
    get_sections_for_program_type,
    is_section_eligible,
)
from walletpass.member_dashboard.exceptions import UnknownPresetError


def test_catalog_keys_are_unique():
    keys = [item.key for item in SECTION_CATALOG]
    assert len(keys) == len(set(keys)) == 16


def test_anchors_reference_top_or_catalog_keys():
    keys = {item.key for item in SECTION_CATALOG}
    for item in SECTION_CATALOG:
        assert item.insert_after in (None, TOP) or item.insert_after in keys


@pytest.mark.parametrize("program_type", list(ProgramType))
@pytest.mark.parametrize("preset", list(Preset))
def test_preset_keys_are_catalog_items_for_the_program_type(program_type, preset):
    for key in DEFAULT_PRESETS[program_type][preset]:
        item = get_catalog_item(key)
        assert item is not None
        assert item.allows_program_type(program_type)


def test_get_sections_for_loyalty_with_points():
    keys = [item.key for item in get_sections_for_program_type(ProgramType.loyalty, {"points"})]
    assert keys == [
        "balanceHeader",
        "rewardsGrid",
        "howToEarn",
        "redeemGrid",
        "offersStrip",
        "qrCheckInButton",
        "activityFeed",
        "guideSteps",
    ]


def test_get_sections_without_capabilities_only_returns_ungated_items():
    items = get_sections_for_program_type(ProgramType.membership)
    assert all(not item.required_capabilities for item in items)
    assert "membershipHeader" not in [item.key for item in items]
    assert "rewardsGrid" in [item.key for item in items]


def test_get_sections_accepts_any_iterable_of_capabilities():
    assert get_sections_for_program_type(ProgramType.store_card, ["stored_value"]) == get_sections_for_program_type(
        ProgramType.store_card, frozenset({"stored_value"})
    )


def test_get_catalog_item():
    item = get_catalog_item("progressNextTier")
    assert item.required_capabilities == {"points", "tiers"}
    assert item.default_props == ("member.points_to_next_tier", "program.tiers.levels")
    assert get_catalog_item("doesNotExist") is None


def test_is_section_eligible():
    item = get_catalog_item("creditWallet")
    assert is_section_eligible(item, ProgramType.store_card, {"credit"})
    assert not is_section_eligible(item, ProgramType.loyalty, {"credit"})
    assert not is_section_eligible(item, ProgramType.membership, set())


def test_get_default_sections():
    assert get_default_sections(ProgramType.loyalty) == (
        "balanceHeader",
        "rewardsGrid",
        "offersStrip",
        "activityFeed",
    )
    assert get_default_sections(ProgramType.store_card, "minimal") == ("storeCardHeader", "balanceCard")
    assert get_default_sections("membership", Preset.full)[0] == "membershipHeader"


def test_get_default_sections_unknown_preset():
    with pytest.raises(UnknownPresetError):
        get_default_sections(ProgramType.loyalty, "maximal")

    # UnknownPresetError is also a ValueError
    with pytest.raises(ValueError):
        get_default_sections(ProgramType.loyalty, "maximal")


def test_catalog_item_to_dict():
    data = get_catalog_item("balanceHeader").to_dict()
    assert data == {
        "key": "balanceHeader",
        "label": "Points Balance",
        "description": "Display member's current points and tier status",
        "category": "core",
        "program_types": ["loyalty"],
        "required_capabilities": ["points"],
        "default_props": ["member.points_balance", "member.tier.name"],
        "insert_after": "top",
    }
