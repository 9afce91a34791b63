import pytest

from walletpass.member_dashboard import mutations
from walletpass.member_dashboard.catalog import SECTION_CATALOG, CatalogItem, ProgramType, get_catalog_item
from walletpass.member_dashboard.mutations import (
    disable_section,
    disable_sections,
    enable_section,
    enable_sections,
    get_enabled_sections,
    is_section_enabled,
    reorder_sections,
    reset_to_default_sections,
    try_disable_section,
    try_enable_section,
    try_enable_sections,
    try_reorder_sections,
    try_reset_to_default_sections,
    try_update_program_config,
    try_update_section_config,
    try_update_section_props,
    update_program_config,
    update_section_config,
)
from walletpass.member_dashboard.types import ProgramSpecification, RejectionReason, UIContract, UISection

LOYALTY_CAPS = frozenset({"points"})


def make_spec(program_type=ProgramType.loyalty, sections=(), **kwargs) -> ProgramSpecification:
    return ProgramSpecification(
        version="1.0",
        program_id="draft-test",
        program_type=program_type,
        ui_contract=UIContract(
            layout=f"{program_type}_dashboard_v1",
            sections=tuple(UISection(key=key, props=get_catalog_item(key).default_props) for key in sections),
        ),
        **kwargs,
    )


@pytest.fixture
def loyalty_spec():
    return reset_to_default_sections(make_spec(), "standard", LOYALTY_CAPS)


# =============================================================================
# Scenarios
# =============================================================================


def test_standard_loyalty_preset(loyalty_spec):
    assert get_enabled_sections(loyalty_spec) == ("balanceHeader", "rewardsGrid", "offersStrip", "activityFeed")


def test_enable_requires_all_capabilities(loyalty_spec):
    result = try_enable_section(loyalty_spec, "progressNextTier", ["points"])
    assert not result.ok
    assert result.reason == RejectionReason.missing_capabilities
    assert result.spec is loyalty_spec

    spec = enable_section(loyalty_spec, "progressNextTier", ["points", "tiers"])
    assert get_enabled_sections(spec)[-1] == "progressNextTier"
    assert len(spec.ui_contract.sections) == 5


def test_top_anchor_is_restored_after_disable(loyalty_spec):
    spec = disable_section(loyalty_spec, "balanceHeader")
    spec = enable_section(spec, "howToEarn", LOYALTY_CAPS)
    spec = enable_section(spec, "balanceHeader", LOYALTY_CAPS)
    assert get_enabled_sections(spec)[0] == "balanceHeader"
    assert get_enabled_sections(spec)[1:] == ("rewardsGrid", "offersStrip", "activityFeed", "howToEarn")


# =============================================================================
# enable_section
# =============================================================================


def test_enable_section_is_idempotent(loyalty_spec):
    once = enable_section(loyalty_spec, "howToEarn", LOYALTY_CAPS)
    twice = enable_section(once, "howToEarn", LOYALTY_CAPS)
    assert twice == once
    assert get_enabled_sections(twice).count("howToEarn") == 1

    result = try_enable_section(once, "howToEarn", LOYALTY_CAPS)
    assert result.reason == RejectionReason.already_enabled


def test_enable_unknown_section(loyalty_spec):
    result = try_enable_section(loyalty_spec, "confettiCannon", LOYALTY_CAPS)
    assert not result.ok
    assert result.reason == RejectionReason.unknown_section
    assert enable_section(loyalty_spec, "confettiCannon", LOYALTY_CAPS) is loyalty_spec


def test_enable_wrong_program_type(loyalty_spec):
    result = try_enable_section(loyalty_spec, "membershipHeader", {"membership"})
    assert result.reason == RejectionReason.program_type_mismatch
    assert result.spec is loyalty_spec


@pytest.mark.parametrize(
    "item", [item for item in SECTION_CATALOG if item.required_capabilities], ids=lambda item: item.key
)
def test_enable_without_capabilities_is_noop_for_gated_items(item):
    program_type = sorted(item.program_types)[0]
    spec = make_spec(program_type)
    assert enable_section(spec, item.key, []) is spec


def test_enable_copies_default_props():
    spec = enable_section(make_spec(), "howToEarn", LOYALTY_CAPS)
    assert spec.ui_contract.sections[0].props == ("program.earning", "program.multipliers")


def test_enable_does_not_modify_input(loyalty_spec):
    before = loyalty_spec.to_dict()
    enable_section(loyalty_spec, "qrCheckInButton")
    assert loyalty_spec.to_dict() == before


def test_enable_after_anchor_uses_current_position(monkeypatch):
    anchored = CatalogItem(
        key="tierBadge",
        label="Tier badge",
        description="",
        program_types=frozenset({ProgramType.loyalty}),
        default_props=("member.tier.name",),
        category="optional",
        insert_after="rewardsGrid",
    )

    def fake_get_catalog_item(key):
        return anchored if key == "tierBadge" else get_catalog_item(key)

    monkeypatch.setattr(mutations, "get_catalog_item", fake_get_catalog_item)

    spec = make_spec(sections=["balanceHeader", "offersStrip", "rewardsGrid", "activityFeed"])
    spec = enable_section(spec, "tierBadge")
    assert get_enabled_sections(spec) == ("balanceHeader", "offersStrip", "rewardsGrid", "tierBadge", "activityFeed")

    # Anchor absent: append
    spec = make_spec(sections=["balanceHeader", "activityFeed"])
    spec = enable_section(spec, "tierBadge")
    assert get_enabled_sections(spec) == ("balanceHeader", "activityFeed", "tierBadge")


def test_enable_sections_folds_left():
    batch = try_enable_sections(make_spec(), ["activityFeed", "balanceHeader", "membershipHeader"], LOYALTY_CAPS)
    assert get_enabled_sections(batch.spec) == ("balanceHeader", "activityFeed")
    assert not batch.ok
    assert batch.rejected == {"membershipHeader": RejectionReason.program_type_mismatch}
    assert enable_sections(make_spec(), ["activityFeed", "balanceHeader"], LOYALTY_CAPS) == batch.spec


# =============================================================================
# disable_section
# =============================================================================


def test_disable_section_removes_duplicates():
    spec = make_spec(sections=["activityFeed", "offersStrip", "activityFeed"])
    assert get_enabled_sections(disable_section(spec, "activityFeed")) == ("offersStrip",)


def test_disable_absent_section(loyalty_spec):
    result = try_disable_section(loyalty_spec, "howToEarn")
    assert result.reason == RejectionReason.not_enabled
    assert result.spec is loyalty_spec


def test_disable_sections(loyalty_spec):
    spec = disable_sections(loyalty_spec, ["rewardsGrid", "activityFeed", "howToEarn"])
    assert get_enabled_sections(spec) == ("balanceHeader", "offersStrip")


def test_is_section_enabled(loyalty_spec):
    assert is_section_enabled(loyalty_spec, "rewardsGrid")
    assert not is_section_enabled(loyalty_spec, "howToEarn")


# =============================================================================
# reorder_sections
# =============================================================================


def test_reorder_named_first_then_remaining(loyalty_spec):
    spec = reorder_sections(loyalty_spec, ["activityFeed", "offersStrip"])
    assert get_enabled_sections(spec) == ("activityFeed", "offersStrip", "balanceHeader", "rewardsGrid")


@pytest.mark.parametrize(
    "new_order",
    [
        [],
        ["activityFeed", "activityFeed"],
        ["howToEarn", "notASection", "rewardsGrid"],
        ["activityFeed", "offersStrip", "rewardsGrid", "balanceHeader"],
    ],
)
def test_reorder_never_loses_sections(loyalty_spec, new_order):
    result = try_reorder_sections(loyalty_spec, new_order)
    assert result.ok
    assert sorted(get_enabled_sections(result.spec)) == sorted(get_enabled_sections(loyalty_spec))


def test_reorder_keeps_section_settings(loyalty_spec):
    spec = update_section_config(loyalty_spec, "balanceHeader", "settings.variant", "ring")
    spec = reorder_sections(spec, ["activityFeed"])
    assert spec.ui_contract.sections[1].settings == {"variant": "ring"}


def test_reorder_does_not_move_anchors(loyalty_spec):
    spec = reorder_sections(loyalty_spec, ["activityFeed", "balanceHeader"])
    spec = enable_section(spec, "guideSteps")
    assert get_enabled_sections(spec)[0] == "guideSteps"


# =============================================================================
# update_section_props / update_section_config
# =============================================================================


def test_update_section_props(loyalty_spec):
    result = try_update_section_props(loyalty_spec, "rewardsGrid", ["program.redemption.catalog"])
    assert result.ok
    assert result.spec.ui_contract.sections[1].props == ("program.redemption.catalog",)

    result = try_update_section_props(loyalty_spec, "howToEarn", [])
    assert result.reason == RejectionReason.not_enabled


def test_update_rules_config_creates_nested_path(loyalty_spec):
    spec = update_section_config(loyalty_spec, "qrCheckInButton", "rules.loyalty.check_in.points", 10)
    spec = update_section_config(spec, "qrCheckInButton", "rules.loyalty.check_in.cooldown_hours", 2.5)
    assert spec.rules == {"loyalty": {"check_in": {"points": 10, "cooldown_hours": 2.5}}}
    assert loyalty_spec.rules == {}


def test_update_rules_config_replaces_non_dict_intermediate():
    spec = make_spec(rules={"offers": True})
    spec = update_section_config(spec, "offersStrip", "rules.offers.auto_claim", False)
    assert spec.rules == {"offers": {"auto_claim": False}}


def test_update_settings_config(loyalty_spec):
    spec = update_section_config(loyalty_spec, "balanceHeader", "settings.variant", "half")
    spec = update_section_config(spec, "balanceHeader", "settings.tiers", [{"name": "Gold", "points": 500}])
    section = spec.ui_contract.sections[0]
    assert section.settings == {"variant": "half", "tiers": [{"name": "Gold", "points": 500}]}
    assert loyalty_spec.ui_contract.sections[0].settings == {}


def test_update_settings_on_disabled_section(loyalty_spec):
    result = try_update_section_config(loyalty_spec, "howToEarn", "settings.title", "Earn")
    assert result.reason == RejectionReason.not_enabled


@pytest.mark.parametrize("config_path", ["branding.primary_color", "rules.", "settings.", "rules..points", "variant"])
def test_update_config_unsupported_path(loyalty_spec, config_path):
    result = try_update_section_config(loyalty_spec, "balanceHeader", config_path, "x")
    assert result.reason == RejectionReason.unsupported_config_path
    assert result.spec is loyalty_spec


@pytest.mark.parametrize("value", [object(), {1: "a"}, ["ok", {"nested": set()}]])
def test_update_config_rejects_non_json_values(loyalty_spec, value):
    result = try_update_section_config(loyalty_spec, "balanceHeader", "settings.variant", value)
    assert result.reason == RejectionReason.invalid_setting_value


# =============================================================================
# update_program_config
# =============================================================================


def test_update_program_config(loyalty_spec):
    earning = {"points_per_dollar": 2}
    spec = update_program_config(loyalty_spec, earning=earning, copy={"program_name": "Beans"})
    earning["points_per_dollar"] = 5
    assert spec.earning == {"points_per_dollar": 2}
    assert spec.copy == {"program_name": "Beans"}
    assert spec.ui_contract == loyalty_spec.ui_contract
    assert loyalty_spec.earning is None


def test_update_program_config_rejects_identity_fields(loyalty_spec):
    with pytest.raises(TypeError):
        try_update_program_config(loyalty_spec, program_type="membership")
    with pytest.raises(TypeError):
        update_program_config(loyalty_spec, ui_contract=None)


@pytest.mark.parametrize(
    "updates",
    [
        {"copy": "Beans"},
        {"rules": None},
        {"rules": ["loyalty"]},
        {"branding": "#123456"},
        {"earning": 10},
        {"currency": 840},
    ],
)
def test_update_program_config_rejects_wrong_block_types(loyalty_spec, updates):
    with pytest.raises(TypeError):
        try_update_program_config(loyalty_spec, **updates)


def test_update_program_config_clears_optional_block(loyalty_spec):
    spec = update_program_config(loyalty_spec, earning={"points_per_dollar": 2})
    spec = update_program_config(spec, earning=None)
    assert spec.earning is None

    # rules stays a dict, so nested section config keeps working
    spec = update_section_config(spec, "qrCheckInButton", "rules.loyalty.check_in.points", 5)
    assert spec.rules == {"loyalty": {"check_in": {"points": 5}}}


# =============================================================================
# reset_to_default_sections
# =============================================================================


def test_reset_is_deterministic(loyalty_spec):
    messy = enable_sections(make_spec(), ["guideSteps", "howToEarn", "qrCheckInButton"], LOYALTY_CAPS)
    messy = reorder_sections(messy, ["qrCheckInButton"])
    assert get_enabled_sections(reset_to_default_sections(messy, "standard", LOYALTY_CAPS)) == get_enabled_sections(
        loyalty_spec
    )


def test_reset_skips_sections_without_capabilities():
    result = try_reset_to_default_sections(make_spec(ProgramType.membership), "full", {"membership"})
    assert result.ok
    assert get_enabled_sections(result.spec) == (
        "membershipHeader",
        "renewalCard",
        "perksGrid",
        "offersStrip",
        "qrCheckInButton",
        "activityFeed",
    )
    assert "allowancesList" in result.detail
    assert "creditWallet" in result.detail


def test_reset_unknown_preset(loyalty_spec):
    result = try_reset_to_default_sections(loyalty_spec, "everything", LOYALTY_CAPS)
    assert result.reason == RejectionReason.unknown_preset
    assert reset_to_default_sections(loyalty_spec, "everything", LOYALTY_CAPS) is loyalty_spec


def test_rejected_result_to_dict(loyalty_spec):
    result = try_enable_section(loyalty_spec, "membershipHeader")
    assert result.to_dict() == {
        "ok": False,
        "reason": "program_type_mismatch",
        "detail": "membershipHeader is not available for loyalty programs",
    }
