"""
Section Catalog for the member dashboard.

Single source of truth for every section that can appear on a member
dashboard, together with the rules that decide where it is legal:

- program_types: which kinds of program may show the section
- required_capabilities: feature flags the template must declare
- default_props: data-binding paths copied onto a newly enabled section
- insert_after: placement hint ("top", another section key, or None to append)

The catalog is loaded once at import time and never changes.

Usage:
    from walletpass.member_dashboard.catalog import (
        get_catalog_item,
        get_default_sections,
        get_sections_for_program_type,
    )
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Literal

from walletpass.member_dashboard.exceptions import UnknownPresetError

SectionCategory = Literal["core", "optional", "advanced"]

TOP = "top"


class ProgramType(StrEnum):
    loyalty = "loyalty"
    membership = "membership"
    store_card = "store_card"


class Preset(StrEnum):
    minimal = "minimal"
    standard = "standard"
    full = "full"


ALL_PROGRAM_TYPES = frozenset(ProgramType)


@dataclass(frozen=True)
class CatalogItem:
    """Static descriptor of one dashboard section type."""

    key: str
    label: str
    description: str
    program_types: frozenset[ProgramType]
    default_props: tuple[str, ...]
    category: SectionCategory
    required_capabilities: frozenset[str] = frozenset()
    insert_after: str | None = None  # "top", another section key, or None to append
    conflicts_with: frozenset[str] = frozenset()

    def allows_program_type(self, program_type: ProgramType) -> bool:
        return program_type in self.program_types

    def missing_capabilities(self, capabilities: Iterable[str]) -> frozenset[str]:
        return self.required_capabilities - frozenset(capabilities)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "program_types": sorted(str(t) for t in self.program_types),
            "required_capabilities": sorted(self.required_capabilities),
            "default_props": list(self.default_props),
            "insert_after": self.insert_after,
        }


# =============================================================================
# Catalog
# =============================================================================

SECTION_CATALOG: tuple[CatalogItem, ...] = (
    # Loyalty
    CatalogItem(
        key="balanceHeader",
        label="Points Balance",
        description="Display member's current points and tier status",
        program_types=frozenset({ProgramType.loyalty}),
        required_capabilities=frozenset({"points"}),
        default_props=("member.points_balance", "member.tier.name"),
        insert_after=TOP,
        category="core",
    ),
    CatalogItem(
        key="progressNextTier",
        label="Progress to Next Tier",
        description="Show progress bar towards next loyalty tier",
        program_types=frozenset({ProgramType.loyalty}),
        required_capabilities=frozenset({"points", "tiers"}),
        default_props=("member.points_to_next_tier", "program.tiers.levels"),
        category="core",
    ),
    CatalogItem(
        key="rewardsGrid",
        label="Rewards Grid",
        description="Grid of available rewards to redeem",
        program_types=frozenset({ProgramType.loyalty, ProgramType.store_card, ProgramType.membership}),
        default_props=("program.redemption.catalog", "member.claimables"),
        category="core",
    ),
    CatalogItem(
        key="howToEarn",
        label="How to Earn Points",
        description="Explain earning rules and multipliers",
        program_types=frozenset({ProgramType.loyalty}),
        required_capabilities=frozenset({"points"}),
        default_props=("program.earning", "program.multipliers"),
        category="optional",
    ),
    # Membership
    CatalogItem(
        key="membershipHeader",
        label="Membership Status",
        description="Display membership tier and billing information",
        program_types=frozenset({ProgramType.membership}),
        required_capabilities=frozenset({"membership"}),
        default_props=("copy.program_name", "billing.price_monthly", "copy.tagline"),
        insert_after=TOP,
        category="core",
    ),
    CatalogItem(
        key="renewalCard",
        label="Renewal Information",
        description="Show next billing date and renewal options",
        program_types=frozenset({ProgramType.membership}),
        required_capabilities=frozenset({"membership"}),
        default_props=("billing.billing_day", "member.next_invoice"),
        category="core",
    ),
    CatalogItem(
        key="allowancesList",
        label="Member Allowances",
        description="List of included benefits and usage limits",
        program_types=frozenset({ProgramType.membership}),
        required_capabilities=frozenset({"allowances"}),
        default_props=("membership.allowances", "member.allowances"),
        category="optional",
    ),
    CatalogItem(
        key="creditWallet",
        label="Credit Balance",
        description="Show available credit balance and spending options",
        program_types=frozenset({ProgramType.membership, ProgramType.store_card}),
        required_capabilities=frozenset({"credit"}),
        default_props=("member.credit_balance", "program.redemption.catalog"),
        category="optional",
    ),
    CatalogItem(
        key="perksGrid",
        label="Member Perks",
        description="Grid of exclusive member benefits and perks",
        program_types=frozenset({ProgramType.membership}),
        required_capabilities=frozenset({"membership"}),
        default_props=("membership.perks",),
        category="optional",
    ),
    # Store card
    CatalogItem(
        key="storeCardHeader",
        label="Store Card Header",
        description="Display store card program name and branding",
        program_types=frozenset({ProgramType.store_card}),
        required_capabilities=frozenset({"stored_value"}),
        default_props=("copy.program_name",),
        insert_after=TOP,
        category="core",
    ),
    CatalogItem(
        key="balanceCard",
        label="Stored Value Balance",
        description="Show current balance and top-up options",
        program_types=frozenset({ProgramType.store_card}),
        required_capabilities=frozenset({"stored_value"}),
        default_props=("member.stored_value_balance",),
        category="core",
    ),
    CatalogItem(
        key="redeemGrid",
        label="Spend Options",
        description="Grid of ways to spend stored value",
        program_types=frozenset({ProgramType.store_card, ProgramType.membership, ProgramType.loyalty}),
        default_props=("program.redemption.catalog",),
        category="optional",
    ),
    # Shared
    CatalogItem(
        key="offersStrip",
        label="Active Offers",
        description="Horizontal strip of available offers and promotions",
        program_types=ALL_PROGRAM_TYPES,
        default_props=("offers.active",),
        category="optional",
    ),
    CatalogItem(
        key="qrCheckInButton",
        label="QR Check-In",
        description="Button for members to check in at your location",
        program_types=ALL_PROGRAM_TYPES,
        default_props=("business.check_in_endpoint",),
        category="core",
    ),
    CatalogItem(
        key="activityFeed",
        label="Recent Activity",
        description="Timeline of recent member activity and transactions",
        program_types=ALL_PROGRAM_TYPES,
        default_props=("member.recent_activity",),
        category="optional",
    ),
    CatalogItem(
        key="guideSteps",
        label="Getting Started Guide",
        description="Step-by-step guide for new members",
        program_types=ALL_PROGRAM_TYPES,
        default_props=("program.guide", "member.guide_progress"),
        insert_after=TOP,
        category="advanced",
    ),
)

_CATALOG_BY_KEY: MappingProxyType[str, CatalogItem] = MappingProxyType({item.key: item for item in SECTION_CATALOG})

# Default section bundles per program type
DEFAULT_PRESETS: MappingProxyType[ProgramType, MappingProxyType[Preset, tuple[str, ...]]] = MappingProxyType(
    {
        ProgramType.loyalty: MappingProxyType(
            {
                Preset.minimal: ("balanceHeader", "activityFeed"),
                Preset.standard: ("balanceHeader", "rewardsGrid", "offersStrip", "activityFeed"),
                Preset.full: (
                    "balanceHeader",
                    "progressNextTier",
                    "rewardsGrid",
                    "howToEarn",
                    "offersStrip",
                    "qrCheckInButton",
                    "activityFeed",
                ),
            }
        ),
        ProgramType.membership: MappingProxyType(
            {
                Preset.minimal: ("membershipHeader", "renewalCard"),
                Preset.standard: ("membershipHeader", "renewalCard", "perksGrid", "offersStrip"),
                Preset.full: (
                    "membershipHeader",
                    "renewalCard",
                    "allowancesList",
                    "creditWallet",
                    "perksGrid",
                    "offersStrip",
                    "qrCheckInButton",
                    "activityFeed",
                ),
            }
        ),
        ProgramType.store_card: MappingProxyType(
            {
                Preset.minimal: ("storeCardHeader", "balanceCard"),
                Preset.standard: ("storeCardHeader", "balanceCard", "redeemGrid"),
                Preset.full: (
                    "storeCardHeader",
                    "balanceCard",
                    "redeemGrid",
                    "offersStrip",
                    "qrCheckInButton",
                    "activityFeed",
                ),
            }
        ),
    }
)


# =============================================================================
# Public API
# =============================================================================


def is_section_eligible(item: CatalogItem, program_type: ProgramType, capabilities: Iterable[str] = ()) -> bool:
    """Whether a catalog item may appear for this program type and capability set."""
    return item.allows_program_type(program_type) and not item.missing_capabilities(capabilities)


def get_sections_for_program_type(
    program_type: ProgramType, capabilities: Iterable[str] = ()
) -> tuple[CatalogItem, ...]:
    """
    List every catalog item that is legal for a program.

    Args:
        program_type: The program's type
        capabilities: Capabilities declared by the program's template

    Returns:
        Catalog items in catalog order whose program types include program_type
        and whose required capabilities are all present
    """
    capabilities = frozenset(capabilities)
    return tuple(item for item in SECTION_CATALOG if is_section_eligible(item, program_type, capabilities))


def get_catalog_item(key: str) -> CatalogItem | None:
    """Get a catalog item by section key, or None if the key is not in the catalog."""
    return _CATALOG_BY_KEY.get(key)


def get_default_sections(program_type: ProgramType, preset: Preset | str = Preset.standard) -> tuple[str, ...]:
    """
    Get the ordered section keys of a preset bundle.

    Raises:
        UnknownPresetError: If preset is not minimal, standard or full
    """
    try:
        preset = Preset(preset)
    except ValueError:
        raise UnknownPresetError(f"Unknown preset: {preset}") from None
    return DEFAULT_PRESETS[ProgramType(program_type)][preset]
