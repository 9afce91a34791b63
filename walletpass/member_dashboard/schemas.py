"""
Configuration schemas for dashboard sections.

Describes the settings a configurator UI can offer for each section, split into
"appearance" and "behavior" groups. Each field key is a config path understood
by update_section_config:

- settings.<name>   -> the section's own settings map
- rules.<a.b.c>     -> the program's free-form rules block

Renderers validate only the subset of settings they understand.
"""

from dataclasses import dataclass, field
from typing import Literal

FieldType = Literal["select", "switch", "number", "text", "color", "earning_methods", "tier_config"]


@dataclass(frozen=True)
class FieldSchema:
    """A single configurable field."""

    key: str  # Config path, e.g. "settings.variant" or "rules.loyalty.check_in.points"
    type: FieldType
    label: str
    options: tuple[str | int, ...] = ()
    min: float | None = None
    max: float | None = None
    step: float | None = None
    placeholder: str = ""
    help: str = ""

    def to_dict(self) -> dict:
        data = {"key": self.key, "type": self.type, "label": self.label}
        if self.options:
            data["options"] = list(self.options)
        for name in ("min", "max", "step"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        if self.placeholder:
            data["placeholder"] = self.placeholder
        if self.help:
            data["help"] = self.help
        return data


@dataclass(frozen=True)
class SectionSchema:
    appearance: tuple[FieldSchema, ...] = field(default_factory=tuple)
    behavior: tuple[FieldSchema, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "appearance": [f.to_dict() for f in self.appearance],
            "behavior": [f.to_dict() for f in self.behavior],
        }


SECTION_SCHEMAS: dict[str, SectionSchema] = {
    "balanceHeader": SectionSchema(
        appearance=(
            FieldSchema(
                key="settings.variant",
                type="select",
                label="Gauge style",
                options=("ring", "half", "bar", "minimal"),
                help="Visual style of the points balance display",
            ),
            FieldSchema(
                key="settings.showTier",
                type="switch",
                label="Show tier badge",
                help="Display the member's current tier level",
            ),
            FieldSchema(
                key="settings.showProgress",
                type="switch",
                label="Show progress to next tier",
                help="Display progress towards the next tier level",
            ),
            FieldSchema(
                key="settings.size",
                type="select",
                label="Size",
                options=("sm", "md", "lg"),
                help="Size of the balance display",
            ),
        ),
        behavior=(
            FieldSchema(
                key="settings.tiers",
                type="tier_config",
                label="Loyalty Tiers",
                help="Configure up to 3 tiers with names and point requirements",
            ),
        ),
    ),
    "qrCheckInButton": SectionSchema(
        appearance=(
            FieldSchema(
                key="settings.style",
                type="select",
                label="Style",
                options=("button", "card"),
                help="How the check-in button appears to members",
            ),
            FieldSchema(
                key="settings.showCooldown",
                type="switch",
                label="Show cooldown timer",
                help="Display remaining cooldown time to prevent spam check-ins",
            ),
        ),
        behavior=(
            FieldSchema(
                key="rules.loyalty.check_in.points",
                type="number",
                label="Points per check-in",
                min=0,
                max=1000,
                step=1,
                help="How many points members earn for each check-in",
            ),
            FieldSchema(
                key="rules.loyalty.check_in.cooldown_hours",
                type="number",
                label="Cooldown (hours)",
                min=0,
                max=24,
                step=0.5,
                help="Minimum time between check-ins for the same member",
            ),
        ),
    ),
    "rewardsGrid": SectionSchema(
        appearance=(
            FieldSchema(
                key="settings.columns",
                type="select",
                label="Columns",
                options=(2, 3, 4),
                help="Number of reward columns to display",
            ),
            FieldSchema(
                key="settings.showPrices",
                type="switch",
                label="Show point prices",
                help="Display the point cost for each reward",
            ),
        ),
        behavior=(
            FieldSchema(
                key="rules.loyalty.redemption.enabled",
                type="switch",
                label="Allow redemption in app",
                help="Let members redeem rewards directly from the dashboard",
            ),
        ),
    ),
    "offersStrip": SectionSchema(
        appearance=(
            FieldSchema(
                key="settings.layout",
                type="select",
                label="Layout",
                options=("horizontal", "vertical"),
                help="How offers are arranged",
            ),
            FieldSchema(
                key="settings.showExpiry",
                type="switch",
                label="Show expiry dates",
                help="Display when offers expire",
            ),
        ),
        behavior=(
            FieldSchema(
                key="rules.offers.auto_claim",
                type="switch",
                label="Auto-claim eligible offers",
                help="Automatically claim offers when member qualifies",
            ),
        ),
    ),
    "activityFeed": SectionSchema(
        appearance=(
            FieldSchema(
                key="settings.maxItems",
                type="number",
                label="Max items to show",
                min=3,
                max=20,
                step=1,
                help="Maximum number of recent activities to display",
            ),
            FieldSchema(
                key="settings.showAvatars",
                type="switch",
                label="Show activity icons",
                help="Display icons for different activity types",
            ),
        ),
    ),
    "membershipHeader": SectionSchema(
        appearance=(
            FieldSchema(
                key="settings.showRenewalDate",
                type="switch",
                label="Show renewal date",
                help="Display when membership renews",
            ),
            FieldSchema(
                key="settings.showBenefits",
                type="switch",
                label="Show benefits summary",
                help="Display key membership benefits",
            ),
        ),
    ),
    "storeCardHeader": SectionSchema(
        appearance=(
            FieldSchema(
                key="settings.showLastTopup",
                type="switch",
                label="Show last top-up",
                help="Display when card was last topped up",
            ),
        ),
        behavior=(
            FieldSchema(
                key="rules.store_card.topup_bonus.threshold",
                type="number",
                label="Bonus threshold ($)",
                min=0,
                max=500,
                step=5,
                help="Minimum top-up amount to earn bonus",
            ),
            FieldSchema(
                key="rules.store_card.topup_bonus.amount",
                type="number",
                label="Bonus amount ($)",
                min=0,
                max=100,
                step=1,
                help="Bonus amount for qualifying top-ups",
            ),
        ),
    ),
    "howToEarn": SectionSchema(
        appearance=(
            FieldSchema(
                key="settings.style",
                type="select",
                label="Layout style",
                options=("card", "list", "grid"),
                help="How the earning methods are displayed",
            ),
            FieldSchema(
                key="settings.showIcons",
                type="switch",
                label="Show icons",
                help="Display icons for each earning method",
            ),
            FieldSchema(
                key="settings.showPoints",
                type="switch",
                label="Show point values",
                help="Display point amounts for each method",
            ),
        ),
        behavior=(
            FieldSchema(
                key="settings.title",
                type="text",
                label="Section title",
                placeholder="How to Earn Points",
                help="Custom title for this section",
            ),
            FieldSchema(
                key="settings.subtitle",
                type="text",
                label="Subtitle",
                placeholder="Multiple ways to earn and unlock rewards",
                help="Description text below the title",
            ),
            FieldSchema(
                key="settings.earningMethods",
                type="earning_methods",
                label="Earning Methods",
                help="Configure how customers can earn points in your program",
            ),
        ),
    ),
}


def get_section_schema(section_key: str) -> SectionSchema | None:
    return SECTION_SCHEMAS.get(section_key)


def get_all_fields_for_section(section_key: str) -> list[FieldSchema]:
    """All configurable fields of a section, appearance first then behavior."""
    schema = get_section_schema(section_key)
    if not schema:
        return []
    return [*schema.appearance, *schema.behavior]


def section_has_config(section_key: str) -> bool:
    schema = get_section_schema(section_key)
    return bool(schema and (schema.appearance or schema.behavior))
