"""
Types for the member dashboard configuration engine.

The ProgramSpecification and its UIContract are the value shape shared with
renderers and with the store that keeps published specs. All types are frozen:
mutation functions build new values rather than editing existing ones.

Wire shape (to_dict / from_dict):

    {
        "version": "1.0",
        "program_id": "draft-...",
        "program_type": "loyalty",
        "template_id": "tpl_123",
        "currency": "USD",
        "earning": {...}, "tiers": {...}, ...,   # omitted when unset
        "branding": {...},
        "rules": {...},
        "copy": {"program_name": "...", "tagline": "..."},
        "ui_contract": {
            "layout": "loyalty_dashboard_v1",
            "sections": [{"type": "balanceHeader", "props": ["member.points_balance"], "settings": {...}}],
            "kpis": ["points_balance"],
        },
    }
"""

import dataclasses
from copy import deepcopy
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Union

from walletpass.member_dashboard.catalog import ProgramType

# JSON value union accepted in section settings and the rules block
SettingValue = Union[str, int, float, bool, None, list["SettingValue"], dict[str, "SettingValue"]]

# Top-level configuration blocks that update_program_config may replace
PROGRAM_CONFIG_FIELDS = (
    "currency",
    "earning",
    "tiers",
    "membership",
    "billing",
    "redemption",
    "stored_value",
    "branding",
    "rules",
    "copy",
)

_OPTIONAL_BLOCKS = ("earning", "tiers", "membership", "billing", "redemption", "stored_value")


def is_setting_value(value: Any) -> bool:
    """Check that a value belongs to the SettingValue union (recursively)."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return True
    if isinstance(value, list):
        return all(is_setting_value(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and is_setting_value(v) for k, v in value.items())
    return False


@dataclass(frozen=True)
class UISection:
    """One entry in a program's UI contract."""

    key: str
    props: tuple[str, ...] = ()  # Data-binding paths, e.g. "member.points_balance"
    settings: dict[str, SettingValue] = field(default_factory=dict)  # Renderer-specific overrides

    def to_dict(self) -> dict:
        data = {"type": self.key, "props": list(self.props)}
        if self.settings:
            data["settings"] = dict(self.settings)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "UISection":
        return cls(
            key=data["type"],
            props=tuple(data.get("props") or ()),
            settings=dict(data.get("settings") or {}),
        )


@dataclass(frozen=True)
class UIContract:
    layout: str
    sections: tuple[UISection, ...] = ()
    kpis: tuple[str, ...] = ()

    @property
    def section_keys(self) -> tuple[str, ...]:
        return tuple(section.key for section in self.sections)

    def index_of(self, key: str) -> int:
        """Position of the first section with this key, or -1."""
        for index, section in enumerate(self.sections):
            if section.key == key:
                return index
        return -1

    def to_dict(self) -> dict:
        data = {"layout": self.layout, "sections": [section.to_dict() for section in self.sections]}
        if self.kpis:
            data["kpis"] = list(self.kpis)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "UIContract":
        return cls(
            layout=data.get("layout", ""),
            sections=tuple(UISection.from_dict(s) for s in data.get("sections") or ()),
            kpis=tuple(data.get("kpis") or ()),
        )


@dataclass(frozen=True)
class ProgramSpecification:
    """
    A program's configuration plus its UI contract.

    Created through ConfiguratorSession.initialize_draft_spec and replaced
    wholesale by the mutation functions.
    """

    version: str
    program_id: str
    program_type: ProgramType
    ui_contract: UIContract
    template_id: str | None = None
    currency: str = "USD"
    earning: dict | None = None
    tiers: dict | None = None
    membership: dict | None = None
    billing: dict | None = None
    redemption: dict | None = None
    stored_value: dict | None = None
    branding: dict = field(default_factory=dict)
    rules: dict = field(default_factory=dict)
    copy: dict = field(default_factory=dict)

    def with_sections(self, sections) -> "ProgramSpecification":
        return dataclasses.replace(self, ui_contract=dataclasses.replace(self.ui_contract, sections=tuple(sections)))

    def to_dict(self) -> dict:
        data = {
            "version": self.version,
            "program_id": self.program_id,
            "program_type": str(self.program_type),
            "template_id": self.template_id,
            "currency": self.currency,
        }
        for name in _OPTIONAL_BLOCKS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        data["branding"] = self.branding
        data["rules"] = self.rules
        data["copy"] = self.copy
        data["ui_contract"] = self.ui_contract.to_dict()
        return deepcopy(data)

    @classmethod
    def from_dict(cls, data: dict) -> "ProgramSpecification":
        """Rehydrate a draft previously serialized with to_dict."""
        return cls(
            version=data.get("version", "1.0"),
            program_id=data["program_id"],
            program_type=ProgramType(data["program_type"]),
            ui_contract=UIContract.from_dict(data.get("ui_contract") or {}),
            template_id=data.get("template_id"),
            currency=data.get("currency", "USD"),
            branding=dict(data.get("branding") or {}),
            rules=dict(data.get("rules") or {}),
            copy=dict(data.get("copy") or {}),
            **{name: data.get(name) for name in _OPTIONAL_BLOCKS},
        )


@dataclass
class TemplateDescriptor:
    """The template chosen in the selection step, with its declared capabilities."""

    id: str
    name: str = ""
    capabilities: frozenset[str] = frozenset()
    allowed_program_types: frozenset[ProgramType] = frozenset()  # Empty means any

    @classmethod
    def build(cls, id: str, name: str = "", capabilities=None, allowed_program_types=None, **kwargs):
        for label, value in (("capabilities", capabilities), ("allowed_program_types", allowed_program_types)):
            if value is not None and not isinstance(value, (list, tuple, set, frozenset)):
                raise TypeError(f"{label} must be a list")
        return cls(
            id=str(id),
            name=name or "",
            capabilities=frozenset(capabilities or ()),
            allowed_program_types=frozenset(ProgramType(t) for t in allowed_program_types or ()),
        )

    def allows(self, program_type: ProgramType) -> bool:
        return not self.allowed_program_types or program_type in self.allowed_program_types

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "capabilities": sorted(self.capabilities),
            "allowed_program_types": sorted(str(t) for t in self.allowed_program_types),
        }


class RejectionReason(StrEnum):
    unknown_section = "unknown_section"
    program_type_mismatch = "program_type_mismatch"
    missing_capabilities = "missing_capabilities"
    already_enabled = "already_enabled"
    not_enabled = "not_enabled"
    unknown_preset = "unknown_preset"
    unsupported_config_path = "unsupported_config_path"
    invalid_setting_value = "invalid_setting_value"


@dataclass(frozen=True)
class MutationResult:
    """
    Tagged outcome of a spec mutation.

    A rejected mutation carries the unchanged input spec, so callers that only
    want best-effort merging can always use result.spec.
    """

    ok: bool
    spec: ProgramSpecification
    reason: RejectionReason | None = None
    detail: str = ""

    @classmethod
    def accepted(cls, spec: ProgramSpecification, detail: str = "") -> "MutationResult":
        return cls(ok=True, spec=spec, detail=detail)

    @classmethod
    def rejected(cls, spec: ProgramSpecification, reason: RejectionReason, detail: str = "") -> "MutationResult":
        return cls(ok=False, spec=spec, reason=reason, detail=detail)

    def to_dict(self) -> dict:
        data = {"ok": self.ok}
        if self.reason:
            data["reason"] = str(self.reason)
        if self.detail:
            data["detail"] = self.detail
        return data


@dataclass(frozen=True)
class BatchResult:
    """Outcome of enable_sections / disable_sections: the folded spec and each step's result."""

    spec: ProgramSpecification
    results: tuple[tuple[str, MutationResult], ...] = ()

    @property
    def ok(self) -> bool:
        return all(result.ok for _, result in self.results)

    @property
    def rejected(self) -> dict[str, RejectionReason]:
        return {key: result.reason for key, result in self.results if not result.ok}
