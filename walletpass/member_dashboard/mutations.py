"""
Spec mutation functions for the member dashboard.

Pure functions that turn one ProgramSpecification into another. Inputs are
never modified, so calls can be replayed, undone or composed freely.

Each operation comes in two forms:

    try_enable_section(spec, "rewardsGrid", caps)  -> MutationResult (tagged)
    enable_section(spec, "rewardsGrid", caps)      -> ProgramSpecification

A rejected mutation (unknown section, wrong program type, missing capability,
duplicate, ...) is not an error: the tagged form reports why, and the plain
form returns the input spec unchanged. That keeps out-of-order or speculative
UI events safe to apply.
"""

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from copy import deepcopy
from typing import Any

from walletpass.member_dashboard.catalog import (
    TOP,
    CatalogItem,
    Preset,
    get_catalog_item,
    get_default_sections,
)
from walletpass.member_dashboard.exceptions import UnknownPresetError
from walletpass.member_dashboard.types import (
    PROGRAM_CONFIG_FIELDS,
    BatchResult,
    MutationResult,
    ProgramSpecification,
    RejectionReason,
    UIContract,
    UISection,
    is_setting_value,
)

logger = logging.getLogger(__name__)

RULES_PREFIX = "rules"
SETTINGS_PREFIX = "settings"


# =============================================================================
# Enable / disable
# =============================================================================


def _insertion_index(contract: UIContract, item: CatalogItem) -> int:
    """Where a newly enabled section goes, resolved against the current sections."""
    if item.insert_after == TOP:
        return 0
    if item.insert_after:
        anchor_index = contract.index_of(item.insert_after)
        if anchor_index != -1:
            return anchor_index + 1
    return len(contract.sections)


def try_enable_section(
    spec: ProgramSpecification, section_key: str, capabilities: Iterable[str] = ()
) -> MutationResult:
    """
    Enable a section in the UI contract.

    Checks, in order: the key is in the catalog, the spec's program type is
    allowed, the capabilities cover the section's requirements, and the section
    is not already enabled. The new section gets the catalog's default props and
    is placed according to its insert_after hint.

    Args:
        spec: Current specification
        section_key: Catalog key of the section to enable
        capabilities: Capabilities declared for the session

    Returns:
        MutationResult with the new spec, or the unchanged spec and a reason
    """
    item = get_catalog_item(section_key)
    if item is None:
        logger.warning(f"Unknown section key: {section_key}")
        return MutationResult.rejected(spec, RejectionReason.unknown_section, f"Unknown section: {section_key}")

    if not item.allows_program_type(spec.program_type):
        logger.debug(f"Section {section_key} not compatible with program type {spec.program_type}")
        return MutationResult.rejected(
            spec,
            RejectionReason.program_type_mismatch,
            f"{section_key} is not available for {spec.program_type} programs",
        )

    missing = item.missing_capabilities(capabilities)
    if missing:
        logger.debug(f"Section {section_key} requires capabilities: {', '.join(sorted(missing))}")
        return MutationResult.rejected(
            spec,
            RejectionReason.missing_capabilities,
            f"{section_key} requires capabilities: {', '.join(sorted(missing))}",
        )

    contract = spec.ui_contract
    if contract.index_of(section_key) != -1:
        return MutationResult.rejected(spec, RejectionReason.already_enabled, f"{section_key} is already enabled")

    section = UISection(key=section_key, props=tuple(item.default_props))
    sections = list(contract.sections)
    sections.insert(_insertion_index(contract, item), section)
    return MutationResult.accepted(spec.with_sections(sections))


def enable_section(
    spec: ProgramSpecification, section_key: str, capabilities: Iterable[str] = ()
) -> ProgramSpecification:
    return try_enable_section(spec, section_key, capabilities).spec


def try_disable_section(spec: ProgramSpecification, section_key: str) -> MutationResult:
    """Remove every section with this key (duplicates included)."""
    sections = spec.ui_contract.sections
    remaining = [section for section in sections if section.key != section_key]
    if len(remaining) == len(sections):
        return MutationResult.rejected(spec, RejectionReason.not_enabled, f"{section_key} is not enabled")
    return MutationResult.accepted(spec.with_sections(remaining))


def disable_section(spec: ProgramSpecification, section_key: str) -> ProgramSpecification:
    return try_disable_section(spec, section_key).spec


def try_enable_sections(
    spec: ProgramSpecification, section_keys: Iterable[str], capabilities: Iterable[str] = ()
) -> BatchResult:
    """
    Enable several sections, one after another.

    Each key is applied to the spec produced by the previous one, so anchors
    resolve against the sections enabled earlier in the same batch.
    """
    capabilities = frozenset(capabilities)
    results = []
    for section_key in section_keys:
        result = try_enable_section(spec, section_key, capabilities)
        results.append((section_key, result))
        spec = result.spec
    return BatchResult(spec=spec, results=tuple(results))


def enable_sections(
    spec: ProgramSpecification, section_keys: Iterable[str], capabilities: Iterable[str] = ()
) -> ProgramSpecification:
    return try_enable_sections(spec, section_keys, capabilities).spec


def try_disable_sections(spec: ProgramSpecification, section_keys: Iterable[str]) -> BatchResult:
    results = []
    for section_key in section_keys:
        result = try_disable_section(spec, section_key)
        results.append((section_key, result))
        spec = result.spec
    return BatchResult(spec=spec, results=tuple(results))


def disable_sections(spec: ProgramSpecification, section_keys: Iterable[str]) -> ProgramSpecification:
    return try_disable_sections(spec, section_keys).spec


# =============================================================================
# Queries
# =============================================================================


def is_section_enabled(spec: ProgramSpecification, section_key: str) -> bool:
    return spec.ui_contract.index_of(section_key) != -1


def get_enabled_sections(spec: ProgramSpecification) -> tuple[str, ...]:
    return spec.ui_contract.section_keys


# =============================================================================
# Reorder / reconfigure
# =============================================================================


def try_reorder_sections(spec: ProgramSpecification, new_order: Sequence[str]) -> MutationResult:
    """
    Put the named sections first, in the given order.

    Repeated names keep their first position and names that are not enabled are
    ignored. Enabled sections missing from new_order follow in their previous
    relative order, so no section is ever dropped.
    """
    existing = spec.ui_contract.sections
    by_key: dict[str, UISection] = {}
    for section in existing:
        by_key.setdefault(section.key, section)

    placed: set[str] = set()
    reordered: list[UISection] = []
    for section_key in new_order:
        if section_key in by_key and section_key not in placed:
            reordered.append(by_key[section_key])
            placed.add(section_key)

    for section in existing:
        if section.key not in placed:
            reordered.append(section)

    return MutationResult.accepted(spec.with_sections(reordered))


def reorder_sections(spec: ProgramSpecification, new_order: Sequence[str]) -> ProgramSpecification:
    return try_reorder_sections(spec, new_order).spec


def try_update_section_props(
    spec: ProgramSpecification, section_key: str, new_props: Iterable[str]
) -> MutationResult:
    """Replace the binding paths of a section."""
    if not is_section_enabled(spec, section_key):
        return MutationResult.rejected(spec, RejectionReason.not_enabled, f"{section_key} is not enabled")

    new_props = tuple(new_props)
    sections = [
        dataclasses.replace(section, props=new_props) if section.key == section_key else section
        for section in spec.ui_contract.sections
    ]
    return MutationResult.accepted(spec.with_sections(sections))


def update_section_props(
    spec: ProgramSpecification, section_key: str, new_props: Iterable[str]
) -> ProgramSpecification:
    return try_update_section_props(spec, section_key, new_props).spec


def _set_nested(target: dict, path: list[str], value: Any) -> None:
    """Set target[a][b][c] = value, creating (or replacing non-dict) intermediates."""
    current = target
    for part in path[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[path[-1]] = value


def try_update_section_config(
    spec: ProgramSpecification, section_key: str, config_path: str, value: Any
) -> MutationResult:
    """
    Write a value through a namespaced config path.

    Supported paths:
        rules.<a.b.c>   - nested key in the program's rules block
                          (e.g. "rules.loyalty.check_in.points")
        settings.<name> - key in the named section's settings map
                          (e.g. "settings.variant")

    Args:
        spec: Current specification
        section_key: Section whose settings are targeted (ignored for rules paths)
        config_path: Namespaced path
        value: A JSON value (str, number, bool, None, list or dict of these)

    Returns:
        MutationResult; unsupported prefixes, malformed paths and non-JSON
        values are rejected
    """
    if not is_setting_value(value):
        return MutationResult.rejected(
            spec, RejectionReason.invalid_setting_value, f"Unsupported value type: {type(value).__name__}"
        )

    namespace, _, remainder = config_path.partition(".")

    if namespace == RULES_PREFIX and remainder:
        path = remainder.split(".")
        if not all(path):
            return MutationResult.rejected(
                spec, RejectionReason.unsupported_config_path, f"Malformed config path: {config_path}"
            )
        rules = deepcopy(spec.rules)
        _set_nested(rules, path, deepcopy(value))
        return MutationResult.accepted(dataclasses.replace(spec, rules=rules))

    if namespace == SETTINGS_PREFIX and remainder:
        if not is_section_enabled(spec, section_key):
            return MutationResult.rejected(spec, RejectionReason.not_enabled, f"{section_key} is not enabled")
        sections = [
            dataclasses.replace(section, settings={**section.settings, remainder: deepcopy(value)})
            if section.key == section_key
            else section
            for section in spec.ui_contract.sections
        ]
        return MutationResult.accepted(spec.with_sections(sections))

    logger.debug(f"Ignoring unsupported config path: {config_path}")
    return MutationResult.rejected(
        spec, RejectionReason.unsupported_config_path, f"Unsupported config path: {config_path}"
    )


def update_section_config(
    spec: ProgramSpecification, section_key: str, config_path: str, value: Any
) -> ProgramSpecification:
    return try_update_section_config(spec, section_key, config_path, value).spec


REQUIRED_PROGRAM_BLOCKS = ("branding", "rules", "copy")


def _check_program_block(name: str, value) -> None:
    if name == "currency":
        if not isinstance(value, str):
            raise TypeError("currency must be a string")
    elif name in REQUIRED_PROGRAM_BLOCKS:
        if not isinstance(value, dict):
            raise TypeError(f"{name} must be an object")
    elif value is not None and not isinstance(value, dict):
        raise TypeError(f"{name} must be an object or null")


def try_update_program_config(spec: ProgramSpecification, **updates) -> MutationResult:
    """
    Replace top-level configuration blocks (earning, tiers, billing, copy, ...).

    Identity fields and the UI contract cannot be changed here.

    Raises:
        TypeError: If a field is not a configuration block
    """
    unknown = set(updates) - set(PROGRAM_CONFIG_FIELDS)
    if unknown:
        raise TypeError(f"Cannot update program fields: {', '.join(sorted(unknown))}")
    for name, value in updates.items():
        _check_program_block(name, value)
    return MutationResult.accepted(dataclasses.replace(spec, **deepcopy(updates)))


def update_program_config(spec: ProgramSpecification, **updates) -> ProgramSpecification:
    return try_update_program_config(spec, **updates).spec


# =============================================================================
# Presets
# =============================================================================


def try_reset_to_default_sections(
    spec: ProgramSpecification, preset: Preset | str = Preset.standard, capabilities: Iterable[str] = ()
) -> MutationResult:
    """
    Replace all sections with a preset bundle for the spec's program type.

    Sections of the preset that the capabilities do not allow are skipped and
    listed in the result's detail.
    """
    try:
        section_keys = get_default_sections(spec.program_type, preset)
    except UnknownPresetError as e:
        return MutationResult.rejected(spec, RejectionReason.unknown_preset, str(e))

    batch = try_enable_sections(spec.with_sections(()), section_keys, capabilities)
    skipped = ", ".join(batch.rejected)
    return MutationResult.accepted(batch.spec, detail=f"Skipped: {skipped}" if skipped else "")


def reset_to_default_sections(
    spec: ProgramSpecification, preset: Preset | str = Preset.standard, capabilities: Iterable[str] = ()
) -> ProgramSpecification:
    return try_reset_to_default_sections(spec, preset, capabilities).spec
