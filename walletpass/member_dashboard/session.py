"""
Configurator session controller.

Holds the in-progress draft for one configuration session and routes every UI
event through the pure mutation functions, replacing the held draft with each
result. The only asynchronous operation is publishing.

Usage:
    session = ConfiguratorSession(publisher=HttpPublisher())
    session.initialize_draft_spec(template, ProgramType.loyalty)
    session.toggle_section("howToEarn")
    result = await session.publish_configuration(program_id)
"""

import logging
import uuid
from collections.abc import Iterable, Sequence
from enum import StrEnum
from typing import Any

from django.conf import settings

from walletpass.member_dashboard import mutations
from walletpass.member_dashboard.catalog import CatalogItem, Preset, ProgramType, get_sections_for_program_type
from walletpass.member_dashboard.exceptions import ProgramTypeNotAllowed, PublishError, SessionNotInitialized
from walletpass.member_dashboard.publishing import Publisher, PublishResult
from walletpass.member_dashboard.types import (
    MutationResult,
    ProgramSpecification,
    TemplateDescriptor,
    UIContract,
)

logger = logging.getLogger(__name__)

SPEC_VERSION = "1.0"
DEFAULT_TAGLINE = "Your rewards await!"


class ConfiguratorStep(StrEnum):
    template = "template"
    program_type = "program-type"
    components = "components"
    branding = "branding"
    publish = "publish"


STEPS = tuple(ConfiguratorStep)


class SessionStatus(StrEnum):
    uninitialized = "uninitialized"
    draft = "draft"
    publishing = "publishing"
    published = "published"


def _default_program_name(program_type: ProgramType) -> str:
    return f"{program_type.replace('_', ' ').title()} Program"


class ConfiguratorSession:
    """One user's configuration session, from template selection to publish."""

    def __init__(self, publisher: Publisher | None = None):
        self.publisher = publisher
        self.current_step = ConfiguratorStep.template
        self.template: TemplateDescriptor | None = None
        self.capabilities: frozenset[str] = frozenset()
        self.draft_spec: ProgramSpecification | None = None
        self.status = SessionStatus.uninitialized
        self.last_publish_result: PublishResult | None = None

    # =========================================================================
    # Draft lifecycle
    # =========================================================================

    def initialize_draft_spec(
        self,
        template: TemplateDescriptor,
        program_type: ProgramType | str,
        capabilities: Iterable[str] | None = None,
    ) -> ProgramSpecification:
        """
        Create the session's draft from a template and program type.

        The draft starts with the standard preset, filtered by the capabilities.
        Calling this again discards the previous draft.

        Args:
            template: The selected template
            program_type: The program's type
            capabilities: Capabilities for this session; defaults to the template's

        Returns:
            The new draft specification

        Raises:
            ProgramTypeNotAllowed: If the template does not support program_type
        """
        program_type = ProgramType(program_type)
        if not template.allows(program_type):
            raise ProgramTypeNotAllowed(f"Template {template.id} does not support {program_type} programs")

        self.template = template
        self.capabilities = frozenset(template.capabilities if capabilities is None else capabilities)

        spec = ProgramSpecification(
            version=SPEC_VERSION,
            program_id=f"draft-{uuid.uuid4().hex}",
            program_type=program_type,
            template_id=template.id,
            currency=settings.MEMBER_DASHBOARD_DEFAULT_CURRENCY,
            copy={
                "program_name": template.name or _default_program_name(program_type),
                "tagline": DEFAULT_TAGLINE,
            },
            ui_contract=UIContract(layout=f"{program_type}_dashboard_v1"),
        )
        result = mutations.try_reset_to_default_sections(spec, Preset.standard, self.capabilities)
        if result.detail:
            logger.info(f"Draft for template {template.id}: {result.detail}")

        self.draft_spec = result.spec
        self.status = SessionStatus.draft
        self.last_publish_result = None
        return self.draft_spec

    def _require_draft(self) -> ProgramSpecification:
        if self.draft_spec is None:
            raise SessionNotInitialized("Select a template and program type first")
        return self.draft_spec

    def _apply(self, result: MutationResult) -> MutationResult:
        if result.ok:
            self.draft_spec = result.spec
            self.status = SessionStatus.draft
        return result

    # =========================================================================
    # Mutations
    # =========================================================================

    def toggle_section(self, section_key: str) -> MutationResult:
        """Disable the section if it is enabled, otherwise enable it."""
        spec = self._require_draft()
        if mutations.is_section_enabled(spec, section_key):
            return self._apply(mutations.try_disable_section(spec, section_key))
        return self._apply(mutations.try_enable_section(spec, section_key, self.capabilities))

    def enable_section(self, section_key: str) -> MutationResult:
        return self._apply(mutations.try_enable_section(self._require_draft(), section_key, self.capabilities))

    def disable_section(self, section_key: str) -> MutationResult:
        return self._apply(mutations.try_disable_section(self._require_draft(), section_key))

    def reorder_sections(self, new_order: Sequence[str]) -> MutationResult:
        return self._apply(mutations.try_reorder_sections(self._require_draft(), new_order))

    def reset_sections(self, preset: Preset | str = Preset.standard) -> MutationResult:
        return self._apply(mutations.try_reset_to_default_sections(self._require_draft(), preset, self.capabilities))

    def update_section_props(self, section_key: str, new_props: Iterable[str]) -> MutationResult:
        return self._apply(mutations.try_update_section_props(self._require_draft(), section_key, new_props))

    def update_section_config(self, section_key: str, config_path: str, value: Any) -> MutationResult:
        return self._apply(
            mutations.try_update_section_config(self._require_draft(), section_key, config_path, value)
        )

    def update_program_config(self, **updates) -> MutationResult:
        return self._apply(mutations.try_update_program_config(self._require_draft(), **updates))

    # =========================================================================
    # Queries
    # =========================================================================

    def is_section_active(self, section_key: str) -> bool:
        return self.draft_spec is not None and mutations.is_section_enabled(self.draft_spec, section_key)

    def get_enabled_sections(self) -> tuple[str, ...]:
        if self.draft_spec is None:
            return ()
        return mutations.get_enabled_sections(self.draft_spec)

    def available_sections(self) -> tuple[CatalogItem, ...]:
        """Catalog items this session may enable."""
        if self.draft_spec is None:
            return ()
        return get_sections_for_program_type(self.draft_spec.program_type, self.capabilities)

    # =========================================================================
    # Step navigation
    # =========================================================================

    def go_to_step(self, step: ConfiguratorStep | str) -> ConfiguratorStep:
        self.current_step = ConfiguratorStep(step)
        return self.current_step

    def next_step(self) -> ConfiguratorStep:
        index = STEPS.index(self.current_step)
        if index < len(STEPS) - 1:
            self.current_step = STEPS[index + 1]
        return self.current_step

    def prev_step(self) -> ConfiguratorStep:
        index = STEPS.index(self.current_step)
        if index > 0:
            self.current_step = STEPS[index - 1]
        return self.current_step

    # =========================================================================
    # Publish
    # =========================================================================

    async def publish_configuration(self, program_id: str) -> PublishResult:
        """
        Hand the current draft to the publisher.

        The draft is sent by value and is never modified here. On any failure
        the session goes back to draft status and the error propagates.

        Raises:
            SessionNotInitialized: If there is no draft
            PublishError: If the publisher rejects the draft or cannot be reached
        """
        spec = self._require_draft()
        if self.publisher is None:
            raise PublishError("No publisher configured")

        self.status = SessionStatus.publishing
        try:
            result = await self.publisher.publish(program_id, spec)
        except PublishError as e:
            self.status = SessionStatus.draft
            logger.warning(f"Publish of {spec.program_id} to program {program_id} failed: {e.reason}")
            raise
        except Exception:
            self.status = SessionStatus.draft
            logger.exception(f"Publish of {spec.program_id} to program {program_id} failed")
            raise

        self.last_publish_result = result
        self.status = SessionStatus.published
        return result

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict:
        return {
            "current_step": str(self.current_step),
            "status": str(self.status),
            "template": self.template.to_dict() if self.template else None,
            "capabilities": sorted(self.capabilities),
            "draft_spec": self.draft_spec.to_dict() if self.draft_spec else None,
            "last_publish_result": self.last_publish_result.asdict() if self.last_publish_result else None,
        }

    @classmethod
    def from_dict(cls, data: dict, publisher: Publisher | None = None) -> "ConfiguratorSession":
        session = cls(publisher=publisher)
        session.current_step = ConfiguratorStep(data.get("current_step", ConfiguratorStep.template))
        session.status = SessionStatus(data.get("status", SessionStatus.uninitialized))
        if data.get("template"):
            session.template = TemplateDescriptor.build(**data["template"])
        session.capabilities = frozenset(data.get("capabilities") or ())
        if data.get("draft_spec"):
            session.draft_spec = ProgramSpecification.from_dict(data["draft_spec"])
        if data.get("last_publish_result"):
            session.last_publish_result = PublishResult(**data["last_publish_result"])
        return session
