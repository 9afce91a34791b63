"""
Client for the external publish endpoint.

The configurator hands its draft to a Publisher; persistence and versioning of
published specs happen on the other side of the endpoint.
"""

import dataclasses
import logging
from typing import Protocol

import httpx
import sentry_sdk
from django.conf import settings

from walletpass.member_dashboard.exceptions import PublishError
from walletpass.member_dashboard.types import ProgramSpecification

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "Failed to publish configuration"


@dataclasses.dataclass
class PublishResult:
    success: bool
    message: str = ""
    version: int | None = None
    current_version_id: str | None = None

    @classmethod
    def build(cls, success: bool = True, message: str = "", version=None, currentVersionId=None, **kwargs):
        return cls(
            success=bool(success),
            message=message or "",
            version=version,
            current_version_id=currentVersionId or kwargs.get("current_version_id"),
        )

    def asdict(self):
        return dataclasses.asdict(self)


class Publisher(Protocol):
    async def publish(self, program_id: str, spec: ProgramSpecification) -> PublishResult:
        ...


class HttpPublisher:
    """Publishes drafts by POSTing {"programId", "draftSpec"} to the publish endpoint."""

    def __init__(self, url: str = None, token: str = None, timeout: float = None):
        self.url = url or settings.MEMBER_DASHBOARD_PUBLISH_URL
        self.token = token if token is not None else settings.MEMBER_DASHBOARD_PUBLISH_TOKEN
        self.timeout = timeout or settings.MEMBER_DASHBOARD_PUBLISH_TIMEOUT

    def _headers(self) -> dict:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def publish(self, program_id: str, spec: ProgramSpecification) -> PublishResult:
        """
        Send a draft to the publish endpoint.

        Args:
            program_id: The persistent program the draft belongs to
            spec: The draft specification

        Returns:
            PublishResult parsed from the endpoint's response

        Raises:
            PublishError: If the endpoint rejects the draft or cannot be reached
        """
        payload = {"programId": program_id, "draftSpec": spec.to_dict()}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=self._headers()) as client:
                response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Publish request for program {program_id} failed: {e}")
            sentry_sdk.capture_exception(e)
            raise PublishError(DEFAULT_ERROR) from e

        if response.is_error:
            reason = _error_reason(response)
            logger.warning(f"Publish rejected for program {program_id} ({response.status_code}): {reason}")
            raise PublishError(reason, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        result = PublishResult.build(**data)
        logger.info(f"Published program {program_id} as version {result.version}")
        return result


def _error_reason(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return DEFAULT_ERROR
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return DEFAULT_ERROR
