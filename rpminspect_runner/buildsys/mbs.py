"""Module Build Service (MBS) adapter.

Fetches module build metadata over HTTP and synthesizes the module NVR
(``name-stream-version.context``) Koji knows the module by.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from rpminspect_runner.buildsys.retry import call_with_retries
from rpminspect_runner.errors import LineageLookupFailure
from rpminspect_runner.nvr import module_nvr

if TYPE_CHECKING:
    from rpminspect_runner.config import Settings

logger = logging.getLogger(__name__)

MODULE_BUILDS_PATH = "/module-build-service/1/module-builds"


class _RetryableStatus(Exception):
    """Server-side HTTP error worth another attempt."""


class ModuleBuildInfo(BaseModel):
    """The fields of an MBS module build we rely on."""

    model_config = ConfigDict(extra="ignore")

    name: str
    stream: str
    version: str
    context: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def _version_to_str(cls, value: Any) -> Any:
        # MBS returns the version as a number
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def nvr(self) -> str:
        return module_nvr(self.name, self.stream, self.version, self.context)


class ModuleBuildService:
    """Client for the MBS REST API."""

    def __init__(
        self,
        api_url: str,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
        attempts: int = 3,
        retry_delay: float = 5.0,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.client = client or httpx.Client()
        self.timeout = timeout
        self.attempts = attempts
        self.retry_delay = retry_delay

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.Client | None = None
    ) -> ModuleBuildService:
        if not settings.mbs_api_url:
            raise LineageLookupFailure("MBS_API_URL is required for module builds")
        return cls(
            settings.mbs_api_url,
            client=client,
            timeout=settings.request_timeout,
            attempts=settings.max_retries,
            retry_delay=settings.retry_delay,
        )

    def module_build_url(self, build_id: str) -> str:
        return f"{self.api_url}{MODULE_BUILDS_PATH}/{build_id}"

    def get_module_build(self, build_id: str) -> ModuleBuildInfo:
        """Fetch a module build.

        Args:
            build_id: MBS module build ID.

        Returns:
            Validated module build metadata.

        Raises:
            LineageLookupFailure: If MBS is unreachable, answers with an
                error, or returns a malformed document.
        """
        url = self.module_build_url(build_id)

        def attempt() -> httpx.Response:
            logger.debug("Fetching module build from %s", url)
            response = self.client.get(url, timeout=self.timeout)
            if response.status_code >= 500:
                raise _RetryableStatus(f"HTTP {response.status_code}")
            response.raise_for_status()
            return response

        try:
            response = call_with_retries(
                attempt,
                attempts=self.attempts,
                delay=self.retry_delay,
                retry_on=(httpx.TransportError, _RetryableStatus),
                description=f"GET {url}",
            )
        except _RetryableStatus as e:
            raise LineageLookupFailure(f"MBS error for {url}: {e}") from e
        except httpx.HTTPStatusError as e:
            raise LineageLookupFailure(
                f"HTTP error fetching module build {build_id}: "
                f"{e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.TimeoutException as e:
            raise LineageLookupFailure(f"Timeout fetching {url}") from e
        except httpx.RequestError as e:
            raise LineageLookupFailure(f"Network error fetching {url}: {e}") from e

        try:
            info = ModuleBuildInfo.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise LineageLookupFailure(
                f"Malformed module build document from {url}: {e}"
            ) from e

        logger.info("Module build %s is %s", build_id, info.nvr)
        return info

    def module_nvr(self, build_id: str) -> str:
        """Return the Koji NVR of an MBS module build."""
        return self.get_module_build(build_id).nvr


__all__ = ["MODULE_BUILDS_PATH", "ModuleBuildInfo", "ModuleBuildService"]
