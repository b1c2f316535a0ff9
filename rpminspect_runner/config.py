"""Configuration settings for rpminspect_runner.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.

The CI environment historically exports unprefixed variables such as
RPMINSPECT_CONFIG or KOJI_BIN; those are accepted through aliases. Runner
tunables use the RPMINSPECT_RUNNER_ prefix.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path("/usr/share/rpminspect/fedora.yaml")
DEFAULT_WORKDIR = Path("/var/tmp/rpminspect/")


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables. CLI flags can override
    these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="RPMINSPECT_RUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )

    # rpminspect
    config_path: Path = Field(
        default=DEFAULT_CONFIG_PATH,
        validation_alias="RPMINSPECT_CONFIG",
        description="Path to the rpminspect config file",
    )
    profile_name: str | None = Field(
        default=None,
        validation_alias="RPMINSPECT_PROFILE_NAME",
        description="rpminspect profile to use",
    )
    rpminspect_bin: Path = Field(
        default=Path("/usr/bin/rpminspect"),
        validation_alias="RPMINSPECT_BIN",
        description="Path to the rpminspect binary",
    )
    splitter_bin: str = Field(
        default="rpminspect_json2text.py",
        validation_alias="RPMINSPECT_SPLITTER_BIN",
        description="Command splitting the JSON report into per-inspection files",
    )
    local_config_bin: str = Field(
        default="rpminspect_get_local_config.sh",
        validation_alias="RPMINSPECT_LOCAL_CONFIG_BIN",
        description="Command fetching the build's own rpminspect configuration",
    )
    package_name: str = Field(
        default="rpminspect",
        validation_alias="RPMINSPECT_PACKAGE_NAME",
        description="RPM package providing rpminspect",
    )
    data_package_name: str = Field(
        default="rpminspect-data-fedora",
        validation_alias="RPMINSPECT_DATA_PACKAGE_NAME",
        description="RPM package providing rpminspect data",
    )

    # Task
    workdir: Path = Field(
        default=DEFAULT_WORKDIR,
        validation_alias="RPMINSPECT_WORKDIR",
        description="Task-scoped working directory holding the results cache",
    )
    arches: str | None = Field(
        default=None,
        validation_alias="ARCHES",
        description="Comma-separated list of architectures to test",
    )
    default_release_string: str | None = Field(
        default=None,
        validation_alias="DEFAULT_RELEASE_STRING",
        description="Release string for builds without a dist tag (e.g. fc37)",
    )
    is_module: bool = Field(
        default=False,
        validation_alias="IS_MODULE",
        description="Whether the task ID is an MBS module build ID",
    )
    tests: str | None = Field(
        default=None,
        validation_alias="TESTS",
        description="Comma-separated list of inspections to run",
    )

    # Build systems
    koji_bin: Path = Field(
        default=Path("/usr/bin/koji"),
        validation_alias="KOJI_BIN",
        description="Path to the koji client binary",
    )
    mbs_api_url: str | None = Field(
        default=None,
        validation_alias="MBS_API_URL",
        description="Module Build Service API URL",
    )

    # Operational
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Logging level",
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for a single Koji or MBS request (seconds)",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made for each Koji or MBS request",
    )
    retry_delay: float = Field(
        default=5.0,
        ge=0,
        description="Delay between request attempts (seconds)",
    )
    engine_timeout: int = Field(
        default=4 * 3600,
        ge=60,
        description="Timeout for the rpminspect run (seconds)",
    )
    lock_timeout: float = Field(
        default=5 * 3600,
        gt=0,
        description="Timeout waiting for another invocation to finish (seconds)",
    )

    @field_validator("is_module", mode="before")
    @classmethod
    def _parse_is_module(cls, value: Any) -> Any:
        # The CI exports IS_MODULE=yes; anything but a truthy word means no
        if isinstance(value, str):
            return value.strip().lower() in ("yes", "y", "true", "1", "on")
        return value

    @property
    def results_cache_dir(self) -> Path:
        """Directory holding lineage and per-inspection artifacts."""
        return self.workdir / "results_cache"

    @property
    def effective_config_path(self) -> Path:
        """Profile-merged rpminspect configuration dump."""
        return self.workdir / "effective_rpminspect.yaml"


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_WORKDIR",
    "Settings",
    "get_settings",
    "print_settings_json",
]
