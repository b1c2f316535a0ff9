"""Error taxonomy for rpminspect_runner.

Every error carries a stable ``code`` for logs and a CI ``exit_code``.
Findings reported by rpminspect are not errors; these classes only cover
the driver failing to produce or read them.
"""

from rpminspect_runner.types import INFRA_ERROR

# Stable error codes
INVALID_IDENTIFIER = "invalid_identifier"
INVALID_INSPECTION_NAME = "invalid_inspection_name"
LINEAGE_LOOKUP_FAILURE = "lineage_lookup_failure"
ENGINE_FAILURE = "engine_failure"
CACHE_CORRUPTION = "cache_corruption"
INFRASTRUCTURE_ERROR = "infrastructure_error"


class RunnerError(Exception):
    """Base error for driver failures."""

    default_code = INFRASTRUCTURE_ERROR

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.exit_code = int(INFRA_ERROR)


class InvalidIdentifier(RunnerError):
    """Raised when an NVR cannot be decomposed."""

    default_code = INVALID_IDENTIFIER

    def __init__(self, nvr: str, reason: str) -> None:
        super().__init__(f"Invalid NVR {nvr!r}: {reason}")
        self.nvr = nvr


class InvalidInspectionName(RunnerError):
    """Raised when an inspection name cannot name a cached artifact."""

    default_code = INVALID_INSPECTION_NAME

    def __init__(self, name: str) -> None:
        super().__init__(f"Invalid inspection name: {name!r}")
        self.name = name


class LineageLookupFailure(RunnerError):
    """Raised when Koji or MBS cannot tell us about a build."""

    default_code = LINEAGE_LOOKUP_FAILURE


class EngineFailure(RunnerError):
    """Raised when rpminspect could not run or produced no report."""

    default_code = ENGINE_FAILURE


class CacheCorruption(RunnerError):
    """Raised when the sentinel exists but cached files do not."""

    default_code = CACHE_CORRUPTION

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class InfrastructureError(RunnerError):
    """Raised for anything else that stops the driver."""

    default_code = INFRASTRUCTURE_ERROR


__all__ = [
    "CACHE_CORRUPTION",
    "ENGINE_FAILURE",
    "INFRASTRUCTURE_ERROR",
    "INVALID_IDENTIFIER",
    "INVALID_INSPECTION_NAME",
    "LINEAGE_LOOKUP_FAILURE",
    "CacheCorruption",
    "EngineFailure",
    "InfrastructureError",
    "InvalidIdentifier",
    "InvalidInspectionName",
    "LineageLookupFailure",
    "RunnerError",
]
