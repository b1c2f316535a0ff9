"""Shared type definitions for rpminspect_runner.

This module contains dataclasses and enums shared across subpackages to
avoid circular imports.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class ExitCode(IntEnum):
    """Exit codes understood by the CI layer."""

    SUCCESS = 0
    FAILURE = 1
    ERROR = 2
    WARNING = 3


# Anything unexpected is reported to CI as an error
INFRA_ERROR = ExitCode.ERROR


class BuildSource(str, Enum):
    """Where the NVR of a build came from."""

    KOJI_TASK = "koji-task"
    KOJI_TAG = "koji-tag"
    MODULE = "module"


class CacheState(str, Enum):
    """Observable state of a task's results cache."""

    UNRESOLVED = "unresolved"
    RESOLVED_NOT_RUN = "resolved-not-run"
    RUN_COMPLETE = "run-complete"


class OutcomeStatus(str, Enum):
    """How a single inspection ended up being reported."""

    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    WARNING = "warning"
    DISABLED = "disabled"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class BuildRecord:
    """A build taking part in the comparison.

    Attributes:
        nvr: Name-version-release of the build.
        source: Where the NVR was obtained from.
        engine_arg: What rpminspect is handed for this build. Regular
            task builds are passed by task ID, everything else by NVR.
    """

    nvr: str
    source: BuildSource = BuildSource.KOJI_TAG
    engine_arg: str | None = None

    @property
    def argument(self) -> str:
        """Return the rpminspect argument identifying this build."""
        return self.engine_arg or self.nvr


@dataclass(frozen=True)
class LineagePair:
    """The (before, after) builds compared by rpminspect."""

    after: BuildRecord
    before: BuildRecord | None = None

    def __post_init__(self) -> None:
        if self.before is not None and self.before.nvr == self.after.nvr:
            raise ValueError(f"before build equals after build: {self.after.nvr}")


@dataclass(frozen=True)
class TaskContext:
    """Immutable description of one CI task.

    Attributes:
        task_id: Koji task ID, or MBS module build ID for modules.
        previous_tag: Koji tag holding the builds to compare against.
            Empty when no comparison is wanted.
        arches: Comma-separated architectures to inspect.
        release_override: Release string used when builds lack a dist tag.
        profile: rpminspect profile name.
        test_set: Comma-separated inspections to run.
        is_module: Whether task_id refers to a module build.
    """

    task_id: str
    previous_tag: str = ""
    arches: str | None = None
    release_override: str | None = None
    profile: str | None = None
    test_set: str | None = None
    is_module: bool = False


@dataclass(frozen=True)
class InspectionArtifact:
    """Cached result of one inspection."""

    name: str
    description: str
    result_text: str
    status_code: int


@dataclass(frozen=True)
class InspectionOutcome:
    """What the reporter concluded for the requested inspection."""

    inspection: str
    status: OutcomeStatus
    exit_code: int


__all__ = [
    "INFRA_ERROR",
    "BuildRecord",
    "BuildSource",
    "CacheState",
    "ExitCode",
    "InspectionArtifact",
    "InspectionOutcome",
    "LineagePair",
    "OutcomeStatus",
    "TaskContext",
]
