"""Per-inspection reporting.

Prints what a CI step shows for one inspection (versions, builds,
description, output) and decides its outcome from the cached results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.console import Console

from rpminspect_runner.inspections.policy import (
    is_inspection_enabled,
    load_effective_config,
)
from rpminspect_runner.types import ExitCode, InspectionOutcome, OutcomeStatus

if TYPE_CHECKING:
    from rpminspect_runner.cache.store import TaskCacheStore
    from rpminspect_runner.config import Settings
    from rpminspect_runner.inspections.engine import RpminspectEngine

logger = logging.getLogger(__name__)

OUTPUT_SEPARATOR = "=" * 40 + " Test Output " + "=" * 40
DISABLED_MESSAGE = "This inspection is disabled."
SKIPPED_MESSAGE = "This inspection did not run for this build."

_STATUS_BY_CODE = {
    ExitCode.SUCCESS: OutcomeStatus.PASSED,
    ExitCode.FAILURE: OutcomeStatus.FAILED,
    ExitCode.ERROR: OutcomeStatus.ERROR,
    ExitCode.WARNING: OutcomeStatus.WARNING,
}


@dataclass
class ReportHeader:
    """Information printed before an inspection's output."""

    rpminspect_version: str | None
    data_version: str | None
    profile: str | None
    after_build: str
    before_build: str | None
    previous_tag: str
    build_system: str = "koji"

    def lines(self) -> list[str]:
        lines = [
            f"rpminspect version: {self.rpminspect_version or 'unknown'} "
            f"(with data package: {self.data_version or 'unknown'})",
            f"rpminspect profile: {self.profile or 'none'}",
            f"new build: {self.after_build}",
        ]
        if self.before_build:
            lines.append(
                f"old build: {self.before_build} "
                f"(found in {self.previous_tag} {self.build_system} tag)"
            )
        elif self.previous_tag:
            lines.append(
                f"old build: not found (in {self.previous_tag} {self.build_system} tag)"
            )
        return lines


def write_raw(console: Console, text: str) -> None:
    """Write engine output exactly as cached, bypassing Rich rendering."""
    console.file.write(text)
    console.file.flush()


def status_for_code(code: int) -> OutcomeStatus:
    try:
        return _STATUS_BY_CODE[ExitCode(code)]
    except ValueError:
        return OutcomeStatus.ERROR


def get_description(store: TaskCacheStore, engine: RpminspectEngine, name: str) -> str:
    """Return an inspection's description, caching it in the results cache."""
    description = store.read_description(name)
    if description is None:
        description = engine.describe(name)
        store.write_description(name, description)
    return description


def report_inspection(
    name: str,
    store: TaskCacheStore,
    engine: RpminspectEngine,
    settings: Settings,
    header: ReportHeader,
    console: Console,
) -> InspectionOutcome:
    """Print the cached result of one inspection.

    Args:
        name: Inspection name.
        store: The task's results cache (run must be complete).
        engine: rpminspect engine, used for descriptions.
        settings: Application settings.
        header: Build and version information to print first.
        console: Where to print.

    Returns:
        The inspection outcome; its exit_code is what the CI step reports.

    Raises:
        CacheCorruption: If cached results are incomplete.
        InvalidInspectionName: If ``name`` cannot name a cached file.
    """
    description = get_description(store, engine, name)

    for line in header.lines():
        console.out(line, highlight=False)
    console.out("")
    console.out("Test description:")
    write_raw(console, description)
    console.out(OUTPUT_SEPARATOR)

    effective_config = load_effective_config(settings.effective_config_path)
    if not is_inspection_enabled(effective_config, name):
        console.out("")
        console.out(DISABLED_MESSAGE)
        return InspectionOutcome(name, OutcomeStatus.DISABLED, int(ExitCode.SUCCESS))

    artifact = store.read_artifact(name)
    if artifact is None:
        logger.info("No result for inspection %s, it was skipped", name)
        skipped_text = store.read_skipped_text() or SKIPPED_MESSAGE + "\n"
        write_raw(console, skipped_text)
        return InspectionOutcome(name, OutcomeStatus.SKIPPED, int(ExitCode.SUCCESS))

    write_raw(console, artifact.result_text)
    status = status_for_code(artifact.status_code)
    return InspectionOutcome(name, status, artifact.status_code)


__all__ = [
    "DISABLED_MESSAGE",
    "OUTPUT_SEPARATOR",
    "SKIPPED_MESSAGE",
    "ReportHeader",
    "get_description",
    "report_inspection",
    "status_for_code",
    "write_raw",
]
