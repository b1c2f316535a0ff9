"""rpminspect engine adapter.

This module handles:
- Composing the rpminspect command line for a task
- Running all inspections once, output captured to verbose.log
- Dumping the effective (profile-merged) configuration
- Looking up inspection descriptions
- Reporting installed rpminspect package versions

rpminspect exits non-zero when inspections fail. That is expected and not
treated as an error here; callers read the JSON report instead.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from rpminspect_runner.errors import ENGINE_FAILURE, EngineFailure

if TYPE_CHECKING:
    from rpminspect_runner.config import Settings
    from rpminspect_runner.types import LineagePair, TaskContext

logger = logging.getLogger(__name__)

REPORT_NAME = "results.json"
LOG_NAME = "verbose.log"


@dataclass
class EngineResult:
    """Result of the rpminspect run.

    Attributes:
        exit_code: rpminspect exit code (informational only).
        report_path: Path to the JSON report.
        log_path: Path to the verbose log.
        started_at: Run start time.
        finished_at: Run finish time.
        command: The command that was executed.
    """

    exit_code: int
    report_path: Path
    log_path: Path
    started_at: datetime
    finished_at: datetime
    command: str


def compose_run_command(
    rpminspect_bin: Path,
    config_path: Path,
    workdir: Path,
    lineage: LineagePair,
    context: TaskContext,
    report_path: Path,
) -> list[str]:
    """Compose the rpminspect command running all inspections.

    Args:
        rpminspect_bin: Path to rpminspect.
        config_path: rpminspect configuration file.
        workdir: Where rpminspect downloads builds.
        lineage: Builds to compare; without a before build the after
            build is inspected on its own.
        context: The CI task.
        report_path: Where to write the JSON report.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [
        str(rpminspect_bin),
        "-c",
        str(config_path),
        f"--workdir={workdir}",
        "--format=json",
        f"--output={report_path}",
        "--verbose",
    ]

    if context.arches:
        cmd.append(f"--arches={context.arches}")
    if context.release_override:
        cmd.append(f"--release={context.release_override}")
    if context.profile:
        cmd.append(f"--profile={context.profile}")
    if context.test_set:
        cmd.append(f"--tests={context.test_set}")

    if lineage.before is not None:
        cmd.append(lineage.before.argument)
    cmd.append(lineage.after.argument)
    return cmd


def parse_inspection_description(listing: str, name: str) -> str | None:
    """Extract an inspection's description from ``rpminspect -l -v`` output.

    The listing is made of blank-line separated paragraphs; an inspection's
    paragraph starts with its indented name followed by the description.

    Returns:
        Description with indentation stripped, or None if not listed.
    """
    paragraphs = listing.split("\n\n")
    for paragraph in paragraphs:
        lines = paragraph.splitlines()
        for index, line in enumerate(lines):
            if line[:1].isspace() and line.strip() == name:
                body = [text.lstrip() for text in lines[index + 1 :]]
                return "\n".join(body).strip("\n") + "\n"
    return None


class RpminspectEngine:
    """Runs the rpminspect binary."""

    def __init__(
        self,
        rpminspect_bin: Path | str = "/usr/bin/rpminspect",
        config_path: Path | str = "/usr/share/rpminspect/fedora.yaml",
        timeout: int | None = None,
    ) -> None:
        self.rpminspect_bin = Path(rpminspect_bin)
        self.config_path = Path(config_path)
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> RpminspectEngine:
        return cls(
            rpminspect_bin=settings.rpminspect_bin,
            config_path=settings.config_path,
            timeout=settings.engine_timeout,
        )

    def run(
        self,
        lineage: LineagePair,
        context: TaskContext,
        workdir: Path,
    ) -> EngineResult:
        """Run all inspections once.

        Args:
            lineage: Builds to compare.
            context: The CI task.
            workdir: Task working directory (report and log land here).

        Returns:
            EngineResult with execution details.

        Raises:
            EngineFailure: If rpminspect cannot be started, times out, or
                does not produce a report.
        """
        workdir.mkdir(parents=True, exist_ok=True)
        report_path = workdir / REPORT_NAME
        log_path = workdir / LOG_NAME
        report_path.unlink(missing_ok=True)

        cmd = compose_run_command(
            self.rpminspect_bin,
            self.config_path,
            workdir,
            lineage,
            context,
            report_path,
        )
        cmd_str = shlex.join(cmd)
        logger.info("Executing: %s", cmd_str)

        started_at = datetime.now(timezone.utc)
        try:
            with log_path.open("w") as log_file:
                result = subprocess.run(
                    cmd,
                    cwd=workdir,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    timeout=self.timeout,
                    check=False,
                )
        except subprocess.TimeoutExpired as e:
            raise EngineFailure(
                f"rpminspect timed out after {self.timeout} seconds. "
                f"See log: {log_path}",
                code="engine_timeout",
            ) from e
        except OSError as e:
            raise EngineFailure(
                f"Failed to execute rpminspect: {e}", code=ENGINE_FAILURE
            ) from e
        finished_at = datetime.now(timezone.utc)

        logger.info(
            "rpminspect exited with %d after %.1fs",
            result.returncode,
            (finished_at - started_at).total_seconds(),
        )
        if not report_path.exists():
            raise EngineFailure(
                f"rpminspect exited with {result.returncode} without writing "
                f"{report_path}. See log: {log_path}",
                code="engine_no_report",
            )

        return EngineResult(
            exit_code=result.returncode,
            report_path=report_path,
            log_path=log_path,
            started_at=started_at,
            finished_at=finished_at,
            command=cmd_str,
        )

    def dump_effective_config(self, dest: Path, profile: str | None = None) -> bool:
        """Write the profile-merged configuration to ``dest``.

        Failures are logged and reported as False; a missing dump only
        means every inspection is considered enabled.
        """
        cmd = [str(self.rpminspect_bin), "-c", str(self.config_path)]
        if profile:
            cmd.append(f"--profile={profile}")
        cmd.append("-D")

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=300, check=False
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Could not dump effective configuration: %s", e)
            return False

        if result.returncode != 0:
            logger.warning(
                "Dumping effective configuration failed (%d): %s",
                result.returncode,
                result.stderr.strip(),
            )
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(result.stdout, encoding="utf-8")
        return result.returncode == 0

    def describe(self, name: str) -> str:
        """Return the description of an inspection, or an empty string."""
        try:
            result = subprocess.run(
                [str(self.rpminspect_bin), "-l", "-v"],
                capture_output=True,
                text=True,
                timeout=60,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Could not list inspections: %s", e)
            return ""
        return parse_inspection_description(result.stdout, name) or ""


def installed_version(package: str) -> str | None:
    """Return ``VERSION-RELEASE`` of an installed RPM package, if any."""
    try:
        result = subprocess.run(
            ["rpm", "-q", "--qf", "%{VERSION}-%{RELEASE}", package],
            capture_output=True,
            text=True,
            timeout=60,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


__all__ = [
    "LOG_NAME",
    "REPORT_NAME",
    "EngineResult",
    "RpminspectEngine",
    "compose_run_command",
    "installed_version",
    "parse_inspection_description",
]
