"""Report splitter adapter.

rpminspect_json2text.py turns the JSON report into one ``<name>_result``
and one ``<name>_status`` file per inspection (plus ``skipped_result``).
Only that file contract is relied upon here.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from rpminspect_runner.errors import EngineFailure

logger = logging.getLogger(__name__)


class ReportSplitter:
    """Runs the external report splitter command."""

    def __init__(
        self, command: str = "rpminspect_json2text.py", timeout: int = 600
    ) -> None:
        self.command = command
        self.timeout = timeout

    def compose_command(self, results_dir: Path, report_path: Path) -> list[str]:
        return [*shlex.split(self.command), str(results_dir), str(report_path)]

    def split(self, report_path: Path, results_dir: Path) -> None:
        """Split ``report_path`` into per-inspection files in ``results_dir``.

        Raises:
            EngineFailure: If the splitter cannot run or fails.
        """
        cmd = self.compose_command(results_dir, report_path)
        logger.info("Splitting report: %s", shlex.join(cmd))
        results_dir.mkdir(parents=True, exist_ok=True)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise EngineFailure(
                f"Failed to split report {report_path}: {e}", code="report_split_failed"
            ) from e
        if result.returncode != 0:
            raise EngineFailure(
                f"Splitting report {report_path} failed with exit code "
                f"{result.returncode}: {result.stderr.strip()}",
                code="report_split_failed",
            )


__all__ = ["ReportSplitter"]
