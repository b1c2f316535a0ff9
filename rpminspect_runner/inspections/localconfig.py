"""Per-build rpminspect configuration.

rpminspect_get_local_config.sh fetches the package's own ``rpminspect.yaml``
for the given NVR into the current directory, where rpminspect picks it up.
It runs once per task, in the directory rpminspect is started from, before
the inspections run.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from rpminspect_runner.errors import EngineFailure

logger = logging.getLogger(__name__)

LOCAL_CONFIG_FAILED = "local_config_failed"


class LocalConfigFetcher:
    """Runs the external local configuration fetch command."""

    def __init__(
        self, command: str = "rpminspect_get_local_config.sh", timeout: int = 600
    ) -> None:
        self.command = command
        self.timeout = timeout

    def compose_command(self, after_nvr: str) -> list[str]:
        return [*shlex.split(self.command), after_nvr]

    def fetch(self, after_nvr: str, workdir: Path) -> None:
        """Fetch the package's own rpminspect configuration into ``workdir``.

        Raises:
            EngineFailure: If the command cannot run or fails. The engine
                would otherwise inspect the build with the wrong settings.
        """
        cmd = self.compose_command(after_nvr)
        logger.info("Fetching local configuration: %s", shlex.join(cmd))
        workdir.mkdir(parents=True, exist_ok=True)
        try:
            result = subprocess.run(
                cmd,
                cwd=workdir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise EngineFailure(
                f"Failed to fetch local configuration for {after_nvr}: {e}",
                code=LOCAL_CONFIG_FAILED,
            ) from e
        if result.returncode != 0:
            raise EngineFailure(
                f"Fetching local configuration for {after_nvr} failed with exit "
                f"code {result.returncode}: {result.stderr.strip()}",
                code=LOCAL_CONFIG_FAILED,
            )


__all__ = ["LOCAL_CONFIG_FAILED", "LocalConfigFetcher"]
