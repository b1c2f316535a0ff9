"""Koji adapter.

Runs the koji CLI to:
- Convert a build task ID into the NVR of the SRPM it built
- List builds of a package tagged into a tag (with inheritance)

Every call is bounded by a timeout and retried a capped number of times.
A call that still fails raises LineageLookupFailure; it never degrades to
an empty result.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from rpminspect_runner.buildsys.retry import call_with_retries
from rpminspect_runner.errors import LineageLookupFailure

if TYPE_CHECKING:
    from rpminspect_runner.config import Settings

logger = logging.getLogger(__name__)

SRPM_SUFFIX = ".src.rpm"


def parse_taskinfo_srpm(output: str) -> str | None:
    """Extract the SRPM NVR from ``koji taskinfo -v -r`` output.

    Args:
        output: Text printed by koji taskinfo.

    Returns:
        NVR of the first SRPM listed, or None if there is none.
    """
    for line in output.splitlines():
        fields = line.split()
        if "SRPM:" not in fields:
            continue
        index = fields.index("SRPM:")
        if index + 1 >= len(fields):
            continue
        filename = PurePosixPath(fields[index + 1]).name
        if filename.endswith(SRPM_SUFFIX):
            filename = filename[: -len(SRPM_SUFFIX)]
        return filename
    return None


def parse_list_tagged(output: str) -> list[str]:
    """Extract NVRs (first column) from ``koji list-tagged --quiet`` output."""
    return [line.split()[0] for line in output.splitlines() if line.strip()]


class KojiClient:
    """Thin wrapper around the koji command line client."""

    def __init__(
        self,
        koji_bin: Path | str = "/usr/bin/koji",
        timeout: float = 60.0,
        attempts: int = 3,
        retry_delay: float = 5.0,
    ) -> None:
        self.koji_bin = Path(koji_bin)
        self.timeout = timeout
        self.attempts = attempts
        self.retry_delay = retry_delay

    @classmethod
    def from_settings(cls, settings: Settings) -> KojiClient:
        return cls(
            koji_bin=settings.koji_bin,
            timeout=settings.request_timeout,
            attempts=settings.max_retries,
            retry_delay=settings.retry_delay,
        )

    @property
    def name(self) -> str:
        """Name of the build system, as shown to users."""
        return self.koji_bin.name

    def _run(self, args: list[str]) -> str:
        cmd = [str(self.koji_bin), *args]
        cmd_str = shlex.join(cmd)

        def attempt() -> str:
            logger.debug("Executing: %s", cmd_str)
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
            return result.stdout

        try:
            return call_with_retries(
                attempt,
                attempts=self.attempts,
                delay=self.retry_delay,
                retry_on=(subprocess.CalledProcessError, subprocess.TimeoutExpired),
                description=cmd_str,
            )
        except subprocess.TimeoutExpired as e:
            raise LineageLookupFailure(
                f"{cmd_str} timed out after {self.timeout} seconds"
            ) from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise LineageLookupFailure(
                f"{cmd_str} failed with exit code {e.returncode}: {stderr}"
            ) from e
        except OSError as e:
            raise LineageLookupFailure(f"Failed to run {cmd_str}: {e}") from e

    def task_nvr(self, task_id: str) -> str:
        """Return the NVR built by a Koji build task.

        Raises:
            LineageLookupFailure: If koji fails or the task built no SRPM.
        """
        output = self._run(["taskinfo", "-v", "-r", str(task_id)])
        nvr = parse_taskinfo_srpm(output)
        if not nvr:
            raise LineageLookupFailure(f"No SRPM found in Koji task {task_id}")
        logger.info("Task %s built %s", task_id, nvr)
        return nvr

    def list_tagged(
        self,
        tag: str,
        package: str,
        latest: bool = False,
        latest_n: int | None = None,
    ) -> list[str]:
        """List NVRs of ``package`` tagged in ``tag`` (with inheritance).

        Args:
            tag: Koji tag.
            package: Package name.
            latest: Only the latest build.
            latest_n: Only the N latest builds.

        Returns:
            NVRs in the order koji prints them.
        """
        args = ["list-tagged"]
        if latest:
            args.append("--latest")
        if latest_n is not None:
            args.extend(["--latest-n", str(latest_n)])
        args.extend(["--inherit", "--quiet", tag, package])
        return parse_list_tagged(self._run(args))


__all__ = ["KojiClient", "parse_list_tagged", "parse_taskinfo_srpm"]
