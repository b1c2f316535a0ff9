"""Task-scoped results cache.

The CI runs this driver once per inspection, each time as a new process in
the same workdir. The cache is how those processes cooperate:

    workdir/
        cached                          sentinel, written last
        .run.lock                       serializes the run-once phase
        results_cache/after_build       NVR of the build under test
        results_cache/before_build      NVR compared against, may be empty
        results_cache/<name>_result     inspection output
        results_cache/<name>_status     inspection exit status
        results_cache/<name>_description

Files are replaced atomically. The sentinel is created only after lineage
and artifacts are in place, and readers check it before reading anything.
"""

from __future__ import annotations

import fcntl
import logging
import os
import re
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from rpminspect_runner.errors import (
    CacheCorruption,
    InfrastructureError,
    InvalidInspectionName,
)
from rpminspect_runner.types import CacheState, InspectionArtifact, LineagePair

if TYPE_CHECKING:
    from rpminspect_runner.config import Settings

logger = logging.getLogger(__name__)

SENTINEL_NAME = "cached"
LOCK_NAME = ".run.lock"
RESULTS_CACHE_NAME = "results_cache"
AFTER_BUILD_NAME = "after_build"
BEFORE_BUILD_NAME = "before_build"
SKIPPED_RESULT_NAME = "skipped_result"

_INSPECTION_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.+-]*$")


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` so readers see the old or new file only."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_text(path: Path) -> str:
    """Read ``path`` keeping carriage returns and tabs as written."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


class TaskCacheStore:
    """Filesystem-backed cache shared by all invocations of one CI task."""

    def __init__(self, workdir: Path, results_dir: Path | None = None) -> None:
        self.workdir = Path(workdir)
        if results_dir is None:
            results_dir = self.workdir / RESULTS_CACHE_NAME
        self.results_dir = Path(results_dir)
        self.sentinel_path = self.workdir / SENTINEL_NAME
        self.lock_path = self.workdir / LOCK_NAME

    @classmethod
    def from_settings(cls, settings: Settings) -> TaskCacheStore:
        return cls(settings.workdir, results_dir=settings.results_cache_dir)

    def ensure_dirs(self) -> None:
        self.results_dir.mkdir(parents=True, exist_ok=True)

    # State

    def is_complete(self) -> bool:
        """Return True once the run-once phase has finished."""
        return self.sentinel_path.exists()

    def state(self) -> CacheState:
        if self.is_complete():
            return CacheState.RUN_COMPLETE
        if (self.results_dir / AFTER_BUILD_NAME).exists():
            return CacheState.RESOLVED_NOT_RUN
        return CacheState.UNRESOLVED

    def mark_complete(self) -> None:
        """Create the sentinel. Must be the last write of the run."""
        atomic_write_text(self.sentinel_path, "")
        logger.info("Results cached in %s", self.results_dir)

    @contextmanager
    def claim_run(self, timeout: float | None = None) -> Iterator[bool]:
        """Claim the run-once phase for this process.

        Takes an exclusive lock on the task's lock file and yields True if
        the sentinel is still absent, i.e. the caller has to resolve and
        run. Yields False if another invocation has completed the run in
        the meantime.

        Args:
            timeout: Lock acquisition timeout in seconds (None = blocking).

        Raises:
            InfrastructureError: If the lock cannot be acquired in time.
        """
        if self.is_complete():
            yield False
            return

        self.workdir.mkdir(parents=True, exist_ok=True)
        fd = os.open(str(self.lock_path), os.O_RDWR | os.O_CREAT, 0o644)
        lock_acquired = False
        try:
            if timeout is not None:
                start = time.monotonic()
                while True:
                    try:
                        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                        lock_acquired = True
                        break
                    except BlockingIOError:
                        if time.monotonic() - start >= timeout:
                            raise InfrastructureError(
                                f"Timeout waiting for run lock {self.lock_path}"
                            ) from None
                        time.sleep(0.5)
            else:
                fcntl.flock(fd, fcntl.LOCK_EX)
                lock_acquired = True

            logger.debug("Run lock acquired: %s", self.lock_path)
            yield not self.is_complete()
        finally:
            if lock_acquired:
                fcntl.flock(fd, fcntl.LOCK_UN)
                logger.debug("Run lock released: %s", self.lock_path)
            os.close(fd)

    # Lineage

    def write_lineage(self, lineage: LineagePair) -> None:
        self.ensure_dirs()
        atomic_write_text(self.results_dir / AFTER_BUILD_NAME, lineage.after.nvr)
        before = lineage.before.nvr if lineage.before else ""
        atomic_write_text(self.results_dir / BEFORE_BUILD_NAME, before)

    def read_lineage(self) -> tuple[str, str | None]:
        """Return the cached (after, before) NVRs.

        Raises:
            CacheCorruption: If the run is complete but lineage is missing.
        """
        if not self.is_complete():
            raise CacheCorruption(
                f"Results in {self.workdir} are not cached yet",
                path=str(self.sentinel_path),
            )
        after = self._read_required(self.results_dir / AFTER_BUILD_NAME).strip()
        before = self._read_required(self.results_dir / BEFORE_BUILD_NAME).strip()
        if not after:
            raise CacheCorruption(
                "Cached after build is empty",
                path=str(self.results_dir / AFTER_BUILD_NAME),
            )
        return after, before or None

    # Artifacts

    def _artifact_path(self, name: str, kind: str) -> Path:
        if not _INSPECTION_NAME_RE.match(name):
            raise InvalidInspectionName(name)
        return self.results_dir / f"{name}_{kind}"

    def read_description(self, name: str) -> str | None:
        path = self._artifact_path(name, "description")
        if not path.exists():
            return None
        return read_text(path)

    def write_description(self, name: str, description: str) -> None:
        atomic_write_text(self._artifact_path(name, "description"), description)

    def read_artifact(self, name: str) -> InspectionArtifact | None:
        """Return the cached artifact of an inspection.

        Returns:
            The artifact, or None if the run did not produce a result for
            this inspection (it was skipped).

        Raises:
            CacheCorruption: If the result exists without a valid status.
            InvalidInspectionName: If ``name`` cannot name a cached file.
        """
        if not self.is_complete():
            raise CacheCorruption(
                f"Results in {self.workdir} are not cached yet",
                path=str(self.sentinel_path),
            )
        result_path = self._artifact_path(name, "result")
        if not result_path.exists():
            return None

        status_path = self._artifact_path(name, "status")
        raw_status = self._read_required(status_path).strip()
        try:
            status_code = int(raw_status)
        except ValueError:
            raise CacheCorruption(
                f"Invalid status {raw_status!r} for inspection {name}",
                path=str(status_path),
            ) from None

        return InspectionArtifact(
            name=name,
            description=self.read_description(name) or "",
            result_text=self._read_required(result_path),
            status_code=status_code,
        )

    def read_skipped_text(self) -> str | None:
        path = self.results_dir / SKIPPED_RESULT_NAME
        if not path.exists():
            return None
        return read_text(path)

    def _read_required(self, path: Path) -> str:
        try:
            return read_text(path)
        except OSError as e:
            raise CacheCorruption(f"Cannot read {path}: {e}", path=str(path)) from e


__all__ = [
    "AFTER_BUILD_NAME",
    "BEFORE_BUILD_NAME",
    "LOCK_NAME",
    "RESULTS_CACHE_NAME",
    "SENTINEL_NAME",
    "SKIPPED_RESULT_NAME",
    "TaskCacheStore",
    "atomic_write_text",
    "read_text",
]
