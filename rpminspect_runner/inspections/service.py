"""Inspection service module.

This module provides the high-level API used by every invocation:
- build_context(): TaskContext from CLI arguments and settings
- ensure_results(): resolve lineage and run rpminspect once per task

ensure_results() runs the whole resolve+run sequence under the task's run
lock and only if the sentinel is absent, so of N invocations for a task
exactly one does the work and the others just read the cache.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rpminspect_runner.lineage.resolver import resolve_lineage
from rpminspect_runner.types import TaskContext

if TYPE_CHECKING:
    from rpminspect_runner.buildsys.koji import KojiClient
    from rpminspect_runner.buildsys.mbs import ModuleBuildService
    from rpminspect_runner.cache.store import TaskCacheStore
    from rpminspect_runner.config import Settings
    from rpminspect_runner.inspections.engine import RpminspectEngine
    from rpminspect_runner.inspections.localconfig import LocalConfigFetcher
    from rpminspect_runner.inspections.splitter import ReportSplitter

logger = logging.getLogger(__name__)


def build_context(task_id: str, previous_tag: str, settings: Settings) -> TaskContext:
    """Create the immutable TaskContext for this CI task."""
    return TaskContext(
        task_id=task_id,
        previous_tag=previous_tag or "",
        arches=settings.arches,
        release_override=settings.default_release_string,
        profile=settings.profile_name,
        test_set=settings.tests,
        is_module=settings.is_module,
    )


def ensure_results(
    context: TaskContext,
    settings: Settings,
    store: TaskCacheStore,
    koji: KojiClient,
    engine: RpminspectEngine,
    splitter: ReportSplitter,
    mbs: ModuleBuildService | None = None,
    local_config: LocalConfigFetcher | None = None,
) -> bool:
    """Make sure the task's results are cached.

    Args:
        context: The CI task.
        settings: Application settings.
        store: The task's results cache.
        koji: Koji client.
        engine: rpminspect engine.
        splitter: Report splitter.
        mbs: Module Build Service client (module tasks only).
        local_config: Fetches the build's own rpminspect configuration
            before the run; skipped when None.

    Returns:
        True if this invocation performed the run, False if the results
        were already cached.

    Raises:
        LineageLookupFailure: If lineage cannot be resolved.
        EngineFailure: If the local configuration cannot be fetched, or
            rpminspect or the splitter fail to produce results.
        InfrastructureError: If the run lock cannot be acquired.
    """
    with store.claim_run(timeout=settings.lock_timeout) as should_run:
        if not should_run:
            logger.info("Results for task %s already cached", context.task_id)
            return False

        logger.info("Running inspections for task %s", context.task_id)
        store.ensure_dirs()

        lineage = resolve_lineage(context, koji, mbs)
        store.write_lineage(lineage)

        effective_config = settings.effective_config_path
        if not effective_config.exists():
            engine.dump_effective_config(effective_config, context.profile)

        if local_config is not None:
            local_config.fetch(lineage.after.nvr, store.workdir)

        result = engine.run(lineage, context, store.workdir)
        if result.exit_code != 0:
            logger.info(
                "rpminspect reported status %d; per-inspection results decide",
                result.exit_code,
            )

        splitter.split(result.report_path, store.results_dir)
        store.mark_complete()
        return True


__all__ = ["build_context", "ensure_results"]
