"""Build lineage resolution.

This module picks the "before" build rpminspect compares the build under
test against:
- resolve_before(): regular packages, by Koji's notion of "latest"
- resolve_before_module(): modules, by listing order within a name-stream
- resolve_lineage(): the (before, after) pair for a CI task

Builds are usually tagged automatically by the time CI runs, so the latest
build in the comparison tag is frequently the build under test itself. In
that case the resolver looks exactly one build further back. If that build
is also the build under test (duplicate tagging) no before build is used.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rpminspect_runner.errors import InvalidIdentifier
from rpminspect_runner.nvr import name_stream, package_name
from rpminspect_runner.types import BuildRecord, BuildSource, LineagePair, TaskContext

if TYPE_CHECKING:
    from rpminspect_runner.buildsys.koji import KojiClient
    from rpminspect_runner.buildsys.mbs import ModuleBuildService

logger = logging.getLogger(__name__)


def resolve_before(client: KojiClient, after_nvr: str, tag: str) -> str | None:
    """Find the build to compare a regular package build against.

    Args:
        client: Koji client.
        after_nvr: NVR of the build under test.
        tag: Koji tag holding older builds.

    Returns:
        NVR of the before build, or None if the tag has no other build.
    """
    pkg = package_name(after_nvr)

    latest = client.list_tagged(tag, pkg, latest=True)
    if not latest:
        logger.info("No builds of %s tagged in %s", pkg, tag)
        return None
    if latest[0] != after_nvr:
        return latest[0]

    logger.info("%s is already the latest build in %s, looking back", after_nvr, tag)
    for nvr in client.list_tagged(tag, pkg, latest_n=2):
        if nvr != after_nvr:
            return nvr
    return None


def _rows_in_name_stream(rows: list[str], wanted: str) -> list[str]:
    matching: list[str] = []
    for nvr in rows:
        try:
            if name_stream(nvr) == wanted:
                matching.append(nvr)
        except InvalidIdentifier:
            logger.debug("Ignoring unparsable tagged build %r", nvr)
    return matching


def resolve_before_module(client: KojiClient, after_nvr: str, tag: str) -> str | None:
    """Find the module build to compare a module build against.

    Koji lists a module's builds oldest first, so the candidate is the
    last build of the same name-stream.
    """
    stream = name_stream(after_nvr)
    rows = _rows_in_name_stream(
        client.list_tagged(tag, package_name(after_nvr)), stream
    )
    if not rows:
        logger.info("No builds of %s tagged in %s", stream, tag)
        return None
    if rows[-1] != after_nvr:
        return rows[-1]

    logger.info("%s is already the latest build in %s, looking back", after_nvr, tag)
    if len(rows) >= 2 and rows[-2] != after_nvr:
        return rows[-2]
    return None


def resolve_lineage(
    context: TaskContext,
    koji: KojiClient,
    mbs: ModuleBuildService | None = None,
) -> LineagePair:
    """Resolve the (before, after) builds of a CI task.

    Args:
        context: The CI task.
        koji: Koji client.
        mbs: Module Build Service client, required for module tasks.

    Returns:
        LineagePair; ``before`` is None when there is nothing to compare to.

    Raises:
        LineageLookupFailure: If Koji or MBS cannot be queried.
    """
    if context.is_module:
        if mbs is None:
            raise ValueError("A ModuleBuildService is required for module tasks")
        after_nvr = mbs.module_nvr(context.task_id)
        after = BuildRecord(nvr=after_nvr, source=BuildSource.MODULE)
        resolve = resolve_before_module
    else:
        after_nvr = koji.task_nvr(context.task_id)
        after = BuildRecord(
            nvr=after_nvr, source=BuildSource.KOJI_TASK, engine_arg=context.task_id
        )
        resolve = resolve_before

    before: BuildRecord | None = None
    if context.previous_tag:
        before_nvr = resolve(koji, after_nvr, context.previous_tag)
        if before_nvr:
            source = BuildSource.MODULE if context.is_module else BuildSource.KOJI_TAG
            before = BuildRecord(nvr=before_nvr, source=source)

    logger.info(
        "Lineage for task %s: %s -> %s",
        context.task_id,
        before.nvr if before else "(none)",
        after.nvr,
    )
    return LineagePair(after=after, before=before)


__all__ = ["resolve_before", "resolve_before_module", "resolve_lineage"]
