"""Build lineage resolution (which build to compare against)."""

from rpminspect_runner.lineage.resolver import (
    resolve_before,
    resolve_before_module,
    resolve_lineage,
)

__all__ = ["resolve_before", "resolve_before_module", "resolve_lineage"]
