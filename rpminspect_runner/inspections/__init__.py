"""Inspection orchestration module.

This module handles:
- Fetching the build's own rpminspect configuration
- Running rpminspect once per task
- Splitting its report into per-inspection artifacts
- Reporting a single inspection from the cache
"""

from rpminspect_runner.inspections.engine import EngineResult, RpminspectEngine
from rpminspect_runner.inspections.localconfig import LocalConfigFetcher
from rpminspect_runner.inspections.splitter import ReportSplitter

__all__ = [
    "EngineResult",
    "LocalConfigFetcher",
    "ReportSplitter",
    "RpminspectEngine",
]

# Access service and report via rpminspect_runner.inspections.service, etc.
