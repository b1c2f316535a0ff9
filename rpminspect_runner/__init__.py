"""rpminspect runner - run-once rpminspect driver for CI pipelines.

This package resolves the build lineage for a CI task, runs rpminspect
exactly once per task and reports each inspection as an independent CI
step with CI-compatible exit codes.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
