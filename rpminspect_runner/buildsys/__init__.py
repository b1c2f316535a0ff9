"""Build-system adapters.

This module handles:
- Koji task and tag queries through the koji CLI
- Module Build Service (MBS) lookups over HTTP
- Bounded retries for both
"""

from rpminspect_runner.buildsys.koji import KojiClient
from rpminspect_runner.buildsys.mbs import ModuleBuildInfo, ModuleBuildService

__all__ = ["KojiClient", "ModuleBuildInfo", "ModuleBuildService"]
