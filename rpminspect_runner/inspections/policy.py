"""Inspection enablement from the effective rpminspect configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def load_effective_config(path: Path) -> dict[str, Any]:
    """Load the effective configuration dump.

    Returns:
        Parsed mapping; empty if the file is missing or unreadable.
    """
    if not path.exists():
        logger.warning("Effective configuration %s not found", path)
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Cannot read effective configuration %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def is_inspection_enabled(config: dict[str, Any], name: str) -> bool:
    """Return False only if ``inspections.<name>`` is explicitly off."""
    inspections = config.get("inspections") or {}
    if not isinstance(inspections, dict):
        return True
    return bool(inspections.get(name, True))


__all__ = ["is_inspection_enabled", "load_effective_config"]
