"""NVR (name-version-release) parsing.

Package names may contain hyphens, so fields are always taken from the
right: the last two hyphen-delimited fields are version and release, and
whatever precedes them is the name. A name that itself ends in a
version-looking segment (``python-foo-2-1.0-1.fc37``) cannot be told apart
from its version; the rightmost split is used regardless.

Module builds are identified as ``name-stream-version.context``; the
module's "name-stream" is everything but the last field.
"""

from __future__ import annotations

from dataclasses import dataclass

from rpminspect_runner.errors import InvalidIdentifier


@dataclass(frozen=True)
class NVR:
    """A parsed package NVR."""

    name: str
    version: str
    release: str

    def __str__(self) -> str:
        return f"{self.name}-{self.version}-{self.release}"


def _split_right(nvr: str, fields: int) -> list[str]:
    if not nvr or nvr != nvr.strip():
        raise InvalidIdentifier(nvr, "empty or surrounded by whitespace")
    parts = nvr.rsplit("-", fields)
    if len(parts) != fields + 1:
        raise InvalidIdentifier(
            nvr, f"expected at least {fields} hyphen-delimited suffix field(s)"
        )
    if not all(parts):
        raise InvalidIdentifier(nvr, "empty hyphen-delimited field")
    return parts


def parse_nvr(nvr: str) -> NVR:
    """Parse an NVR into its name, version and release.

    Args:
        nvr: Package NVR, e.g. ``foo-1.2-3.fc37``.

    Returns:
        Parsed NVR.

    Raises:
        InvalidIdentifier: If the NVR has fewer than two suffix fields.
    """
    name, version, release = _split_right(nvr, 2)
    return NVR(name=name, version=version, release=release)


def package_name(nvr: str) -> str:
    """Return the package name (N) of an NVR."""
    return parse_nvr(nvr).name


def name_stream(nvr: str) -> str:
    """Return the ``name-stream`` prefix of a module NVR."""
    prefix, _ = _split_right(nvr, 1)
    return prefix


def module_nvr(name: str, stream: str, version: str, context: str | None) -> str:
    """Compose the NVR Koji uses for a module build."""
    nvr = f"{name}-{stream}-{version}"
    if context:
        nvr = f"{nvr}.{context}"
    return nvr


__all__ = [
    "NVR",
    "module_nvr",
    "name_stream",
    "package_name",
    "parse_nvr",
]
