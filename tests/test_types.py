"""Tests for types.py module."""

import pytest

from rpminspect_runner.types import (
    INFRA_ERROR,
    BuildRecord,
    BuildSource,
    ExitCode,
    LineagePair,
)


class TestExitCode:
    def test_values(self):
        assert [int(code) for code in ExitCode] == [0, 1, 2, 3]
        assert INFRA_ERROR == 2


class TestBuildRecord:
    """Tests for BuildRecord dataclass."""

    def test_argument_defaults_to_nvr(self):
        assert BuildRecord("foo-1.1-2.fc37").argument == "foo-1.1-2.fc37"

    def test_task_argument(self):
        record = BuildRecord(
            "foo-1.2-3.fc37", source=BuildSource.KOJI_TASK, engine_arg="12345"
        )
        assert record.argument == "12345"


class TestLineagePair:
    """Tests for LineagePair dataclass."""

    def test_before_optional(self):
        assert LineagePair(after=BuildRecord("foo-1.2-3.fc37")).before is None

    def test_before_must_differ(self):
        """A build is never compared against itself."""
        with pytest.raises(ValueError):
            LineagePair(
                after=BuildRecord("foo-1.2-3.fc37", engine_arg="12345"),
                before=BuildRecord("foo-1.2-3.fc37"),
            )
