"""Tests for buildsys/koji.py module.

Uses mocked subprocess for koji invocations.
"""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from rpminspect_runner.buildsys.koji import (
    KojiClient,
    parse_list_tagged,
    parse_taskinfo_srpm,
)
from rpminspect_runner.config import Settings
from rpminspect_runner.errors import LineageLookupFailure

TASKINFO_OUTPUT = """Task: 12345
Type: build
Request Parameters:
  Source: git+https://src.fedoraproject.org/rpms/foo.git#abc
  Build Target: f37-candidate
Owner: packager
State: closed
Created: Mon Jan  2 10:00:00 2023
Build: foo-1.2-3.fc37 (2100000)

  Task: 12346
  Type: buildSRPMFromSCM
  Owner: packager
  State: closed
  Created: Mon Jan  2 10:00:05 2023
  SRPM: /mnt/koji/work/tasks/2346/12346/foo-1.2-3.fc37.src.rpm
  Log Files:
    /mnt/koji/work/tasks/2346/12346/build.log

  Task: 12347
  Type: buildArch
  SRPM: /mnt/koji/work/tasks/2347/12347/foo-1.2-3.fc37.src.rpm
"""


def completed(stdout: str = "") -> MagicMock:
    result = MagicMock()
    result.stdout = stdout
    result.returncode = 0
    return result


@pytest.fixture
def client() -> KojiClient:
    return KojiClient("/usr/bin/koji", timeout=5, attempts=3, retry_delay=0)


class TestParseTaskinfoSrpm:
    """Tests for parse_taskinfo_srpm function."""

    def test_first_srpm(self):
        """Should return the basename of the first SRPM without suffix."""
        assert parse_taskinfo_srpm(TASKINFO_OUTPUT) == "foo-1.2-3.fc37"

    def test_no_srpm(self):
        """Should return None when the task lists no SRPM."""
        assert parse_taskinfo_srpm("Task: 1\nType: build\n") is None


class TestParseListTagged:
    """Tests for parse_list_tagged function."""

    def test_first_column(self):
        """Should keep only the NVR column."""
        output = (
            "foo-1.2-3.fc37   f37-updates-candidate  bodhi\n"
            "foo-1.1-2.fc37   f37-updates            bodhi\n"
        )
        assert parse_list_tagged(output) == ["foo-1.2-3.fc37", "foo-1.1-2.fc37"]

    def test_blank_lines(self):
        """Should ignore blank lines."""
        assert parse_list_tagged("\n  \n") == []


class TestKojiClient:
    """Tests for KojiClient."""

    def test_from_settings(self):
        """Should take binary, timeout and retries from settings."""
        settings = Settings(koji_bin="/usr/bin/brew", max_retries=4, retry_delay=0)
        koji = KojiClient.from_settings(settings)
        assert koji.koji_bin == Path("/usr/bin/brew")
        assert koji.attempts == 4
        assert koji.name == "brew"

    @patch("rpminspect_runner.buildsys.koji.subprocess.run")
    def test_task_nvr(self, mock_run, client):
        """Should run taskinfo and return the SRPM NVR."""
        mock_run.return_value = completed(TASKINFO_OUTPUT)

        assert client.task_nvr("12345") == "foo-1.2-3.fc37"
        cmd = mock_run.call_args[0][0]
        assert cmd == ["/usr/bin/koji", "taskinfo", "-v", "-r", "12345"]
        assert mock_run.call_args[1]["timeout"] == 5

    @patch("rpminspect_runner.buildsys.koji.subprocess.run")
    def test_task_without_srpm(self, mock_run, client):
        """Should fail rather than return an empty NVR."""
        mock_run.return_value = completed("Task: 12345\n")

        with pytest.raises(LineageLookupFailure):
            client.task_nvr("12345")

    @patch("rpminspect_runner.buildsys.koji.subprocess.run")
    def test_list_tagged_latest(self, mock_run, client):
        """Should pass --latest and --inherit."""
        mock_run.return_value = completed("foo-1.2-3.fc37 f37 bodhi\n")

        assert client.list_tagged("f37", "foo", latest=True) == ["foo-1.2-3.fc37"]
        cmd = mock_run.call_args[0][0]
        assert cmd == [
            "/usr/bin/koji",
            "list-tagged",
            "--latest",
            "--inherit",
            "--quiet",
            "f37",
            "foo",
        ]

    @patch("rpminspect_runner.buildsys.koji.subprocess.run")
    def test_list_tagged_latest_n(self, mock_run, client):
        """Should pass --latest-n."""
        mock_run.return_value = completed("")

        assert client.list_tagged("f37", "foo", latest_n=2) == []
        cmd = mock_run.call_args[0][0]
        assert "--latest-n" in cmd
        assert cmd[cmd.index("--latest-n") + 1] == "2"

    @patch("rpminspect_runner.buildsys.koji.subprocess.run")
    def test_retries_then_succeeds(self, mock_run, client):
        """Should retry failed calls up to the attempt limit."""
        mock_run.side_effect = [
            subprocess.CalledProcessError(1, ["koji"], stderr="connection reset"),
            subprocess.TimeoutExpired(["koji"], 5),
            completed("foo-1.1-2.fc37 f37 bodhi\n"),
        ]

        assert client.list_tagged("f37", "foo") == ["foo-1.1-2.fc37"]
        assert mock_run.call_count == 3

    @patch("rpminspect_runner.buildsys.koji.subprocess.run")
    def test_gives_up_after_attempts(self, mock_run, client):
        """Should raise LineageLookupFailure once attempts are exhausted."""
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["koji"], stderr="GenericError"
        )

        with pytest.raises(LineageLookupFailure) as exc_info:
            client.list_tagged("f37", "foo", latest=True)
        assert mock_run.call_count == 3
        assert "GenericError" in str(exc_info.value)
        assert exc_info.value.code == "lineage_lookup_failure"

    @patch("rpminspect_runner.buildsys.koji.subprocess.run")
    def test_timeout(self, mock_run, client):
        """Timeouts should surface as LineageLookupFailure."""
        mock_run.side_effect = subprocess.TimeoutExpired(["koji"], 5)

        with pytest.raises(LineageLookupFailure, match="timed out"):
            client.task_nvr("12345")

    @patch("rpminspect_runner.buildsys.koji.subprocess.run")
    def test_missing_binary(self, mock_run, client):
        """A missing koji binary is not retried."""
        mock_run.side_effect = FileNotFoundError("koji")

        with pytest.raises(LineageLookupFailure):
            client.task_nvr("12345")
        assert mock_run.call_count == 1
