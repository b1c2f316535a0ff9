"""Tests for inspections/localconfig.py module."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from rpminspect_runner.errors import EngineFailure
from rpminspect_runner.inspections.localconfig import LocalConfigFetcher

SUBPROCESS_RUN = "rpminspect_runner.inspections.localconfig.subprocess.run"


class TestLocalConfigFetcher:
    """Tests for LocalConfigFetcher class."""

    def test_compose_command(self):
        """Should pass the after build NVR as the only argument."""
        fetcher = LocalConfigFetcher("/usr/local/bin/get-config --quiet")
        assert fetcher.compose_command("foo-1.2-3.fc37") == [
            "/usr/local/bin/get-config",
            "--quiet",
            "foo-1.2-3.fc37",
        ]

    def test_fetch_runs_in_workdir(self, tmp_path):
        """The configuration lands where rpminspect will run."""
        fetcher = LocalConfigFetcher()
        workdir = tmp_path / "work"

        with patch(SUBPROCESS_RUN, return_value=MagicMock(returncode=0)) as mock_run:
            fetcher.fetch("foo-1.2-3.fc37", workdir)

        assert workdir.is_dir()
        assert mock_run.call_args.args[0] == [
            "rpminspect_get_local_config.sh",
            "foo-1.2-3.fc37",
        ]
        assert mock_run.call_args.kwargs["cwd"] == workdir

    def test_fetch_failure(self, tmp_path):
        fetcher = LocalConfigFetcher()
        completed = MagicMock(returncode=1, stderr="dist-git unreachable\n")

        with patch(SUBPROCESS_RUN, return_value=completed):
            with pytest.raises(EngineFailure, match="dist-git unreachable") as exc_info:
                fetcher.fetch("foo-1.2-3.fc37", tmp_path)

        assert exc_info.value.code == "local_config_failed"

    def test_command_missing(self, tmp_path):
        fetcher = LocalConfigFetcher()

        with patch(SUBPROCESS_RUN, side_effect=FileNotFoundError("no such file")):
            with pytest.raises(EngineFailure):
                fetcher.fetch("foo-1.2-3.fc37", tmp_path)

    def test_timeout(self, tmp_path):
        fetcher = LocalConfigFetcher(timeout=1)
        error = subprocess.TimeoutExpired(cmd="fetch", timeout=1)

        with patch(SUBPROCESS_RUN, side_effect=error):
            with pytest.raises(EngineFailure):
                fetcher.fetch("foo-1.2-3.fc37", tmp_path)
