"""Tests for configuration module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

from rpminspect_runner.config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_WORKDIR,
    Settings,
    get_settings,
    print_settings_json,
)

CI_VARIABLES = (
    "RPMINSPECT_CONFIG",
    "RPMINSPECT_PROFILE_NAME",
    "RPMINSPECT_WORKDIR",
    "KOJI_BIN",
    "ARCHES",
    "DEFAULT_RELEASE_STRING",
    "IS_MODULE",
    "MBS_API_URL",
    "TESTS",
)


def clean_environ() -> dict[str, str]:
    return {
        key: value
        for key, value in os.environ.items()
        if key not in CI_VARIABLES and not key.startswith("RPMINSPECT_")
    }


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Settings should have sensible defaults."""
        with patch.dict(os.environ, clean_environ(), clear=True):
            settings = Settings()

        assert settings.config_path == DEFAULT_CONFIG_PATH
        assert settings.workdir == DEFAULT_WORKDIR
        assert settings.koji_bin == Path("/usr/bin/koji")
        assert settings.profile_name is None
        assert settings.is_module is False
        assert settings.max_retries >= 1
        assert settings.request_timeout > 0

    def test_settings_from_ci_environment(self) -> None:
        """Settings should read the variables the CI exports."""
        env = clean_environ()
        env.update(
            {
                "RPMINSPECT_CONFIG": "/etc/rpminspect/custom.yaml",
                "RPMINSPECT_PROFILE_NAME": "fedora-rawhide",
                "RPMINSPECT_WORKDIR": "/tmp/rpminspect-work",
                "KOJI_BIN": "/usr/bin/brew",
                "ARCHES": "x86_64,noarch,src",
                "DEFAULT_RELEASE_STRING": "fc37",
                "IS_MODULE": "yes",
                "MBS_API_URL": "https://mbs.example.com",
                "TESTS": "license,changedfiles",
            }
        )
        with patch.dict(os.environ, env, clear=True):
            settings = Settings()

        assert settings.config_path == Path("/etc/rpminspect/custom.yaml")
        assert settings.profile_name == "fedora-rawhide"
        assert settings.workdir == Path("/tmp/rpminspect-work")
        assert settings.koji_bin == Path("/usr/bin/brew")
        assert settings.arches == "x86_64,noarch,src"
        assert settings.default_release_string == "fc37"
        assert settings.is_module is True
        assert settings.mbs_api_url == "https://mbs.example.com"
        assert settings.tests == "license,changedfiles"

    def test_external_commands(self) -> None:
        """Helper commands default to the ones in the CI image."""
        env = clean_environ()
        with patch.dict(os.environ, env, clear=True):
            assert Settings().local_config_bin == "rpminspect_get_local_config.sh"
        env["RPMINSPECT_LOCAL_CONFIG_BIN"] = "/opt/bin/get-config"
        with patch.dict(os.environ, env, clear=True):
            assert Settings().local_config_bin == "/opt/bin/get-config"

    def test_is_module_only_for_truthy_words(self) -> None:
        """Anything but a yes-like value means a regular build."""
        env = clean_environ()
        env["IS_MODULE"] = "no"
        with patch.dict(os.environ, env, clear=True):
            assert Settings().is_module is False

    def test_empty_variables_ignored(self) -> None:
        """Empty CI variables should fall back to defaults."""
        env = clean_environ()
        env.update({"RPMINSPECT_PROFILE_NAME": "", "IS_MODULE": "", "ARCHES": ""})
        with patch.dict(os.environ, env, clear=True):
            settings = Settings()
        assert settings.profile_name is None
        assert settings.is_module is False
        assert settings.arches is None

    def test_prefixed_tunables(self) -> None:
        """Runner tunables should use the RPMINSPECT_RUNNER_ prefix."""
        env = clean_environ()
        env.update(
            {
                "RPMINSPECT_RUNNER_LOG_LEVEL": "DEBUG",
                "RPMINSPECT_RUNNER_MAX_RETRIES": "5",
                "RPMINSPECT_RUNNER_REQUEST_TIMEOUT": "12.5",
            }
        )
        with patch.dict(os.environ, env, clear=True):
            settings = Settings()
        assert settings.log_level == "DEBUG"
        assert settings.max_retries == 5
        assert settings.request_timeout == 12.5

    def test_field_names_accepted(self, tmp_path) -> None:
        """Settings should be constructible by field name."""
        settings = Settings(workdir=tmp_path, profile_name="p", is_module="yes")
        assert settings.workdir == tmp_path
        assert settings.profile_name == "p"
        assert settings.is_module is True

    def test_derived_paths(self, tmp_path) -> None:
        """Cache and config dump paths live in the workdir."""
        settings = Settings(workdir=tmp_path)
        assert settings.results_cache_dir == tmp_path / "results_cache"
        assert settings.effective_config_path == tmp_path / "effective_rpminspect.yaml"


class TestGetSettings:
    """Test get_settings function."""

    def test_returns_settings(self) -> None:
        """get_settings should return a Settings instance."""
        assert isinstance(get_settings(), Settings)


class TestPrintSettingsJson:
    """Test print_settings_json function."""

    def test_returns_valid_json(self, tmp_path) -> None:
        """Should render settings as JSON."""
        data = json.loads(print_settings_json(Settings(workdir=tmp_path)))
        assert data["workdir"] == str(tmp_path)
        assert "config_path" in data
        assert "max_retries" in data
