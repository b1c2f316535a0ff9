"""Shared fixtures.

Task variables exported by the CI must not leak into tests.
"""

import pytest

CI_VARIABLES = (
    "RPMINSPECT_CONFIG",
    "RPMINSPECT_PROFILE_NAME",
    "RPMINSPECT_WORKDIR",
    "RPMINSPECT_BIN",
    "RPMINSPECT_SPLITTER_BIN",
    "RPMINSPECT_LOCAL_CONFIG_BIN",
    "RPMINSPECT_PACKAGE_NAME",
    "RPMINSPECT_DATA_PACKAGE_NAME",
    "KOJI_BIN",
    "ARCHES",
    "DEFAULT_RELEASE_STRING",
    "IS_MODULE",
    "MBS_API_URL",
    "TESTS",
)


@pytest.fixture(autouse=True)
def clean_ci_environment(monkeypatch):
    for name in CI_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("RPMINSPECT_RUNNER_LOG_LEVEL", raising=False)
