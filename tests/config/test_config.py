from __future__ import annotations

import pytest

from chainsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    float_from_env,
    get_api_config,
    get_distribution_config,
    get_sync_config,
    int_from_env,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_numeric_settings_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_NUMBER", raising=False)

    assert int_from_env("EXAMPLE_NUMBER", 7) == 7
    assert float_from_env("EXAMPLE_NUMBER", 1.5) == 1.5


def test_numeric_settings_are_validated(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_NUMBER", "abc")
    with pytest.raises(ConfigurationError, match="must be an integer"):
        int_from_env("EXAMPLE_NUMBER", 1)

    monkeypatch.setenv("EXAMPLE_NUMBER", "0")
    with pytest.raises(ConfigurationError, match="must be >= 1"):
        int_from_env("EXAMPLE_NUMBER", 1, minimum=1)


def test_sync_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SYNC_LOG_RETENTION_DAYS", "14")
    monkeypatch.setenv("SYNC_LOG_STALE_HOURS", "0.5")
    monkeypatch.delenv("SYNC_SUMMARY_DAYS", raising=False)

    config = get_sync_config()

    assert (config.retention_days, config.stale_after_hours, config.summary_days) == (14, 0.5, 30)


def test_distribution_and_api_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "BRANCH_PUSH_TIMEOUT_SECONDS",
        "BRANCH_PUSH_PATH_PREFIX",
        "CHAINSYNC_API_HOST",
        "CHAINSYNC_API_PORT",
    ):
        monkeypatch.delenv(name, raising=False)

    distribution = get_distribution_config()
    api = get_api_config()

    assert (distribution.timeout_seconds, distribution.path_prefix) == (30.0, "/api/chain-core")
    assert (api.host, api.port) == ("127.0.0.1", 8000)
