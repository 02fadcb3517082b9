"""CLI tests driven through Typer's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from itemfetch import __version__
from itemfetch.app import _parse_params, app
from itemfetch.exceptions import InvalidArgumentError


@pytest.fixture(autouse=True)
def _fast_mock(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove the mock endpoint's random latency."""
    from itemfetch import transport

    original = transport.MockItemsEndpoint.__init__

    def _init(self, *args, **kwargs):
        kwargs["latency"] = (0.0, 0.0)
        original(self, *args, **kwargs)

    monkeypatch.setattr(transport.MockItemsEndpoint, "__init__", _init)


class TestVersion:
    def test_version_flag(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"itemfetch {__version__}" in result.stdout


class TestLoadCommand:
    def test_load_prints_final_state_as_json(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--no-color", "load"])
        assert result.exit_code == 0, result.output

        state = json.loads(result.stdout)
        assert state["loading"] is False
        assert state["error"] is None
        assert state["data"] == ["alpha-10", "beta-5"]
        assert state["summary"] == {"total": 3, "active_count": 2, "max_score": 10.0}

    def test_second_run_hits_cache(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--no-color", "--verbose", "load"])
        assert result.exit_code == 0
        assert "Cache hit" in result.stderr

    def test_no_cache_skips_cache(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--no-color", "--verbose", "load", "--no-cache"])
        assert result.exit_code == 0
        assert "Cache hit" not in result.stderr

    def test_min_score_option(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "load", "--min-score", "7", "--runs", "1"])
        assert json.loads(result.stdout)["data"] == ["alpha-10"]

    def test_boot_banner_on_stderr(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "--no-color", "load", "--runs", "1"])
        assert "DiffTester v" in result.stderr
        assert "booting" not in result.stdout

    def test_retries_below_one_is_usage_error(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["load", "--retries", "0"])
        assert result.exit_code == 2

    def test_invalid_env_retries_is_config_error(
        self, cli_runner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from itemfetch.exceptions import ConfigError

        monkeypatch.setenv("ITEMFETCH_RETRY_COUNT", "0")
        result = cli_runner.invoke(app, ["load"])
        assert isinstance(result.exception, ConfigError)

    def test_bad_param_rejected(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["load", "--param", "novalue"])
        assert isinstance(result.exception, InvalidArgumentError)


class TestParseParams:
    def test_scalars_decoded(self) -> None:
        assert _parse_params(["limit=5", "sort=score", "flag=true"]) == {
            "limit": 5,
            "sort": "score",
            "flag": True,
        }

    def test_value_may_contain_equals(self) -> None:
        assert _parse_params(["q=a=b"]) == {"q": "a=b"}

    def test_missing_key_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            _parse_params(["=5"])


class TestConfigCommands:
    def test_show(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--json", "config", "show"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["request"]["retry_count"] == 2

    def test_show_reflects_project_file(self, cli_runner, isolated_config: Path) -> None:
        (isolated_config / "itemfetch.json").write_text(json.dumps({"cache": {"ttl_seconds": 10}}))
        result = cli_runner.invoke(app, ["--json", "--no-color", "config", "show"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["cache"]["ttl_seconds"] == 10
        assert "itemfetch.json" in result.stderr

    def test_show_reflects_env(
        self, cli_runner, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ITEMFETCH_RETRY_COUNT", "4")
        result = cli_runner.invoke(app, ["--json", "config", "show"])
        assert json.loads(result.stdout)["request"]["retry_count"] == 4

    def test_show_invalid_config_fails(self, cli_runner, isolated_config: Path) -> None:
        from itemfetch.exceptions import ConfigError

        (isolated_config / "itemfetch.json").write_text("[1]")
        result = cli_runner.invoke(app, ["config", "show"])
        assert isinstance(result.exception, ConfigError)

