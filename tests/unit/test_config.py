"""Unit tests for ConfigResolver."""

from __future__ import annotations

from pathlib import Path

import pytest

from surety_deploy.config import (
    CONFIG_PATH_ENV_VAR,
    NETWORK_NAME_ENV_VAR,
    RPC_URL_ENV_VAR,
    ConfigResolver,
    apply_environment_overrides,
)
from surety_deploy.errors import ConfigurationError
from surety_deploy.schemas.pipeline_spec import PipelineSpec


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove configuration variables inherited from the shell."""
    for var in (CONFIG_PATH_ENV_VAR, NETWORK_NAME_ENV_VAR, RPC_URL_ENV_VAR):
        monkeypatch.delenv(var, raising=False)


class TestFindConfigFile:
    """Tests for deploy.yaml discovery."""

    def test_env_var_takes_precedence(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, deploy_yaml: Path
    ) -> None:
        monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(deploy_yaml))
        resolver = ConfigResolver(search_paths=(tmp_path / "nowhere",))
        assert resolver.find_config_file() == deploy_yaml

    def test_first_search_path_wins(self, tmp_path: Path) -> None:
        first = tmp_path / "first"
        second = tmp_path / "second"
        for directory in (first, second):
            directory.mkdir()
            (directory / "deploy.yaml").write_text("publish: {}\n")

        resolver = ConfigResolver(search_paths=(first, second))
        assert resolver.find_config_file() == first / "deploy.yaml"

    def test_falls_through_to_later_search_path(self, tmp_path: Path) -> None:
        hidden = tmp_path / ".surety"
        hidden.mkdir()
        (hidden / "deploy.yaml").write_text("publish: {}\n")

        resolver = ConfigResolver(search_paths=(tmp_path, hidden))
        assert resolver.find_config_file() == hidden / "deploy.yaml"

    def test_not_found_lists_searched_paths(self, tmp_path: Path) -> None:
        resolver = ConfigResolver(search_paths=(tmp_path,))
        with pytest.raises(ConfigurationError, match="not found") as exc_info:
            resolver.find_config_file()
        assert str(tmp_path / "deploy.yaml") in str(exc_info.value)


class TestLoad:
    """Tests for loading and validating deploy.yaml."""

    def test_load_explicit_path(self, deploy_yaml: Path) -> None:
        spec = ConfigResolver().load(deploy_yaml)
        assert [t.name for t in spec.publish.targets] == ["dapp", "server"]

    def test_load_discovered(self, deploy_yaml: Path) -> None:
        spec = ConfigResolver(search_paths=(deploy_yaml.parent,)).load()
        assert spec.network.url == "http://localhost:7545"

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigResolver().load(tmp_path / "missing.yaml")

    def test_unreadable_path(self, tmp_path: Path) -> None:
        """A directory where the file should be is a configuration error."""
        path = tmp_path / "deploy.yaml"
        path.mkdir()
        with pytest.raises(ConfigurationError, match="not readable") as exc_info:
            ConfigResolver().load(path)
        assert exc_info.value.file_path == str(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "deploy.yaml"
        path.write_text("publish: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigResolver().load(path)

    def test_schema_error_reports_field(self, tmp_path: Path) -> None:
        path = tmp_path / "deploy.yaml"
        path.write_text(
            "network:\n  url: localhost:7545\npublish:\n  targets:\n    - name: dapp\n      path: out\n"
        )
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigResolver().load(path)

        assert exc_info.value.field_path == "network.url"
        assert exc_info.value.file_path == str(path)

    def test_environment_overrides_applied(
        self, monkeypatch: pytest.MonkeyPatch, deploy_yaml: Path
    ) -> None:
        monkeypatch.setenv(NETWORK_NAME_ENV_VAR, "ganache")
        monkeypatch.setenv(RPC_URL_ENV_VAR, "http://127.0.0.1:8545")

        spec = ConfigResolver().load(deploy_yaml)

        assert spec.network.name == "ganache"
        assert spec.network.url == "http://127.0.0.1:8545"


class TestApplyEnvironmentOverrides:
    """Tests for SURETY_NETWORK_NAME and SURETY_RPC_URL."""

    @pytest.fixture
    def spec(self) -> PipelineSpec:
        return PipelineSpec.model_validate({"publish": {"targets": [{"name": "dapp", "path": "out"}]}})

    def test_no_overrides_returns_same_spec(self, spec: PipelineSpec) -> None:
        assert apply_environment_overrides(spec) is spec

    def test_empty_values_ignored(self, monkeypatch: pytest.MonkeyPatch, spec: PipelineSpec) -> None:
        monkeypatch.setenv(RPC_URL_ENV_VAR, "")
        assert apply_environment_overrides(spec) is spec

    def test_url_only(self, monkeypatch: pytest.MonkeyPatch, spec: PipelineSpec) -> None:
        monkeypatch.setenv(RPC_URL_ENV_VAR, "ws://localhost:8546")
        updated = apply_environment_overrides(spec)
        assert updated.network.url == "ws://localhost:8546"
        assert updated.network.name == "localhost"

    def test_invalid_override(self, monkeypatch: pytest.MonkeyPatch, spec: PipelineSpec) -> None:
        monkeypatch.setenv(RPC_URL_ENV_VAR, "not-a-url")
        with pytest.raises(ConfigurationError, match="Invalid network override") as exc_info:
            apply_environment_overrides(spec, file_path="deploy.yaml")
        assert exc_info.value.field_path == "network"
