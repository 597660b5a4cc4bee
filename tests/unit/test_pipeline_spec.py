"""Unit tests for the deploy.yaml schema."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from surety_deploy.schemas.pipeline_spec import (
    DEFAULT_FILE_NAMES,
    DeployerSpec,
    DocumentKind,
    PipelineSpec,
    PublishSpec,
    TargetSpec,
)


def _minimal(**publish: object) -> dict[str, object]:
    return {"publish": {"targets": [{"name": "dapp", "path": "out"}], **publish}}


class TestPipelineSpec:
    """Tests for the root model."""

    def test_defaults(self) -> None:
        spec = PipelineSpec.model_validate(_minimal())

        assert spec.network.name == "localhost"
        assert spec.network.url == "http://localhost:7545"
        assert spec.contracts.data == Path("build/contracts/FlightSuretyData.json")
        assert spec.contracts.app == Path("build/contracts/FlightSuretyApp.json")
        assert spec.deployer.account is None
        assert spec.deployer.receipt_timeout_seconds == 120.0
        assert spec.publish.max_workers == 4

    def test_target_receives_all_documents_by_default(self) -> None:
        target = PipelineSpec.model_validate(_minimal()).publish.targets[0]
        assert target.files == DEFAULT_FILE_NAMES

    def test_publish_is_required(self) -> None:
        with pytest.raises(ValidationError):
            PipelineSpec.model_validate({})

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            PipelineSpec.model_validate({**_minimal(), "retries": 3})

    def test_with_network_overrides(self) -> None:
        spec = PipelineSpec.model_validate(_minimal())
        updated = spec.with_network(name="ganache", url="http://127.0.0.1:8545")

        assert updated.network.name == "ganache"
        assert updated.network.url == "http://127.0.0.1:8545"
        assert spec.network.name == "localhost"

    def test_with_network_revalidates(self) -> None:
        spec = PipelineSpec.model_validate(_minimal())
        with pytest.raises(ValidationError):
            spec.with_network(url="not a url")


class TestFromYaml:
    """Tests for loading deploy.yaml from disk."""

    def test_resolves_paths_against_file_directory(self, deploy_yaml: Path) -> None:
        spec = PipelineSpec.from_yaml(deploy_yaml)
        base = deploy_yaml.parent.resolve()

        assert spec.contracts.data == base / "build" / "contracts" / "FlightSuretyData.json"
        assert [t.path for t in spec.publish.targets] == [
            base / "flightsurety_app" / "pages" / "json_config",
            base / "flightsurety_app" / "pages" / "server",
        ]

    def test_reads_file_mapping(self, deploy_yaml: Path) -> None:
        dapp, server = PipelineSpec.from_yaml(deploy_yaml).publish.targets

        assert dapp.files[DocumentKind.DATA_ABI] == "fsData_ABI.json"
        assert dapp.files[DocumentKind.APP_ABI] == "fsApp_ABI.json"
        assert server.files == {DocumentKind.CONFIG: "config.json"}

    def test_absolute_paths_kept(self, tmp_path: Path) -> None:
        absolute = tmp_path / "elsewhere"
        path = tmp_path / "deploy.yaml"
        path.write_text(
            yaml.safe_dump({"publish": {"targets": [{"name": "dapp", "path": str(absolute)}]}})
        )
        assert PipelineSpec.from_yaml(path).publish.targets[0].path == absolute

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            PipelineSpec.from_yaml(tmp_path / "deploy.yaml")

    def test_empty_file_fails_validation(self, tmp_path: Path) -> None:
        path = tmp_path / "deploy.yaml"
        path.write_text("")
        with pytest.raises(ValidationError):
            PipelineSpec.from_yaml(path)


class TestTargetSpec:
    """Tests for target validation."""

    @pytest.mark.parametrize("name", ["1dapp", "dapp server", "", "-x"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(ValidationError):
            TargetSpec(name=name, path=Path("out"))

    def test_empty_files_rejected(self) -> None:
        with pytest.raises(ValidationError, match="at least one document"):
            TargetSpec(name="dapp", path=Path("out"), files={})

    @pytest.mark.parametrize("file_name", ["../config.json", "sub/config.json", "..", ""])
    def test_file_names_must_be_plain(self, file_name: str) -> None:
        with pytest.raises(ValidationError):
            TargetSpec(name="dapp", path=Path("out"), files={DocumentKind.CONFIG: file_name})

    def test_file_names_must_be_distinct(self) -> None:
        with pytest.raises(ValidationError, match="distinct"):
            TargetSpec(
                name="dapp",
                path=Path("out"),
                files={DocumentKind.CONFIG: "a.json", DocumentKind.APP_ABI: "a.json"},
            )

    def test_unknown_document_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TargetSpec.model_validate({"name": "dapp", "path": "out", "files": {"bytecode": "x.json"}})


class TestPublishSpec:
    """Tests for publish settings."""

    def test_duplicate_target_names_rejected(self) -> None:
        with pytest.raises(ValidationError, match="duplicate target names: dapp"):
            PublishSpec.model_validate(
                {"targets": [{"name": "dapp", "path": "a"}, {"name": "dapp", "path": "b"}]}
            )

    def test_at_least_one_target(self) -> None:
        with pytest.raises(ValidationError):
            PublishSpec.model_validate({"targets": []})

    @pytest.mark.parametrize("workers", [0, 33])
    def test_max_workers_bounds(self, workers: int) -> None:
        with pytest.raises(ValidationError):
            PublishSpec.model_validate({"max_workers": workers, "targets": [{"name": "a", "path": "a"}]})


class TestDeployerSpec:
    """Tests for transaction settings."""

    def test_account_must_be_hex(self) -> None:
        with pytest.raises(ValidationError):
            DeployerSpec(account="alice")

    def test_gas_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DeployerSpec(gas=0)
