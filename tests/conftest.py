"""Shared pytest fixtures for surety-deploy tests.

This module provides a scripted ledger double, compiled artifacts and
build files used across unit and integration tests.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from surety_deploy.deployment.ledger import LedgerError
from surety_deploy.deployment.models import DeploymentReceipt
from surety_deploy.schemas.artifact import ContractArtifact

DATA_ABI: list[dict[str, Any]] = [
    {
        "inputs": [],
        "payable": False,
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "isOperational",
        "outputs": [{"name": "", "type": "bool"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function",
    },
]

APP_ABI: list[dict[str, Any]] = [
    {
        "inputs": [{"name": "dataContract", "type": "address"}],
        "payable": False,
        "stateMutability": "nonpayable",
        "type": "constructor",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": False, "name": "airline", "type": "address"},
            {"indexed": False, "name": "flight", "type": "string"},
            {"indexed": False, "name": "timestamp", "type": "uint256"},
        ],
        "name": "OracleRequest",
        "type": "event",
    },
    {
        "constant": False,
        "inputs": [{"name": "flight", "type": "string"}],
        "name": "buyInsurance",
        "outputs": [],
        "payable": True,
        "stateMutability": "payable",
        "type": "function",
    },
]


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests. Without this, structlog may use
    different processors depending on test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class FakeLedger:
    """Scripted ledger client.

    Each deploy() call consumes the next scripted outcome: an address string
    is confirmed in the next block, a LedgerError is raised.

    Attributes:
        calls: (contract name, constructor args) for every deploy() call.
    """

    def __init__(
        self,
        outcomes: Sequence[str | LedgerError] = ("0xAAA", "0xBBB"),
        rpc_endpoint: str = "http://localhost:7545",
    ) -> None:
        self._outcomes = list(outcomes)
        self._rpc_endpoint = rpc_endpoint
        self._block = 0
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    @property
    def rpc_endpoint(self) -> str:
        return self._rpc_endpoint

    def deploy(
        self,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any] = (),
    ) -> DeploymentReceipt:
        self.calls.append((artifact.name, tuple(constructor_args)))
        if not self._outcomes:
            raise AssertionError(f"unexpected deployment of {artifact.name}")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, LedgerError):
            raise outcome
        self._block += 1
        return DeploymentReceipt(
            address=outcome,
            transaction_hash=f"0x{self._block:064x}",
            block_number=self._block,
            gas_used=21000 * self._block,
        )


def write_build_file(path: Path, name: str, abi: list[dict[str, Any]], bytecode: str) -> Path:
    """Write a Truffle-style build artifact."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"contractName": name, "abi": abi, "bytecode": bytecode}),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def fake_ledger() -> FakeLedger:
    """Ledger that confirms the data contract at 0xAAA and the app at 0xBBB."""
    return FakeLedger()


@pytest.fixture
def make_ledger() -> type[FakeLedger]:
    """Build a ledger with scripted outcomes: make_ledger(["0xAAA", LedgerError("reverted")])."""
    return FakeLedger


@pytest.fixture
def data_artifact() -> ContractArtifact:
    """Compiled, undeployed data contract."""
    return ContractArtifact(name="FlightSuretyData", abi=DATA_ABI, bytecode="0x6080")


@pytest.fixture
def app_artifact() -> ContractArtifact:
    """Compiled, undeployed app contract."""
    return ContractArtifact(name="FlightSuretyApp", abi=APP_ABI, bytecode="0x6081")


@pytest.fixture
def build_dir(tmp_path: Path) -> Path:
    """Directory holding both Truffle build artifacts."""
    contracts = tmp_path / "build" / "contracts"
    write_build_file(contracts / "FlightSuretyData.json", "FlightSuretyData", DATA_ABI, "0x6080")
    write_build_file(contracts / "FlightSuretyApp.json", "FlightSuretyApp", APP_ABI, "0x6081")
    return contracts


@pytest.fixture
def deploy_yaml(tmp_path: Path, build_dir: Path) -> Path:
    """deploy.yaml with the dapp and server targets, relative to tmp_path."""
    path = tmp_path / "deploy.yaml"
    path.write_text(
        """\
network:
  name: localhost
  url: http://localhost:7545

contracts:
  data: build/contracts/FlightSuretyData.json
  app: build/contracts/FlightSuretyApp.json

publish:
  targets:
    - name: dapp
      path: flightsurety_app/pages/json_config
      files:
        config: config.json
        data_abi: fsData_ABI.json
        app_abi: fsApp_ABI.json
    - name: server
      path: flightsurety_app/pages/server
      files:
        config: config.json
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()
