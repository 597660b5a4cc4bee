"""Contract deployment for surety-deploy.

This module exports:
- DeploymentSequencer: Deploys the data contract, then the app contract
- LedgerClient / Web3Ledger: Ledger access
- DataDeployment / AppDeployment: Confirmed deployment results
"""

from __future__ import annotations

from surety_deploy.deployment.ledger import LedgerClient, LedgerError, Web3Ledger
from surety_deploy.deployment.models import (
    AppDeployment,
    DataDeployment,
    DeploymentOutcome,
    DeploymentReceipt,
)
from surety_deploy.deployment.sequencer import STAGE_APP, STAGE_DATA, DeploymentSequencer

__all__: list[str] = [
    "DeploymentSequencer",
    "STAGE_DATA",
    "STAGE_APP",
    "LedgerClient",
    "LedgerError",
    "Web3Ledger",
    "DeploymentReceipt",
    "DataDeployment",
    "AppDeployment",
    "DeploymentOutcome",
]
