"""Schema definitions for surety-deploy.

Models:
- ContractArtifact: Compiled contract with its ABI and bytecode
- NetworkConfig: Connection metadata published to consumers
- PipelineSpec: Root schema for deploy.yaml
- DocumentKind: Documents a publish target can receive
"""

from __future__ import annotations

from surety_deploy.schemas.artifact import ADDRESS_PATTERN, ContractArtifact
from surety_deploy.schemas.network_config import RPC_ENDPOINT_PATTERN, NetworkConfig
from surety_deploy.schemas.pipeline_spec import (
    DEFAULT_FILE_NAMES,
    ContractsSpec,
    DeployerSpec,
    DocumentKind,
    NetworkSpec,
    PipelineSpec,
    PublishSpec,
    TargetSpec,
)

__all__ = [
    "ADDRESS_PATTERN",
    "RPC_ENDPOINT_PATTERN",
    "ContractArtifact",
    "NetworkConfig",
    "PipelineSpec",
    "NetworkSpec",
    "ContractsSpec",
    "DeployerSpec",
    "PublishSpec",
    "TargetSpec",
    "DocumentKind",
    "DEFAULT_FILE_NAMES",
]
