"""surety-deploy: Deploy the FlightSurety contracts and publish their metadata.

This package provides:
- DeploymentSequencer: Deploy the data contract, then the app contract
- assemble: Build the NetworkConfig record from both deployments
- ArtifactPublisher: Publish the config and ABIs to every target, all or nothing
- DeploymentPipeline: The three steps above, in order
"""

from __future__ import annotations

__version__ = "0.1.0"

from surety_deploy.assembler import assemble
from surety_deploy.config import ConfigResolver

# Deployment
from surety_deploy.deployment import (
    AppDeployment,
    DataDeployment,
    DeploymentOutcome,
    DeploymentReceipt,
    DeploymentSequencer,
    LedgerClient,
    LedgerError,
    Web3Ledger,
)

# Error types
from surety_deploy.errors import (
    ArtifactLoadError,
    ConfigurationError,
    DeploymentFailure,
    PreconditionViolation,
    PublishFailure,
    PublishInconsistencyError,
    SuretyError,
)
from surety_deploy.pipeline import DeploymentPipeline, PipelineResult, run_spec

# Publishing
from surety_deploy.publishing import (
    ArtifactPublisher,
    ArtifactSink,
    FilesystemSink,
    InterfaceDescriptors,
    MemorySink,
    PublishResult,
    PublishTarget,
)

# Schema models
from surety_deploy.schemas import (
    ContractArtifact,
    DocumentKind,
    NetworkConfig,
    PipelineSpec,
    TargetSpec,
)

__all__ = [
    "__version__",
    # Pipeline
    "DeploymentPipeline",
    "PipelineResult",
    "run_spec",
    "ConfigResolver",
    # Deployment
    "DeploymentSequencer",
    "LedgerClient",
    "LedgerError",
    "Web3Ledger",
    "DeploymentReceipt",
    "DataDeployment",
    "AppDeployment",
    "DeploymentOutcome",
    # Assembly
    "assemble",
    # Publishing
    "ArtifactPublisher",
    "PublishTarget",
    "PublishResult",
    "ArtifactSink",
    "FilesystemSink",
    "MemorySink",
    "InterfaceDescriptors",
    # Errors
    "SuretyError",
    "DeploymentFailure",
    "PublishFailure",
    "PublishInconsistencyError",
    "PreconditionViolation",
    "ConfigurationError",
    "ArtifactLoadError",
    # Schema models
    "ContractArtifact",
    "NetworkConfig",
    "PipelineSpec",
    "TargetSpec",
    "DocumentKind",
]
