"""Deploy-and-publish pipeline.

Runs DeploymentSequencer -> assemble -> ArtifactPublisher strictly in order.
Nothing is published unless both deployments were confirmed, and every
failure propagates to the caller; there is no partial-success result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field

from surety_deploy.assembler import assemble
from surety_deploy.deployment.ledger import Web3Ledger
from surety_deploy.deployment.models import AppDeployment, DataDeployment
from surety_deploy.deployment.sequencer import DeploymentSequencer
from surety_deploy.publishing.documents import InterfaceDescriptors
from surety_deploy.publishing.publisher import ArtifactPublisher, PublishResult, PublishTarget
from surety_deploy.schemas.artifact import ContractArtifact
from surety_deploy.schemas.network_config import NetworkConfig

if TYPE_CHECKING:
    from collections.abc import Sequence

    from surety_deploy.deployment.ledger import LedgerClient
    from surety_deploy.schemas.pipeline_spec import PipelineSpec

logger = structlog.get_logger(__name__)


class PipelineResult(BaseModel):
    """Outcome of a fully successful pipeline run.

    Attributes:
        config: The published network configuration.
        data: Confirmed data contract deployment.
        app: Confirmed app contract deployment.
        publish: Publish outcome across all targets.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    config: NetworkConfig = Field(..., description="Published network configuration")
    data: DataDeployment = Field(..., description="Data contract deployment")
    app: AppDeployment = Field(..., description="App contract deployment")
    publish: PublishResult = Field(..., description="Publish outcome")


class DeploymentPipeline:
    """Deploys both contracts and publishes the result to every target.

    Attributes:
        sequencer: Deploys the contracts in dependency order.
        publisher: Publishes the configuration and ABIs.

    Example:
        >>> pipeline = DeploymentPipeline(
        ...     DeploymentSequencer(Web3Ledger("http://localhost:7545")),
        ...     ArtifactPublisher(),
        ... )
        >>> result = pipeline.run(
        ...     network_name="localhost",
        ...     rpc_endpoint="http://localhost:7545",
        ...     data_artifact=data_artifact,
        ...     app_artifact=app_artifact,
        ...     targets=targets,
        ... )
    """

    def __init__(self, sequencer: DeploymentSequencer, publisher: ArtifactPublisher) -> None:
        """Initialize the pipeline.

        Args:
            sequencer: Deploys the contracts in dependency order.
            publisher: Publishes the configuration and ABIs.
        """
        self.sequencer = sequencer
        self.publisher = publisher

    def run(
        self,
        *,
        network_name: str,
        rpc_endpoint: str,
        data_artifact: ContractArtifact,
        app_artifact: ContractArtifact,
        targets: Sequence[PublishTarget],
    ) -> PipelineResult:
        """Run one deployment and publish.

        Args:
            network_name: Network key in the published document.
            rpc_endpoint: JSON-RPC endpoint consumers connect to.
            data_artifact: Compiled data contract.
            app_artifact: Compiled app contract.
            targets: Output targets.

        Returns:
            PipelineResult for the run.

        Raises:
            DeploymentFailure: If either deployment fails; nothing is published.
            PublishFailure: If staging fails; no target is modified.
            PublishInconsistencyError: If a commit fails part way.
            PreconditionViolation: On invalid inputs.
        """
        log = logger.bind(network=network_name, rpc_endpoint=rpc_endpoint)
        log.info(
            "pipeline_started",
            data_contract=data_artifact.name,
            app_contract=app_artifact.name,
            targets=[target.name for target in targets],
        )

        outcome = self.sequencer.deploy(data_artifact, app_artifact)
        config = assemble(network_name, rpc_endpoint, outcome.data, outcome.app)
        descriptors = InterfaceDescriptors.from_outcome(outcome)
        published = self.publisher.publish(config, descriptors, targets)

        log.info(
            "pipeline_completed",
            data_address=config.data_address,
            app_address=config.app_address,
            targets=published.targets,
        )
        return PipelineResult(config=config, data=outcome.data, app=outcome.app, publish=published)

    @classmethod
    def from_spec(
        cls,
        spec: PipelineSpec,
        ledger: LedgerClient | None = None,
    ) -> DeploymentPipeline:
        """Wire a pipeline from deploy.yaml settings.

        Args:
            spec: Loaded pipeline specification.
            ledger: Ledger client override. Defaults to a Web3Ledger for
                spec.network.url.

        Returns:
            Configured DeploymentPipeline.
        """
        if ledger is None:
            ledger = Web3Ledger(
                spec.network.url,
                account=spec.deployer.account,
                gas=spec.deployer.gas,
                receipt_timeout_seconds=spec.deployer.receipt_timeout_seconds,
            )
        return cls(
            DeploymentSequencer(ledger),
            ArtifactPublisher(max_workers=spec.publish.max_workers),
        )


def run_spec(spec: PipelineSpec, ledger: LedgerClient | None = None) -> PipelineResult:
    """Load the build artifacts named in ``spec`` and run the pipeline.

    Raises:
        ArtifactLoadError: If a build artifact cannot be loaded.
        DeploymentFailure: If either deployment fails.
        PublishFailure: If publishing fails.
    """
    data_artifact = ContractArtifact.from_build_file(spec.contracts.data)
    app_artifact = ContractArtifact.from_build_file(spec.contracts.app)
    targets = [PublishTarget.from_spec(target) for target in spec.publish.targets]

    pipeline = DeploymentPipeline.from_spec(spec, ledger=ledger)
    return pipeline.run(
        network_name=spec.network.name,
        rpc_endpoint=spec.network.url,
        data_artifact=data_artifact,
        app_artifact=app_artifact,
        targets=targets,
    )
