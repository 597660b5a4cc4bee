"""Deployment sequencer.

Deploys the dependency-free data contract first, then the app contract with
the data contract's address as its constructor input. Each deployment
irreversibly creates on-chain state, so a failure at either step stops the
sequence and nothing downstream runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from surety_deploy.deployment.ledger import LedgerError
from surety_deploy.deployment.models import (
    AppDeployment,
    DataDeployment,
    DeploymentOutcome,
    DeploymentReceipt,
)
from surety_deploy.errors import DeploymentFailure, PreconditionViolation
from surety_deploy.observability import deploy_operation

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Any

    from surety_deploy.deployment.ledger import LedgerClient
    from surety_deploy.schemas.artifact import ContractArtifact

logger = structlog.get_logger(__name__)

STAGE_DATA = "data"
STAGE_APP = "app"


class DeploymentSequencer:
    """Deploys the data contract, then the app contract that depends on it.

    Attributes:
        ledger: Client used to submit deployments.

    Example:
        >>> sequencer = DeploymentSequencer(Web3Ledger("http://localhost:7545"))
        >>> data = sequencer.deploy_data_contract(data_artifact)
        >>> app = sequencer.deploy_app_contract(app_artifact, data)
        >>> app.data.address == data.address
        True
    """

    def __init__(self, ledger: LedgerClient) -> None:
        """Initialize the sequencer.

        Args:
            ledger: Client used to submit deployments.
        """
        self.ledger = ledger
        self._log = logger.bind(component="deployment_sequencer")

    def deploy_data_contract(self, artifact: ContractArtifact) -> DataDeployment:
        """Deploy the dependency-free data contract.

        Args:
            artifact: Compiled, undeployed data contract.

        Returns:
            Confirmed DataDeployment.

        Raises:
            DeploymentFailure: If the ledger does not confirm the deployment.
            PreconditionViolation: If the artifact is already deployed.
        """
        receipt = self._deploy(STAGE_DATA, artifact, ())
        return DataDeployment(artifact=artifact.mark_deployed(receipt.address), receipt=receipt)

    def deploy_app_contract(
        self,
        artifact: ContractArtifact,
        data: DataDeployment,
    ) -> AppDeployment:
        """Deploy the app contract with the data contract's address.

        Args:
            artifact: Compiled, undeployed app contract.
            data: Confirmed data deployment from deploy_data_contract().

        Returns:
            Confirmed AppDeployment bound to ``data``.

        Raises:
            DeploymentFailure: If the ledger does not confirm the deployment.
            PreconditionViolation: If ``data`` is not a confirmed data
                deployment or the artifact is already deployed.
        """
        if not isinstance(data, DataDeployment):
            raise PreconditionViolation(
                "The app contract requires a confirmed data contract deployment",
                internal_details=f"got {type(data).__name__}",
            )

        receipt = self._deploy(STAGE_APP, artifact, (data.address,))
        return AppDeployment(
            artifact=artifact.mark_deployed(receipt.address),
            receipt=receipt,
            data=data,
        )

    def deploy(
        self,
        data_artifact: ContractArtifact,
        app_artifact: ContractArtifact,
    ) -> DeploymentOutcome:
        """Deploy both contracts in dependency order.

        Args:
            data_artifact: Compiled data contract.
            app_artifact: Compiled app contract.

        Returns:
            DeploymentOutcome holding both confirmed deployments.

        Raises:
            DeploymentFailure: If either deployment fails. The app contract
                is never attempted when the data contract fails.
        """
        data = self.deploy_data_contract(data_artifact)
        app = self.deploy_app_contract(app_artifact, data)
        return DeploymentOutcome(data=data, app=app)

    def _deploy(
        self,
        stage: str,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any],
    ) -> DeploymentReceipt:
        if artifact.is_deployed:
            raise PreconditionViolation(
                f"{artifact.name} is already deployed at {artifact.deployed_address}",
            )

        self._log.info("deployment_started", stage=stage, contract=artifact.name)
        with deploy_operation(stage, contract=artifact.name, rpc_endpoint=self.ledger.rpc_endpoint):
            try:
                receipt = self.ledger.deploy(artifact, constructor_args)
            except LedgerError as exc:
                raise DeploymentFailure(
                    stage=stage,
                    contract=artifact.name,
                    reason=exc.reason,
                    internal_details=exc.details or exc.reason,
                ) from exc

        self._log.info(
            "deployment_confirmed",
            stage=stage,
            contract=artifact.name,
            address=receipt.address,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
        )
        return receipt
