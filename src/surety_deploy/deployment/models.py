"""Deployment result models.

A deployment only exists once the ledger has confirmed it. The app
deployment carries the data deployment its constructor received, so an
AppDeployment cannot be built without a confirmed DataDeployment.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from surety_deploy.schemas.artifact import ADDRESS_PATTERN, ContractArtifact


class DeploymentReceipt(BaseModel):
    """What the ledger reports for a confirmed contract creation.

    Attributes:
        address: Address of the created contract.
        transaction_hash: Hash of the creation transaction.
        block_number: Block the transaction was mined in, if reported.
        gas_used: Gas consumed by the transaction, if reported.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str = Field(
        ...,
        pattern=ADDRESS_PATTERN,
        description="Address of the created contract",
    )
    transaction_hash: str = Field(
        default="",
        description="Hash of the creation transaction",
    )
    block_number: int | None = Field(
        default=None,
        ge=0,
        description="Block the transaction was mined in",
    )
    gas_used: int | None = Field(
        default=None,
        ge=0,
        description="Gas consumed by the transaction",
    )


class _ConfirmedDeployment(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    artifact: ContractArtifact = Field(
        ...,
        description="Artifact bound to its deployed address",
    )
    receipt: DeploymentReceipt = Field(
        ...,
        description="Ledger confirmation",
    )

    @model_validator(mode="after")
    def validate_address_matches_receipt(self) -> _ConfirmedDeployment:
        """The artifact must be bound to the address the ledger reported."""
        if self.artifact.deployed_address != self.receipt.address:
            msg = (
                f"{self.artifact.name} is bound to {self.artifact.deployed_address}, "
                f"receipt reports {self.receipt.address}"
            )
            raise ValueError(msg)
        return self

    @property
    def name(self) -> str:
        """Contract name."""
        return self.artifact.name

    @property
    def address(self) -> str:
        """Confirmed contract address."""
        return self.receipt.address


class DataDeployment(_ConfirmedDeployment):
    """Confirmed deployment of the dependency-free data contract."""


class AppDeployment(_ConfirmedDeployment):
    """Confirmed deployment of the app contract.

    Attributes:
        data: The data deployment whose address was the constructor input.
    """

    data: DataDeployment = Field(
        ...,
        description="Data deployment passed to the constructor",
    )


class DeploymentOutcome(BaseModel):
    """Both confirmed deployments of one pipeline run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    data: DataDeployment
    app: AppDeployment
