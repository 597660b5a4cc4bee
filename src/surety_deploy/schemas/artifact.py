"""Compiled contract artifact model.

A ContractArtifact is what the compiler produced for one contract: its name,
its ABI (the interface descriptor consumers use to build calls) and its
creation bytecode. The ABI is carried through the pipeline unchanged.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from surety_deploy.errors import ArtifactLoadError, PreconditionViolation

# Hex address as returned by the ledger (checksummed or not)
ADDRESS_PATTERN = r"^0x[0-9a-fA-F]+$"


class ContractArtifact(BaseModel):
    """A compiled contract, optionally bound to its deployed address.

    Attributes:
        name: Contract name (e.g., "FlightSuretyData").
        abi: Interface descriptor as produced by the compiler.
        bytecode: Creation bytecode submitted on deployment.
        deployed_address: Address assigned by the ledger. None until the
            contract has been deployed; set exactly once via mark_deployed().

    Example:
        >>> artifact = ContractArtifact.from_build_file("build/contracts/FlightSuretyData.json")
        >>> deployed = artifact.mark_deployed("0xAAA")
        >>> deployed.deployed_address
        '0xAAA'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(
        ...,
        min_length=1,
        description="Contract name",
    )
    abi: list[dict[str, Any]] = Field(
        ...,
        description="Interface descriptor (ABI) produced by the compiler",
    )
    bytecode: str = Field(
        ...,
        min_length=1,
        description="Creation bytecode",
    )
    deployed_address: str | None = Field(
        default=None,
        pattern=ADDRESS_PATTERN,
        description="Address assigned at successful deployment",
    )

    @property
    def is_deployed(self) -> bool:
        """Whether the ledger has assigned an address to this artifact."""
        return self.deployed_address is not None

    def mark_deployed(self, address: str) -> ContractArtifact:
        """Return a copy of this artifact bound to its deployed address.

        Args:
            address: Address confirmed by the ledger.

        Returns:
            New frozen ContractArtifact with deployed_address set.

        Raises:
            PreconditionViolation: If the artifact already has an address,
                or the address is malformed.
        """
        if self.deployed_address is not None:
            raise PreconditionViolation(
                f"{self.name} is already deployed at {self.deployed_address}",
            )
        try:
            return ContractArtifact.model_validate(
                {**self.model_dump(), "deployed_address": address}
            )
        except PydanticValidationError as exc:
            raise PreconditionViolation(
                f"Invalid deployed address for {self.name}: {address!r}",
                internal_details=str(exc),
            ) from exc

    @classmethod
    def from_build_file(cls, path: str | Path) -> ContractArtifact:
        """Load a contract from a compiler build artifact.

        Supports Truffle build files (contractName, abi, bytecode) and the
        nested {"bytecode": {"object": ...}} form written by Foundry and
        Hardhat. The contract name falls back to the file stem.

        Args:
            path: Path to the JSON build artifact.

        Returns:
            Undeployed ContractArtifact.

        Raises:
            ArtifactLoadError: If the file is missing, not JSON, or lacks an
                ABI or bytecode.
        """
        path = Path(path)
        if not path.exists():
            raise ArtifactLoadError("Build artifact not found", path=str(path))

        try:
            raw: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ArtifactLoadError(
                "Build artifact is not readable JSON",
                path=str(path),
                internal_details=str(exc),
            ) from exc

        if not isinstance(raw, dict):
            raise ArtifactLoadError("Build artifact must be a JSON object", path=str(path))

        bytecode = raw.get("bytecode")
        if isinstance(bytecode, dict):
            bytecode = bytecode.get("object")
        if not bytecode or bytecode == "0x":
            raise ArtifactLoadError("Build artifact has no bytecode", path=str(path))
        if not str(bytecode).startswith("0x"):
            bytecode = f"0x{bytecode}"

        if "abi" not in raw:
            raise ArtifactLoadError("Build artifact has no ABI", path=str(path))

        try:
            return cls(
                name=raw.get("contractName") or path.stem,
                abi=raw["abi"],
                bytecode=bytecode,
            )
        except PydanticValidationError as exc:
            raise ArtifactLoadError(
                "Build artifact is invalid",
                path=str(path),
                internal_details=str(exc),
            ) from exc
