"""Ledger clients used to deploy contracts.

This module provides:
- LedgerClient: Protocol every ledger client implements
- Web3Ledger: JSON-RPC client built on web3.py

A client blocks until the ledger confirms the deployment or reports a
failure. It never retries; retry policy belongs to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from surety_deploy.deployment.models import DeploymentReceipt
from surety_deploy.observability import get_logger

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from surety_deploy.schemas.artifact import ContractArtifact


class LedgerError(Exception):
    """Raised by a ledger client when a deployment is not confirmed.

    The sequencer converts this into a DeploymentFailure for its stage.

    Attributes:
        reason: Short, user-safe description of the failure.
        details: Technical details for logging.
    """

    def __init__(self, reason: str, *, details: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.details = details


class LedgerClient(Protocol):
    """Deploys compiled contracts and reports the confirmed result."""

    @property
    def rpc_endpoint(self) -> str:
        """Endpoint the client talks to."""
        ...

    def deploy(
        self,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any] = (),
    ) -> DeploymentReceipt:
        """Deploy a contract and block until it is confirmed.

        Raises:
            LedgerError: If the deployment is not confirmed.
        """
        ...


class Web3Ledger:
    """Deploys contracts through a JSON-RPC node with web3.py.

    Attributes:
        rpc_endpoint: JSON-RPC endpoint of the node.
        account: Sending account, or None for the node's first account.
        gas: Explicit gas limit, or None for the node's estimate.
        receipt_timeout_seconds: How long to wait for each receipt.

    Example:
        >>> ledger = Web3Ledger("http://localhost:7545")
        >>> receipt = ledger.deploy(artifact)
        >>> receipt.address
        '0x5b1869D9A4C187F2EAa108f3062412ecf0526b24'
    """

    def __init__(
        self,
        rpc_endpoint: str,
        *,
        account: str | None = None,
        gas: int | None = None,
        receipt_timeout_seconds: float = 120.0,
        web3: Web3 | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize Web3Ledger.

        Args:
            rpc_endpoint: JSON-RPC endpoint of the node.
            account: Sending account address.
            gas: Gas limit per deployment.
            receipt_timeout_seconds: Seconds to wait for each receipt.
            web3: Pre-built Web3 instance. Built from rpc_endpoint if omitted.
            logger: Optional structlog logger. Uses default if not provided.
        """
        self._rpc_endpoint = rpc_endpoint
        self.account = account
        self.gas = gas
        self.receipt_timeout_seconds = receipt_timeout_seconds
        self._w3 = web3 or Web3(Web3.HTTPProvider(rpc_endpoint))
        self._logger = (logger or get_logger()).bind(rpc_endpoint=rpc_endpoint)

    @property
    def rpc_endpoint(self) -> str:
        """Endpoint the client talks to."""
        return self._rpc_endpoint

    def deploy(
        self,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any] = (),
    ) -> DeploymentReceipt:
        """Send the creation transaction and wait for its receipt.

        Args:
            artifact: Compiled contract to deploy.
            constructor_args: Constructor arguments, in order.

        Returns:
            Receipt of the confirmed deployment.

        Raises:
            LedgerError: If the node is unreachable, the constructor reverts,
                the transaction runs out of gas, or no receipt arrives in time.
        """
        try:
            if not self._w3.is_connected():
                raise LedgerError(f"ledger unreachable at {self._rpc_endpoint}")

            sender = self._resolve_sender()
            contract = self._w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

            tx_params: dict[str, Any] = {"from": sender}
            if self.gas is not None:
                tx_params["gas"] = self.gas

            tx_hash = contract.constructor(*constructor_args).transact(tx_params)
            self._logger.info(
                "deployment_submitted",
                contract=artifact.name,
                transaction_hash=_hex(tx_hash),
            )

            receipt = self._w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.receipt_timeout_seconds,
            )
        except LedgerError:
            raise
        except (Web3Exception, ValueError, OSError) as exc:
            raise LedgerError(_describe(exc), details=repr(exc)) from exc

        if receipt.get("status") == 0:
            raise LedgerError(
                "transaction reverted",
                details=f"tx={_hex(receipt.get('transactionHash'))} gas_used={receipt.get('gasUsed')}",
            )

        address = receipt.get("contractAddress")
        if not address:
            raise LedgerError("receipt has no contract address")

        return DeploymentReceipt(
            address=str(address),
            transaction_hash=_hex(receipt.get("transactionHash", tx_hash)),
            block_number=receipt.get("blockNumber"),
            gas_used=receipt.get("gasUsed"),
        )

    def _resolve_sender(self) -> str:
        """Return the configured account or the node's first unlocked account."""
        if self.account is not None:
            return Web3.to_checksum_address(self.account)
        accounts = self._w3.eth.accounts
        if not accounts:
            raise LedgerError("node exposes no unlocked accounts; configure deployer.account")
        return str(accounts[0])


def _hex(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    return str(value)


def _describe(exc: Exception) -> str:
    """Map web3 and transport exceptions to a short reason."""
    if isinstance(exc, TimeExhausted):
        return "timed out waiting for the deployment receipt"
    if isinstance(exc, ContractLogicError):
        return f"constructor reverted: {exc}"
    if isinstance(exc, OSError):
        return f"ledger unreachable: {exc}"
    message = str(exc).lower()
    if "out of gas" in message or "gas required exceeds" in message:
        return "out of gas"
    if "revert" in message:
        return f"constructor reverted: {exc}"
    return f"{type(exc).__name__}: {exc}"
