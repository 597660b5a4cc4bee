"""Network configuration record published to consumers.

The NetworkConfig is the single record the dapp page and the oracle server
read to find the deployed contracts. Its wire form is:

    {"<network_name>": {"url": ..., "dataAddress": ..., "appAddress": ...}}
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from surety_deploy.schemas.artifact import ADDRESS_PATTERN

# JSON-RPC transports a browser or server consumer can connect to
RPC_ENDPOINT_PATTERN = r"^(https?|wss?)://\S+$"


class NetworkConfig(BaseModel):
    """Immutable connection metadata for one deployment run.

    Both addresses are required: the app contract is only ever recorded
    together with the data contract address its constructor received.
    Build instances through surety_deploy.assembler.assemble().

    Attributes:
        network_name: Network key in the published document (e.g., "localhost").
        rpc_endpoint: JSON-RPC endpoint consumers connect to.
        data_address: Address of the data contract.
        app_address: Address of the app contract.

    Example:
        >>> config = NetworkConfig(
        ...     network_name="localhost",
        ...     rpc_endpoint="http://localhost:7545",
        ...     data_address="0xAAA",
        ...     app_address="0xBBB",
        ... )
        >>> config.to_document()["localhost"]["appAddress"]
        '0xBBB'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    network_name: str = Field(
        ...,
        min_length=1,
        description="Network key in the published document",
    )
    rpc_endpoint: str = Field(
        ...,
        pattern=RPC_ENDPOINT_PATTERN,
        description="JSON-RPC endpoint consumers connect to",
    )
    data_address: str = Field(
        ...,
        pattern=ADDRESS_PATTERN,
        description="Address of the data contract",
    )
    app_address: str = Field(
        ...,
        pattern=ADDRESS_PATTERN,
        description="Address of the app contract",
    )

    def to_document(self) -> dict[str, dict[str, str]]:
        """Render the record in the shape consumers read.

        Returns:
            Mapping of network name to url, dataAddress and appAddress.
        """
        return {
            self.network_name: {
                "url": self.rpc_endpoint,
                "dataAddress": self.data_address,
                "appAddress": self.app_address,
            }
        }
