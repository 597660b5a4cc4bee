"""Configuration assembly.

Builds the single NetworkConfig record for a pipeline run from the two
confirmed deployments. Pure: no I/O, no merging with earlier records.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from surety_deploy.deployment.models import AppDeployment, DataDeployment
from surety_deploy.errors import PreconditionViolation
from surety_deploy.schemas.network_config import NetworkConfig


def assemble(
    network_name: str,
    rpc_endpoint: str,
    data: DataDeployment | None,
    app: AppDeployment | None,
) -> NetworkConfig:
    """Assemble the configuration record for one run.

    The app address is only recorded together with the data deployment it
    was constructed with, which must have been confirmed before it.

    Args:
        network_name: Network key in the published document.
        rpc_endpoint: JSON-RPC endpoint consumers connect to.
        data: Confirmed data contract deployment.
        app: Confirmed app contract deployment built on ``data``.

    Returns:
        Immutable NetworkConfig.

    Raises:
        PreconditionViolation: If a deployment is missing, the app deployment
            was not built on ``data``, the app was confirmed before the data
            contract, or the names and endpoint are invalid.

    Example:
        >>> config = assemble("localhost", "http://localhost:7545", data, app)
        >>> config.to_document()
        {'localhost': {'url': 'http://localhost:7545', 'dataAddress': '0xAAA', 'appAddress': '0xBBB'}}
    """
    if not isinstance(data, DataDeployment):
        raise PreconditionViolation("Cannot assemble a configuration without a data deployment")
    if not isinstance(app, AppDeployment):
        raise PreconditionViolation("Cannot assemble a configuration without an app deployment")

    if app.data.address != data.address:
        raise PreconditionViolation(
            "App deployment was not constructed with this data deployment",
            internal_details=f"app.data={app.data.address} data={data.address}",
        )

    data_block = data.receipt.block_number
    app_block = app.receipt.block_number
    if data_block is not None and app_block is not None and app_block < data_block:
        raise PreconditionViolation(
            "App deployment was confirmed before the data deployment",
            internal_details=f"data_block={data_block} app_block={app_block}",
        )

    try:
        return NetworkConfig(
            network_name=network_name,
            rpc_endpoint=rpc_endpoint,
            data_address=data.address,
            app_address=app.address,
        )
    except PydanticValidationError as exc:
        raise PreconditionViolation(
            "Invalid network configuration inputs",
            internal_details=str(exc),
        ) from exc
