"""Published document rendering.

Every document is rendered once per publish call so all targets receive
byte-identical content. Documents are pretty-printed JSON with tab
indentation, the format the dapp page and oracle server already read.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from surety_deploy.schemas.pipeline_spec import DocumentKind

if TYPE_CHECKING:
    from surety_deploy.deployment.models import DeploymentOutcome
    from surety_deploy.schemas.network_config import NetworkConfig

# Kinds in the order they are swapped into place. The config document goes
# last: it is the only one that references deployed addresses.
COMMIT_ORDER: tuple[DocumentKind, ...] = (
    DocumentKind.DATA_ABI,
    DocumentKind.APP_ABI,
    DocumentKind.CONFIG,
)


class InterfaceDescriptors(BaseModel):
    """The two contracts' ABIs, exactly as the compiler produced them.

    Attributes:
        data: ABI of the data contract.
        app: ABI of the app contract.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    data: list[dict[str, Any]] = Field(..., description="ABI of the data contract")
    app: list[dict[str, Any]] = Field(..., description="ABI of the app contract")

    @classmethod
    def from_outcome(cls, outcome: DeploymentOutcome) -> InterfaceDescriptors:
        """Take the ABIs from a pair of confirmed deployments."""
        return cls(data=outcome.data.artifact.abi, app=outcome.app.artifact.abi)


def render_json(payload: Any) -> bytes:
    """Render a payload as tab-indented JSON.

    Args:
        payload: JSON-serialisable value.

    Returns:
        UTF-8 encoded document.
    """
    return json.dumps(payload, indent="\t", ensure_ascii=False).encode("utf-8")


def render_documents(
    config: NetworkConfig,
    descriptors: InterfaceDescriptors,
) -> dict[DocumentKind, bytes]:
    """Render all publishable documents for one run.

    Args:
        config: Assembled network configuration.
        descriptors: Both contracts' ABIs.

    Returns:
        Mapping of document kind to rendered bytes.
    """
    return {
        DocumentKind.CONFIG: render_json(config.to_document()),
        DocumentKind.DATA_ABI: render_json(descriptors.data),
        DocumentKind.APP_ABI: render_json(descriptors.app),
    }


def digest(payload: bytes) -> str:
    """Return the SHA-256 hex digest of a rendered document."""
    return hashlib.sha256(payload).hexdigest()
