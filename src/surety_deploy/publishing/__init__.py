"""Publishing for surety-deploy.

This module exports:
- ArtifactPublisher: All-or-nothing publish across targets
- PublishTarget / PublishResult: Targets and outcome
- ArtifactSink / FilesystemSink / MemorySink: Sinks
- InterfaceDescriptors: The two ABIs to publish
"""

from __future__ import annotations

from surety_deploy.publishing.documents import (
    COMMIT_ORDER,
    InterfaceDescriptors,
    render_documents,
    render_json,
)
from surety_deploy.publishing.publisher import ArtifactPublisher, PublishResult, PublishTarget
from surety_deploy.publishing.sinks import ArtifactSink, FilesystemSink, MemorySink, StagedWrite

__all__: list[str] = [
    "ArtifactPublisher",
    "PublishTarget",
    "PublishResult",
    "ArtifactSink",
    "StagedWrite",
    "FilesystemSink",
    "MemorySink",
    "InterfaceDescriptors",
    "COMMIT_ORDER",
    "render_documents",
    "render_json",
]
