"""Artifact publisher.

Writes the network configuration and both ABIs to every target, all or
nothing:

1. Stage: every target writes its documents aside, concurrently. If any
   target fails, everything staged is discarded and no target changes.
2. Commit: staged targets are swapped into place one at a time. A commit
   failure leaves earlier targets updated and later ones untouched, which is
   reported as PublishInconsistencyError. The failing target itself may hold
   some new files already; those are listed as partially updated.

Anything uncommitted is discarded on interruption, so no staged temporary
file outlives a run.
"""

from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field

from surety_deploy.errors import PreconditionViolation, PublishFailure, PublishInconsistencyError
from surety_deploy.observability import publish_operation
from surety_deploy.publishing.documents import COMMIT_ORDER, digest, render_documents
from surety_deploy.publishing.sinks import FilesystemSink
from surety_deploy.schemas.pipeline_spec import DEFAULT_FILE_NAMES, DocumentKind

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from surety_deploy.publishing.documents import InterfaceDescriptors
    from surety_deploy.publishing.sinks import ArtifactSink, StagedWrite
    from surety_deploy.schemas.network_config import NetworkConfig
    from surety_deploy.schemas.pipeline_spec import TargetSpec

logger = structlog.get_logger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True)
class PublishTarget:
    """A named sink and the documents it receives.

    Attributes:
        name: Unique target name.
        sink: Where the documents are written.
        documents: Document kind to file name.
    """

    name: str
    sink: ArtifactSink
    documents: Mapping[DocumentKind, str] = field(
        default_factory=lambda: dict(DEFAULT_FILE_NAMES)
    )

    @classmethod
    def from_spec(cls, spec: TargetSpec) -> PublishTarget:
        """Build a filesystem target from its deploy.yaml entry."""
        return cls(name=spec.name, sink=FilesystemSink(spec.path), documents=dict(spec.files))

    def files(self, rendered: Mapping[DocumentKind, bytes]) -> dict[str, bytes]:
        """Select this target's documents, in commit order.

        Args:
            rendered: Every rendered document for the run.

        Returns:
            File name to content.
        """
        return {
            self.documents[kind]: rendered[kind] for kind in COMMIT_ORDER if kind in self.documents
        }


class PublishResult(BaseModel):
    """Outcome of a successful publish.

    Attributes:
        targets: Targets that hold the new documents, in commit order.
        files: Target name to the file names written there.
        config_digest: SHA-256 of the config document every target received.
        published_at: When the last target was committed (UTC).
        duration_ms: Time spent staging and committing.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    targets: list[str] = Field(..., description="Committed targets")
    files: dict[str, list[str]] = Field(..., description="Files written per target")
    config_digest: str = Field(..., description="SHA-256 of the config document")
    published_at: datetime = Field(..., description="Commit completion time (UTC)")
    duration_ms: int = Field(default=0, ge=0, description="Publish duration")


class ArtifactPublisher:
    """Publishes the configuration and ABIs to a set of targets.

    Attributes:
        max_workers: Upper bound on targets staged concurrently.

    Example:
        >>> publisher = ArtifactPublisher()
        >>> targets = [PublishTarget("dapp", FilesystemSink("pages/json_config"))]
        >>> result = publisher.publish(config, descriptors, targets)
        >>> result.targets
        ['dapp']
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        """Initialize the publisher.

        Args:
            max_workers: Upper bound on targets staged concurrently.
        """
        if max_workers < 1:
            raise PreconditionViolation(f"max_workers must be positive, got {max_workers}")
        self.max_workers = max_workers
        self._log = logger.bind(component="artifact_publisher")

    def publish(
        self,
        config: NetworkConfig,
        descriptors: InterfaceDescriptors,
        targets: Sequence[PublishTarget],
    ) -> PublishResult:
        """Publish to every target, or to none.

        Args:
            config: Assembled network configuration.
            descriptors: Both contracts' ABIs.
            targets: Output targets. Names must be unique.

        Returns:
            PublishResult once every target has been committed.

        Raises:
            PreconditionViolation: If there are no targets or names repeat.
            PublishFailure: If any target fails to stage. No target changed.
            PublishInconsistencyError: If a commit fails after staging.
        """
        targets = list(targets)
        self._validate_targets(targets)

        start_time = time.monotonic()
        rendered = render_documents(config, descriptors)
        config_digest = digest(rendered[DocumentKind.CONFIG])
        names = [target.name for target in targets]

        self._log.info(
            "publish_started",
            network=config.network_name,
            targets=names,
            config_digest=config_digest,
        )

        staged: dict[str, StagedWrite] = {}
        try:
            with publish_operation("stage", targets=names):
                failures = self._stage_all(targets, rendered, staged)
            if failures:
                self._discard(staged)
                raise PublishFailure(
                    failures,
                    internal_details="; ".join(f"{n}: {r}" for n, r in sorted(failures.items())),
                )

            with publish_operation("commit", targets=names):
                self._commit_all(targets, staged)
        except BaseException:
            self._discard(staged)
            raise

        duration_ms = int((time.monotonic() - start_time) * 1000)
        self._log.info(
            "publish_completed",
            targets=names,
            config_digest=config_digest,
            duration_ms=duration_ms,
        )

        return PublishResult(
            targets=names,
            files={target.name: list(target.files(rendered)) for target in targets},
            config_digest=config_digest,
            published_at=datetime.now(UTC),
            duration_ms=duration_ms,
        )

    def _validate_targets(self, targets: list[PublishTarget]) -> None:
        if not targets:
            raise PreconditionViolation("At least one publish target is required")

        names = [target.name for target in targets]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise PreconditionViolation(f"Duplicate publish targets: {', '.join(duplicates)}")

        for target in targets:
            if not target.documents:
                raise PreconditionViolation(f"Target '{target.name}' receives no documents")

    def _stage_all(
        self,
        targets: list[PublishTarget],
        rendered: Mapping[DocumentKind, bytes],
        staged: dict[str, StagedWrite],
    ) -> dict[str, str]:
        """Stage every target concurrently.

        Successful stages are recorded in ``staged`` as they complete, so the
        caller can discard them even if this method is interrupted.

        Returns:
            Target name to failure reason, empty when every target staged.
        """
        failures: dict[str, str] = {}
        workers = min(self.max_workers, len(targets))
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="surety-publish")
        futures: dict[Future[StagedWrite], PublishTarget] = {
            pool.submit(target.sink.stage, target.files(rendered)): target for target in targets
        }
        try:
            for future in as_completed(futures):
                target = futures[future]
                try:
                    staged[target.name] = future.result()
                except Exception as exc:
                    failures[target.name] = str(exc) or type(exc).__name__
                    self._log.warning(
                        "target_stage_failed",
                        target=target.name,
                        location=target.sink.location,
                        error=str(exc),
                    )
                else:
                    self._log.debug(
                        "target_staged",
                        target=target.name,
                        location=target.sink.location,
                    )
        finally:
            pool.shutdown(wait=True, cancel_futures=True)
            # Collect stages that finished after an interruption
            for future, target in futures.items():
                if target.name in staged or target.name in failures:
                    continue
                if future.done() and not future.cancelled() and future.exception() is None:
                    staged[target.name] = future.result()

        return failures

    def _commit_all(
        self,
        targets: list[PublishTarget],
        staged: dict[str, StagedWrite],
    ) -> None:
        committed: list[str] = []
        for index, target in enumerate(targets):
            write = staged[target.name]
            try:
                write.commit()
            except Exception as exc:
                staged.pop(target.name)
                swapped = list(write.swapped)
                write.discard()
                pending = [t.name for t in targets[index + 1 :]]
                self._log.error(
                    "target_commit_failed",
                    target=target.name,
                    location=target.sink.location,
                    committed=committed,
                    swapped=swapped,
                    pending=pending,
                    error=str(exc),
                )
                raise PublishInconsistencyError(
                    committed_targets=committed,
                    failed_targets={target.name: str(exc) or type(exc).__name__},
                    pending_targets=pending,
                    partial_targets={target.name: swapped} if swapped else None,
                    internal_details=repr(exc),
                ) from exc
            staged.pop(target.name)
            committed.append(target.name)
            self._log.info("target_committed", target=target.name, location=target.sink.location)

    def _discard(self, staged: dict[str, StagedWrite]) -> None:
        while staged:
            name, write = staged.popitem()
            try:
                write.discard()
            except OSError as exc:
                self._log.warning("staged_discard_failed", target=name, error=str(exc))
