"""Custom exception hierarchy for surety-deploy.

This module defines the exception classes used throughout the pipeline:
- SuretyError: Base exception for all surety-deploy errors
- DeploymentFailure: A contract deployment was not confirmed by the ledger
- PublishFailure: Targets could not be staged; nothing was modified
- PublishInconsistencyError: Some targets were swapped, others were not
- PreconditionViolation: A component was called with invalid inputs
- ConfigurationError: deploy.yaml is missing or invalid
- ArtifactLoadError: A compiled build artifact could not be read

User-facing messages are safe to display. Technical details are logged
internally via structlog and never shown to the user.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class SuretyError(Exception):
    """Base exception for surety-deploy.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging only.

    Example:
        >>> raise SuretyError(
        ...     "Deployment failed",
        ...     internal_details="eth_sendTransaction: out of gas at block 12",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize SuretyError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "surety_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class DeploymentFailure(SuretyError):
    """Raised when the ledger does not confirm a contract deployment.

    Use this exception when:
    - The RPC endpoint is unreachable
    - The constructor reverted
    - The transaction ran out of gas or timed out waiting for a receipt

    Never retried at this layer. Aborts the pipeline before anything is
    published.

    Attributes:
        stage: Pipeline stage that failed ("data" or "app").
        contract: Name of the contract being deployed.
        reason: Short description of the failure.

    Example:
        >>> raise DeploymentFailure(
        ...     stage="app",
        ...     contract="FlightSuretyApp",
        ...     reason="constructor reverted",
        ... )
        # User sees: "Deployment of FlightSuretyApp (app) failed: constructor reverted"
    """

    def __init__(
        self,
        *,
        stage: str,
        contract: str,
        reason: str,
        internal_details: str | None = None,
    ) -> None:
        """Initialize DeploymentFailure.

        Args:
            stage: Pipeline stage that failed ("data" or "app").
            contract: Name of the contract being deployed.
            reason: Short description of the failure.
            internal_details: Technical details for internal logging only.
        """
        user_message = f"Deployment of {contract} ({stage}) failed: {reason}"
        super().__init__(user_message, internal_details=internal_details)

        self.stage = stage
        self.contract = contract
        self.reason = reason


class PublishFailure(SuretyError):
    """Raised when one or more targets could not be staged.

    No target was modified: every staged file has been discarded and all
    targets still hold their prior state.

    Attributes:
        failed_targets: Mapping of target name to failure reason.
    """

    def __init__(
        self,
        failed_targets: dict[str, str],
        *,
        user_message: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize PublishFailure.

        Args:
            failed_targets: Mapping of target name to failure reason.
            user_message: Override for the default message.
            internal_details: Technical details for internal logging only.
        """
        if user_message is None:
            names = ", ".join(sorted(failed_targets)) or "none"
            user_message = f"Publishing failed for target(s): {names}. No target was modified"
        super().__init__(user_message, internal_details=internal_details)

        self.failed_targets = failed_targets


class PublishInconsistencyError(PublishFailure):
    """Raised when a commit fails after some documents were already swapped.

    Committed targets hold the new documents. A failed target may be
    partially committed: the files listed in ``partial_targets`` hold new
    content, its other files hold their prior content. Pending targets, and
    failed targets with nothing swapped, hold their prior state. This must
    be corrected out of band.

    Attributes:
        committed_targets: Targets that hold the new documents.
        partial_targets: Failed target name to the file names already swapped.
        pending_targets: Targets that were never swapped.
        failed_targets: Mapping of target name to commit failure reason.

    Example:
        >>> raise PublishInconsistencyError(
        ...     committed_targets=["dapp"],
        ...     failed_targets={"server": "Permission denied"},
        ...     pending_targets=[],
        ... )
        # User sees: "Targets are inconsistent: updated [dapp], stale [server]"
    """

    def __init__(
        self,
        *,
        committed_targets: list[str],
        failed_targets: dict[str, str],
        pending_targets: list[str],
        partial_targets: dict[str, list[str]] | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize PublishInconsistencyError.

        Args:
            committed_targets: Targets that hold the new documents.
            failed_targets: Mapping of target name to commit failure reason.
            pending_targets: Targets that were never swapped.
            partial_targets: Failed target name to the file names it already
                holds in their new form. Targets with no swapped file are
                omitted.
            internal_details: Technical details for internal logging only.
        """
        partial = {name: files for name, files in (partial_targets or {}).items() if files}
        stale = [name for name in sorted(failed_targets) if name not in partial]
        stale += list(pending_targets)

        parts = [f"updated [{', '.join(committed_targets)}]"]
        if partial:
            described = "; ".join(
                f"{name}: {', '.join(files)}" for name, files in sorted(partial.items())
            )
            parts.append(f"partially updated [{described}]")
        parts.append(f"stale [{', '.join(stale)}]")
        user_message = "Targets are inconsistent: " + ", ".join(parts)

        super().__init__(
            failed_targets,
            user_message=user_message,
            internal_details=internal_details,
        )

        self.committed_targets = committed_targets
        self.partial_targets = partial
        self.pending_targets = pending_targets



class PreconditionViolation(SuretyError):
    """Raised when a component is called with inputs its caller controls.

    These are programming errors, e.g. assembling a configuration for an app
    deployment that was not built on the given data deployment. They are not
    recoverable at runtime.
    """

    pass


class ConfigurationError(SuretyError):
    """Raised when deploy.yaml cannot be found, parsed or validated.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (if known).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid RPC endpoint",
        ...     file_path="deploy.yaml",
        ...     field_path="network.url",
        ... )
        # User sees: "Invalid RPC endpoint (in deploy.yaml, field 'network.url')"
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Safe message to display to the user.
            file_path: Path to the configuration file (optional).
            field_path: Dot-separated path to the field (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class ArtifactLoadError(SuretyError):
    """Raised when a compiled build artifact cannot be loaded.

    Attributes:
        path: Path to the build artifact.
    """

    def __init__(
        self,
        user_message: str,
        *,
        path: str,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ArtifactLoadError.

        Args:
            user_message: Safe message to display to the user.
            path: Path to the build artifact.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(f"{user_message}: {path}", internal_details=internal_details)
        self.path = path
