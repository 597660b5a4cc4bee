"""CLI error handling for surety-deploy.

Maps pipeline exceptions to user-facing messages and exit codes.
"""

from __future__ import annotations

from typing import NoReturn

import click

from surety_deploy.cli.output import error
from surety_deploy.errors import (
    ArtifactLoadError,
    ConfigurationError,
    DeploymentFailure,
    PublishFailure,
    PublishInconsistencyError,
    SuretyError,
)

# Exit codes following sysexits.h convention for the first two
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Configuration or build artifact problem
EXIT_SYSTEM_ERROR = 2  # Internal error
EXIT_DEPLOYMENT_FAILED = 3  # Ledger did not confirm a deployment
EXIT_PUBLISH_FAILED = 4  # Staging failed, no target modified
EXIT_PUBLISH_INCONSISTENT = 5  # Some targets updated, others stale


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        """Initialize CLIError.

        Args:
            message: User-facing error message.
            exit_code: Exit code for the CLI.
        """
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def exit_code_for(err: SuretyError) -> int:
    """Return the exit code for a pipeline exception."""
    if isinstance(err, PublishInconsistencyError):
        return EXIT_PUBLISH_INCONSISTENT
    if isinstance(err, PublishFailure):
        return EXIT_PUBLISH_FAILED
    if isinstance(err, DeploymentFailure):
        return EXIT_DEPLOYMENT_FAILED
    if isinstance(err, (ConfigurationError, ArtifactLoadError)):
        return EXIT_USER_ERROR
    return EXIT_SYSTEM_ERROR


def handle_pipeline_error(err: SuretyError) -> NoReturn:
    """Raise a CLIError describing a pipeline failure.

    Args:
        err: The pipeline exception.

    Raises:
        CLIError: Always, with the matching exit code.
    """
    message = err.user_message
    if isinstance(err, PublishInconsistencyError):
        message += "\n\nRe-run the deployment or restore the listed targets by hand."
    elif isinstance(err, DeploymentFailure) and err.stage == "app":
        message += "\n\nThe data contract is already on-chain; nothing was published."
    raise CLIError(message, exit_code=exit_code_for(err))
