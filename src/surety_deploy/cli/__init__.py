"""Command line interface for surety-deploy."""

from __future__ import annotations

from surety_deploy.cli.main import cli

__all__: list[str] = ["cli"]
