"""Publish sinks.

A sink stages a set of files without touching what consumers currently
read, then either commits them (swaps them into place) or discards them.

- FilesystemSink: a directory on disk; commit is an atomic rename per file
- MemorySink: an in-process mapping, for tests and embedding
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Protocol
from uuid import uuid4

if TYPE_CHECKING:
    from collections.abc import Mapping

TEMP_SUFFIX = ".tmp"


class StagedWrite(Protocol):
    """Files written aside, waiting to be swapped into place."""

    swapped: list[str]
    """File names already swapped into place by ``commit``."""

    def commit(self) -> None:
        """Swap the staged files into place, in staging order."""
        ...

    def discard(self) -> None:
        """Remove the staged files. Safe to call more than once."""
        ...


class ArtifactSink(Protocol):
    """Destination for published documents."""

    @property
    def location(self) -> str:
        """Human-readable location used in logs and error reports."""
        ...

    def stage(self, files: Mapping[str, bytes]) -> StagedWrite:
        """Write ``files`` aside without modifying the current contents.

        Args:
            files: File name to content, in commit order.

        Returns:
            Handle to commit or discard the staged files.
        """
        ...


class _StagedFiles:
    def __init__(self) -> None:
        self._pending: list[tuple[Path, Path]] = []
        self.swapped: list[str] = []

    def add(self, temp_path: Path, final_path: Path) -> None:
        self._pending.append((temp_path, final_path))

    def commit(self) -> None:
        while self._pending:
            temp_path, final_path = self._pending[0]
            os.replace(temp_path, final_path)
            self._pending.pop(0)
            self.swapped.append(final_path.name)

    def discard(self) -> None:
        while self._pending:
            temp_path, _ = self._pending.pop()
            temp_path.unlink(missing_ok=True)


class FilesystemSink:
    """Publishes files into a directory.

    Staged files are written next to their final path as hidden temporary
    files, so the commit is a same-directory rename.

    Attributes:
        root: Directory the files are published to. Created on first stage.

    Example:
        >>> sink = FilesystemSink(Path("pages/server"))
        >>> staged = sink.stage({"config.json": b"{}"})
        >>> staged.commit()
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    @property
    def location(self) -> str:
        """Directory path."""
        return str(self.root)

    def stage(self, files: Mapping[str, bytes]) -> StagedWrite:
        """Write every file to a temporary sibling of its final path.

        Raises:
            OSError: If the directory or a temporary file cannot be written.
                Files staged before the failure are removed.
        """
        self.root.mkdir(parents=True, exist_ok=True)
        staged = _StagedFiles()
        try:
            for file_name, payload in files.items():
                final_path = self.root / file_name
                temp_path = self.root / f".{file_name}.{uuid4().hex}{TEMP_SUFFIX}"
                # Registered before writing: a partly written temp file is still discarded
                staged.add(temp_path, final_path)
                temp_path.write_bytes(payload)
        except BaseException:
            staged.discard()
            raise
        return staged

    def __repr__(self) -> str:
        return f"FilesystemSink({self.location!r})"


class _StagedMemory:
    def __init__(self, sink: MemorySink, files: dict[str, bytes]) -> None:
        self._sink = sink
        self._files = files
        self.swapped: list[str] = []

    def commit(self) -> None:
        self._sink.files.update(self._files)
        self.swapped = list(self._files)
        self._files = {}

    def discard(self) -> None:
        self._files = {}


class MemorySink:
    """Publishes files into an in-memory mapping.

    Attributes:
        name: Label used as the location.
        files: Committed file name to content.
    """

    def __init__(self, name: str = "memory", files: Mapping[str, bytes] | None = None) -> None:
        self.name = name
        self.files: dict[str, bytes] = dict(files or {})

    @property
    def location(self) -> str:
        """memory://<name>"""
        return f"memory://{self.name}"

    def stage(self, files: Mapping[str, bytes]) -> StagedWrite:
        """Copy the files aside; nothing is visible until commit."""
        return _StagedMemory(self, dict(files))
