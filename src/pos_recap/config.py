"""Unified configuration for POS Recap.

This module provides the filesystem configuration shared by the CLI and the
repositories. Network settings for the POS API are read from the environment
by ``pos_recap.data.repository`` only.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class DataPaths:
    """All filesystem paths used by POS Recap.

    Attributes:
        data_root: Root directory for snapshots and exported reports.

    Directory Structure:
        data_root/
        ├── snapshot.json    # local snapshot of all collections
        └── exports/         # report-<YYYY-MM-DD>.pdf, CSV detail exports
    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> DataPaths:
        """Create DataPaths from a root directory.

        Args:
            data_root: Root directory for POS Recap data.

        Returns:
            DataPaths instance.

        Examples:
            >>> paths = DataPaths.from_root("data")
            >>> paths.exports
            PosixPath('data/exports')
        """
        if isinstance(data_root, str):
            data_root = Path(data_root)

        return cls(data_root=data_root)

    @property
    def snapshot_file(self) -> Path:
        """Local snapshot document (the offline persistence mode)."""
        return self.data_root / "snapshot.json"

    @property
    def exports(self) -> Path:
        """Directory receiving exported reports."""
        return self.data_root / "exports"

    def ensure_dirs(self) -> None:
        """Create all directories in the data structure."""
        for path in [self.data_root, self.exports]:
            path.mkdir(parents=True, exist_ok=True)
