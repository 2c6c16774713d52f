"""
Snapshot persistence service.

Stores the latest ReportSnapshot as a JSON document and the rendered HTML
report next to it. Each run overwrites both; writes go through a temporary
file and an atomic rename so readers never see a partial file.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from polyarb.core.config import Settings, get_settings
from polyarb.core.errors import PersistenceError, SnapshotNotFoundError
from polyarb.core.logging import get_logger
from polyarb.domain.models import ReportSnapshot

logger = get_logger("persistence")


class PersistenceService(ABC):
    """Abstract base class for persistence services."""

    @abstractmethod
    def save_snapshot(self, snapshot: ReportSnapshot) -> Path:
        """Persist the snapshot, replacing the previous one."""
        pass

    @abstractmethod
    def load_snapshot(self) -> ReportSnapshot:
        """Load the most recent snapshot."""
        pass

    @abstractmethod
    def save_report(self, html: str) -> Path:
        """Persist the rendered HTML report."""
        pass


def atomic_write_text(path: Path, content: str) -> None:
    """Write text to path via a temp file in the same directory and os.replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class JsonFilePersistence(PersistenceService):
    """
    File-based persistence.

    The snapshot is a JSON document with the keys generatedAt,
    opportunities, totalCount and source.
    """

    def __init__(
        self,
        snapshot_path: Optional[Union[str, Path]] = None,
        report_path: Optional[Union[str, Path]] = None,
        settings: Optional[Settings] = None,
    ):
        if snapshot_path is None or report_path is None:
            settings = settings or get_settings()
        self.snapshot_path = Path(snapshot_path or settings.snapshot_path)
        self.report_path = Path(report_path or settings.report_path)

    def save_snapshot(self, snapshot: ReportSnapshot) -> Path:
        """
        Save snapshot as JSON.

        Raises:
            PersistenceError: If the file cannot be written
        """
        try:
            # Strict JSON: non-finite floats are rejected rather than written as Infinity/NaN
            content = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False, allow_nan=False)
            atomic_write_text(self.snapshot_path, content)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to save snapshot: {e}")
            raise PersistenceError(
                f"Failed to save snapshot to {self.snapshot_path}: {e}",
                path=str(self.snapshot_path),
            ) from e

        logger.info(f"Data saved to {self.snapshot_path}")
        return self.snapshot_path

    def load_snapshot(self) -> ReportSnapshot:
        """
        Load the persisted snapshot.

        Raises:
            SnapshotNotFoundError: If no snapshot has been written
            PersistenceError: If the file is unreadable or not a snapshot
        """
        if not self.snapshot_path.exists():
            raise SnapshotNotFoundError(
                f"No snapshot at {self.snapshot_path}; run the pipeline first",
                path=str(self.snapshot_path),
            )

        try:
            with open(self.snapshot_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return ReportSnapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise PersistenceError(
                f"Failed to load snapshot from {self.snapshot_path}: {e}",
                path=str(self.snapshot_path),
            ) from e

    def save_report(self, html: str) -> Path:
        """
        Save rendered HTML report.

        Raises:
            PersistenceError: If the file cannot be written
        """
        try:
            atomic_write_text(self.report_path, html)
        except OSError as e:
            logger.error(f"Failed to save report: {e}")
            raise PersistenceError(
                f"Failed to save report to {self.report_path}: {e}",
                path=str(self.report_path),
            ) from e

        logger.info(f"Report generated at {self.report_path}")
        return self.report_path


def create_persistence_service(
    settings: Optional[Settings] = None,
    snapshot_path: Optional[Union[str, Path]] = None,
    report_path: Optional[Union[str, Path]] = None,
) -> PersistenceService:
    """Create the file persistence service."""
    return JsonFilePersistence(
        snapshot_path=snapshot_path,
        report_path=report_path,
        settings=settings,
    )
