"""JSON snapshot file with timestamped backup rotation."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any

import structlog

from app.core.errors import PersistenceError
from app.core.metrics import (
    trade_hub_backups_pruned_total,
    trade_hub_snapshot_write_failures_total,
    trade_hub_snapshot_write_latency_seconds,
)
from app.utils.clock import utc_now

logger = structlog.get_logger(__name__)

BACKUP_PREFIX = "backup-"
BACKUP_SUFFIX = ".json"


def backup_timestamp(name: str) -> int | None:
    """Millisecond timestamp embedded in a backup filename, if any."""
    if not (name.startswith(BACKUP_PREFIX) and name.endswith(BACKUP_SUFFIX)):
        return None
    stamp = name[len(BACKUP_PREFIX) : -len(BACKUP_SUFFIX)]
    if not stamp.isdigit():
        return None
    return int(stamp)


class SnapshotFile:
    """Primary snapshot plus one full-copy backup per save.

    The primary file is replaced atomically. The backup write and the prune
    that follows are not linked to it: a crash in between leaves the backup
    directory behind the primary file.
    """

    def __init__(self, snapshot_file: Path, backup_path: Path, retention: int = 10):
        self.snapshot_file = Path(snapshot_file)
        self.backup_path = Path(backup_path)
        self.retention = retention
        self._last_backup_ms = 0

    def ensure_directories(self) -> None:
        try:
            self.snapshot_file.parent.mkdir(parents=True, exist_ok=True)
            self.backup_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(
                "Failed to create data directories",
                details={"path": str(self.snapshot_file.parent), "error": str(exc)},
            ) from exc

    def read(self) -> dict[str, Any] | None:
        """Load the primary snapshot; ``None`` when it does not exist yet."""
        try:
            raw = self.snapshot_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(
                "Failed to read snapshot",
                details={"path": str(self.snapshot_file), "error": str(exc)},
            ) from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceError(
                "Snapshot is not valid JSON",
                details={"path": str(self.snapshot_file), "error": str(exc)},
            ) from exc

        if not isinstance(data, dict):
            raise PersistenceError(
                "Snapshot root must be a JSON object",
                details={"path": str(self.snapshot_file)},
            )
        return data

    def write(self, data: dict[str, Any]) -> Path:
        """Write the primary file, then a backup, then prune. Returns the backup path."""
        start_time = time.perf_counter()
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        try:
            self._write_primary(payload)
            backup_file = self._write_backup(payload)
        finally:
            trade_hub_snapshot_write_latency_seconds.observe(time.perf_counter() - start_time)
        self.prune_backups()
        return backup_file

    def _write_primary(self, payload: str) -> None:
        tmp_file = self.snapshot_file.with_name(self.snapshot_file.name + ".tmp")
        try:
            tmp_file.write_text(payload, encoding="utf-8")
            os.replace(tmp_file, self.snapshot_file)
        except OSError as exc:
            trade_hub_snapshot_write_failures_total.labels(target="primary").inc()
            logger.error(
                "Snapshot write failed",
                path=str(self.snapshot_file),
                error=str(exc),
            )
            raise PersistenceError(
                "Failed to write snapshot",
                details={"path": str(self.snapshot_file), "error": str(exc)},
            ) from exc

    def _next_backup_ms(self) -> int:
        millis = int(utc_now().timestamp() * 1000)
        # One file per save even when saves land in the same millisecond.
        millis = max(millis, self._last_backup_ms + 1)
        self._last_backup_ms = millis
        return millis

    def _write_backup(self, payload: str) -> Path:
        backup_file = self.backup_path / f"{BACKUP_PREFIX}{self._next_backup_ms()}{BACKUP_SUFFIX}"
        try:
            backup_file.write_text(payload, encoding="utf-8")
        except OSError as exc:
            trade_hub_snapshot_write_failures_total.labels(target="backup").inc()
            logger.error("Backup write failed", path=str(backup_file), error=str(exc))
            raise PersistenceError(
                "Failed to write backup",
                details={"path": str(backup_file), "error": str(exc)},
            ) from exc
        return backup_file

    def list_backups(self) -> list[Path]:
        """Backup files ordered by embedded timestamp, newest first."""
        if not self.backup_path.is_dir():
            return []
        stamped = [
            (stamp, path)
            for path in self.backup_path.iterdir()
            if (stamp := backup_timestamp(path.name)) is not None
        ]
        stamped.sort(key=lambda item: item[0], reverse=True)
        return [path for _, path in stamped]

    def prune_backups(self) -> int:
        """Delete all but the ``retention`` newest backups. Returns the number removed."""
        removed = 0
        try:
            for path in self.list_backups()[self.retention :]:
                path.unlink()
                removed += 1
        except OSError as exc:
            logger.warning(
                "Backup cleanup failed",
                backup_path=str(self.backup_path),
                error=str(exc),
            )
        if removed:
            trade_hub_backups_pruned_total.inc(removed)
        return removed
