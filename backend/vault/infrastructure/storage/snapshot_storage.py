"""Local filesystem storage for backup and export artifacts.

Storage layout:
    <backup_dir>/backup_<YYYY-MM-DDTHH-MM-SS-ffffff>[_<n>].json   (one per change event)
    <export_file>                                                 (overwritten on each export)
"""

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from vault.application.schemas import BackupSnapshot, RecordResponse
from vault.domain.entities import ExportSnapshot, Record
from vault.domain.exceptions import StorageError

logger = logging.getLogger(__name__)

RULE = "=" * 60


def _datetime_stamp(moment: datetime) -> str:
    """Filename-safe stamp: YYYY-MM-DDTHH-MM-SS-ffffff."""
    return moment.strftime("%Y-%m-%dT%H-%M-%S-%f")


def _atomic_write(path: Path, content: str) -> None:
    """Write ``content`` to a sibling temp file, then move it over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def render_export(snapshot: ExportSnapshot, file_name: str, exported_at: datetime) -> str:
    """Frame the snapshot's record blocks with the export header and footer."""
    lines = [
        RULE,
        "NODEVAULT DATA EXPORT",
        RULE,
        f"Export Date: {exported_at.astimezone().strftime('%Y-%m-%d %H:%M:%S')}",
        f"Total Records: {len(snapshot.records)}",
        f"File: {file_name}",
        RULE,
        "",
        "",
    ]
    content = "\n".join(lines)
    if snapshot.records:
        content += snapshot.formatted_text
    else:
        content += "No records found in vault.\n"
    content += f"\n{RULE}\nEND OF EXPORT\n{RULE}\n"
    return content


class SnapshotStorage:
    """Infrastructure adapter writing vault snapshots to local disk."""

    def __init__(self, backup_dir: str, export_file: str):
        self._backup_dir = Path(backup_dir)
        self._export_file = Path(export_file)

    @property
    def backup_dir(self) -> Path:
        return self._backup_dir

    @property
    def export_path(self) -> Path:
        return self._export_file

    # ── Backups ─────────────────────────────────────────────────────

    def write_backup(self, action: str, records: list[Record]) -> Path:
        """Write a JSON snapshot of ``records`` to a new, uniquely named file.

        Raises ``StorageError`` when the file cannot be written.
        """
        now = datetime.now(timezone.utc)
        stem = f"backup_{_datetime_stamp(now)}"
        dest = self._backup_dir / f"{stem}.json"
        counter = 1
        while dest.exists():
            dest = self._backup_dir / f"{stem}_{counter}.json"
            counter += 1

        payload = BackupSnapshot(
            timestamp=now,
            action=action,
            records=[RecordResponse.model_validate(r) for r in records],
            total_records=len(records),
        )
        try:
            _atomic_write(dest, payload.model_dump_json(by_alias=True, indent=2))
        except OSError as exc:
            raise StorageError("backup", str(exc)) from exc
        logger.info("Backup created: %s (%d records)", dest.name, len(records))
        return dest

    # ── Export ──────────────────────────────────────────────────────

    def write_export(self, snapshot: ExportSnapshot) -> Path:
        """Atomically (re)write the export file from ``snapshot``."""
        content = render_export(
            snapshot, self._export_file.name, datetime.now(timezone.utc)
        )
        try:
            _atomic_write(self._export_file, content)
        except OSError as exc:
            raise StorageError("export", str(exc)) from exc
        logger.info(
            "Exported %d records to %s", len(snapshot.records), self._export_file
        )
        return self._export_file
