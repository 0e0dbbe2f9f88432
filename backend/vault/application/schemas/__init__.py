from .record import (
    BackupSnapshot,
    ExportResponse,
    RecordCreate,
    RecordResponse,
    RecordUpdate,
    StatisticsResponse,
)

__all__ = [
    "BackupSnapshot",
    "ExportResponse",
    "RecordCreate",
    "RecordResponse",
    "RecordUpdate",
    "StatisticsResponse",
]
