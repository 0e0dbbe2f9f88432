from .record import (
    ExportSnapshot,
    Record,
    RecordEvent,
    SortField,
    SortOrder,
    VaultStatistics,
)

__all__ = [
    "ExportSnapshot",
    "Record",
    "RecordEvent",
    "SortField",
    "SortOrder",
    "VaultStatistics",
]
