from .event_bus import RecordEventBus, get_event_bus
from .record_store import RecordStore, format_records
from .backup_subscriber import BackupSubscriber

__all__ = [
    "RecordEventBus",
    "get_event_bus",
    "RecordStore",
    "format_records",
    "BackupSubscriber",
]
