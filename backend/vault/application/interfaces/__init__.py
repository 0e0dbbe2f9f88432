from .record_backend import RecordBackend, RecordDocument

__all__ = [
    "RecordBackend",
    "RecordDocument",
]
