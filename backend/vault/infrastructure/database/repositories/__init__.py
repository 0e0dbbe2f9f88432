from .record_backend import SQLAlchemyRecordBackend

__all__ = [
    "SQLAlchemyRecordBackend",
]
