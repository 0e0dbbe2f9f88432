from .base import Base
from .models import RecordModel
from .session import Database

__all__ = [
    "Base",
    "Database",
    "RecordModel",
]
