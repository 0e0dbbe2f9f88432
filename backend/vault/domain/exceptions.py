"""Domain-specific exceptions: framework-independent."""


class VaultError(Exception):
    """Base class for every error the vault surfaces to its callers."""


class RecordValidationError(VaultError):
    """Raised when caller-supplied record data violates the validation rules."""

    def __init__(self, field: str, message: str, operation: str = "add"):
        self.field = field
        self.message = message
        self.operation = operation
        super().__init__(f"{operation}: {field} {message}")


class BackendError(VaultError):
    """Raised when the persistence backend is unreachable or rejects an operation."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"Backend {operation} failed: {message}")


class EntityNotFoundError(VaultError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class StorageError(VaultError):
    """Raised when a backup or export file cannot be written."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"Storage {operation} failed: {message}")
