"""Error Hierarchy - typed, categorized exceptions for all Mind Palace failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
      and an HTTP status, declared once per class
    - Shelf/item/partition ids land in ErrorContext, never only in the message text
    - to_response() produces the REST envelope; log_extra() the logging extra= dict
    - No engine internals leaked in user-facing messages

Design Decisions:
    - Single hierarchy with MindPalaceError base: FastAPI global handler catches all
    - Classification as class attributes: subclasses only build their message
    - LoadFailure and PersistFailure are not exception types: both are DatabaseErrors
      recovered in the sync controller and only logged with their own error_code
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Which layer refused the operation."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    IMPORT = "import"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where in the collections the error happened."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    collection: str | None = None
    partition: str | None = None
    shelf_id: int | None = None
    item_id: int | None = None
    debug_info: dict[str, Any] | None = None

    def located(self) -> dict[str, Any]:
        """Collection/partition/shelf/item fields that are set."""
        fields = {
            "collection": self.collection,
            "partition": self.partition,
            "shelf_id": self.shelf_id,
            "item_id": self.item_id,
        }
        return {k: v for k, v in fields.items() if v is not None}


class MindPalaceError(Exception):
    """Base exception for all Mind Palace errors."""

    code = "INTERNAL_ERROR"
    category = ErrorCategory.INTERNAL
    severity = ErrorSeverity.ERROR
    http_status = 500

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    @property
    def recoverable(self) -> bool:
        """Client-side errors: the caller can fix the request and retry."""
        return self.http_status < 500

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": self.context.located(),
            }
        }

    def log_extra(self, **more: Any) -> dict[str, Any]:
        return {"error_code": self.code, **self.context.located(), **more}


# ─── Domain Errors (400-level) ──────────────────────────────────

class RecordValidationError(MindPalaceError):
    """Shelf or item fields failed validation."""
    code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION
    http_status = 400

    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(message, context)
        self.field = field


class ShelfNotFoundError(MindPalaceError):
    """No shelf with this id in the collection."""
    code = "SHELF_NOT_FOUND"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    http_status = 404

    def __init__(self, shelf_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.shelf_id = shelf_id
        super().__init__(f"Shelf '{shelf_id}' not found", ctx)
        self.shelf_id = shelf_id


class ItemNotFoundError(MindPalaceError):
    """No item with this id on the shelf."""
    code = "ITEM_NOT_FOUND"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    http_status = 404

    def __init__(self, shelf_id: int, item_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.shelf_id, ctx.item_id = shelf_id, item_id
        super().__init__(f"Item '{item_id}' not found on shelf '{shelf_id}'", ctx)
        self.shelf_id = shelf_id
        self.item_id = item_id


class SnapshotParseError(MindPalaceError):
    """Snapshot text is not a well-formed snapshot document."""
    code = "IMPORT_PARSE_FAILED"
    category = ErrorCategory.IMPORT
    severity = ErrorSeverity.WARNING
    http_status = 400

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(f"Invalid snapshot: {message}", context)


class SnapshotShapeError(MindPalaceError):
    """Snapshot document carries none of the recognized collection keys."""
    code = "IMPORT_SHAPE_INVALID"
    category = ErrorCategory.IMPORT
    severity = ErrorSeverity.WARNING
    http_status = 400

    def __init__(self, recognized: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Snapshot contains none of the keys: {', '.join(recognized)}", context,
        )
        self.recognized = recognized


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(MindPalaceError):
    """Durable store operation failed."""
    code = "DATABASE_ERROR"
    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.CRITICAL
    http_status = 503

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(f"Database {operation} failed: {message}", context)
        self.operation = operation


class StoreUnavailableError(MindPalaceError):
    """Durable store handle failed to open; every later call fails the same way."""
    code = "STORE_UNAVAILABLE"
    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.CRITICAL
    http_status = 503

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(f"Durable store unavailable: {message}", context)


class UnknownPartitionError(MindPalaceError):
    """Partition name was not registered on the durable store."""
    code = "UNKNOWN_PARTITION"
    severity = ErrorSeverity.CRITICAL

    def __init__(self, partition: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.partition = partition
        super().__init__(f"Partition '{partition}' is not registered", ctx)
        self.partition = partition
