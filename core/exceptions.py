"""
Custom exceptions for the backup subsystem with structured error context.

Every failure raised by export, import, inspection or stats is a subclass
of BackupException. The HTTP layer catches BackupException at the route
boundary and turns it into a ``{"success": false, "error": ...}`` body, so
none of these cross the external interface uncaught.

Exception Hierarchy:
    BackupException (base)
    ├── ArchiveError
    │   ├── MalformedArchiveError
    │   └── InvalidSnapshotFormatError
    ├── RestoreTransactionFailedError
    ├── StoreUnavailableError
    └── EntityGraphError
"""

from typing import Optional, Dict, Any
from datetime import datetime


class BackupException(Exception):
    """
    Base exception for all backup-related errors.
    
    Attributes:
        message: Human-readable error message
        context: Additional context information (entity kind, entry name, etc.)
        original_exception: The original exception that was caught (if any)
    """
    
    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()
        
        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()
        
        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception
    
    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"
        
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"
        
        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"
        
        return base_msg
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Archive Errors (detected before any mutation)
# ============================================================================

class ArchiveError(BackupException):
    """Base exception for problems with an uploaded archive."""
    pass


class MalformedArchiveError(ArchiveError):
    """
    Raised when the archive cannot be opened or lacks an expected entry.
    
    Context should include:
        - entry: Name of the zip entry that was looked up
    """
    pass


class InvalidSnapshotFormatError(ArchiveError):
    """
    Raised when the parsed snapshot does not have the expected shape.
    
    Context should include:
        - entity_kind: Collection that failed (if applicable)
        - record_index: Position of the offending record (if applicable)
        - field_errors: Validation errors for that record (if applicable)
    """
    pass


# ============================================================================
# Store Errors
# ============================================================================

class RestoreTransactionFailedError(BackupException):
    """
    Raised when the delete/insert transaction fails and is rolled back.
    
    Context should include:
        - phase: "delete" or "insert"
        - entity_kind: Entity kind being processed when the failure happened
    """
    pass


class StoreUnavailableError(BackupException):
    """
    Raised when export or stats cannot read from the entity store.
    
    Context should include:
        - operation: "export" or "stats"
    """
    pass


# ============================================================================
# Configuration Errors
# ============================================================================

class EntityGraphError(BackupException):
    """Raised when the declared foreign-key graph is not a valid DAG."""
    pass
