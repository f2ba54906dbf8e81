"""Exception classes for the sales reconciliation engine"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Error category codes"""
    VALIDATION = "VAL"
    STORE = "STORE"
    SESSION = "SESSION"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class ReconciliationError(Exception):
    """
    Base exception for reconciliation errors
    
    All errors raised by the engine extend from this class.
    Operator input never raises: unparseable amounts are read as zero.
    """
    
    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.now(timezone.utc)
        self.category = self._determine_category(code)

    def _determine_category(self, code: Optional[str]) -> ErrorCategory:
        """Determine error category from code"""
        if not code:
            return ErrorCategory.UNKNOWN
        
        if code.startswith("VAL"):
            return ErrorCategory.VALIDATION
        if code.startswith("STORE"):
            return ErrorCategory.STORE
        if code.startswith("SESSION"):
            return ErrorCategory.SESSION
        if code.startswith("CONFIG"):
            return ErrorCategory.CONFIG
        
        return ErrorCategory.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": str(self),
            "code": self.code,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def is_category(self, category: ErrorCategory) -> bool:
        """Check if error belongs to a category"""
        return self.category == category

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [str(self)]
        
        if self.code:
            parts.insert(0, f"[{self.code}]")
        
        if self.cause is not None:
            parts.append(f"(caused by {self.cause.__class__.__name__})")
        
        return " ".join(parts)


class ValidationError(ReconciliationError):
    """Raised when a caller asks for an edit the record schema forbids"""
    
    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)
        self.field = field

    @classmethod
    def unknown_field(cls, field: str) -> "ValidationError":
        """Create an unknown field error"""
        return cls(f"Unknown field: {field}", field=field, code="VAL01")

    @classmethod
    def derived_field(cls, field: str) -> "ValidationError":
        """Create an error for an attempt to edit a computed field"""
        return cls(
            f"{field} is derived and cannot be edited",
            field=field,
            code="VAL02",
        )

    @classmethod
    def locked_field(cls, field: str, mode: str) -> "ValidationError":
        """Create an error for a field that is not editable in the given mode"""
        return cls(
            f"{field} is not editable on a {mode} record",
            field=field,
            code="VAL03",
            details={"mode": mode},
        )


class StoreError(ReconciliationError):
    """
    Persistence backend error
    
    Raised by ``load``; ``save`` reports failures as a result value instead.
    """
    
    def __init__(
        self,
        message: str,
        code: str = "STORE01",
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause, details=details)


class SessionError(ReconciliationError):
    """Edit session misuse"""
    
    def __init__(
        self,
        message: str,
        code: str = "SESSION01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)

    @classmethod
    def no_open_record(cls) -> "SessionError":
        """Create an error for operations that need an open record"""
        return cls("No record is open in this session", code="SESSION02")

    @classmethod
    def invalid_transition(cls, current: str, target: str) -> "SessionError":
        """Create an error for a forbidden lifecycle transition"""
        return cls(
            f"Cannot move a record from {current} to {target}",
            code="SESSION03",
            details={"from": current, "to": target},
        )


class ConfigError(ReconciliationError):
    """Configuration error"""
    
    def __init__(
        self,
        message: str,
        code: str = "CONFIG01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)
