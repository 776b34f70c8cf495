"""Response envelope shared by every endpoint."""
from datetime import datetime, timezone
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from hrdesk.core.logging import request_id_var

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorInfo(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    # Same value as the X-Request-ID response header
    request_id: Optional[str] = None


class ApiResponse(BaseModel, Generic[T]):
    """``{success, data, error, metadata, timestamp}``; exactly one of data/error is meaningful."""

    success: bool
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def ok(cls, data: T, metadata: Optional[Dict[str, Any]] = None) -> "ApiResponse[T]":
        if metadata is None and isinstance(data, list):
            metadata = {"count": len(data)}
        return cls(success=True, data=data, metadata=metadata or {})

    @classmethod
    def fail(cls, message: str, code: str = "ERROR", details: Optional[Dict[str, Any]] = None) -> "ApiResponse[T]":
        error = ErrorInfo(code=code, message=message, details=details, request_id=request_id_var.get() or None)
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=False)
