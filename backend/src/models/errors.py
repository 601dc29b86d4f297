"""
Annotation store error types.

All errors inherit from AnnotationStoreError for easy catching.
None of them is fatal: transport failures are reported to the user,
the others are logged and the operation degrades.
"""
from typing import Any, Optional


class AnnotationStoreError(Exception):
    """Base exception for all annotation store failures."""
    pass


class TransportError(AnnotationStoreError):
    """Raised when a store request fails at the network or HTTP level."""

    def __init__(self, status: int, action: Optional[str] = None, detail: str = ""):
        self.status = status
        self.action = action
        self.detail = detail
        message = f"Store request failed with status {status}"
        if action:
            message += f" during {action}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UnregisteredAnnotationError(AnnotationStoreError):
    """Raised when an operation targets an annotation the registry does not hold."""

    def __init__(self, record: Any):
        self.record = record
        record_id = getattr(record, "id", None)
        super().__init__(f"Trying to update unregistered annotation (id={record_id})")


class EncodingError(AnnotationStoreError):
    """Raised when an annotation record cannot be expressed as an OA graph."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Cannot encode annotation: {reason}")


class DecodingError(AnnotationStoreError):
    """Raised when an annotation node cannot be resolved from a fetched graph."""

    def __init__(self, node_id: Optional[str], reason: str):
        self.node_id = node_id
        self.reason = reason
        super().__init__(f"Cannot decode annotation {node_id}: {reason}")
