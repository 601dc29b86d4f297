"""Annotation store synchronization: registry, orchestrator and controller."""
from store.controller import SyncController
from store.events import AnnotationEvents
from store.load_barrier import LoadBarrier
from store.messages import Severity, error_message
from store.orchestrator import RequestOrchestrator
from store.registry import AnnotationRegistry
from store.transport import HttpxTransport, StoreRequest, Transport

__all__ = [
    "AnnotationEvents",
    "AnnotationRegistry",
    "HttpxTransport",
    "LoadBarrier",
    "RequestOrchestrator",
    "Severity",
    "StoreRequest",
    "SyncController",
    "Transport",
    "error_message",
]
