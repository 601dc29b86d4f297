"""Annotation lifecycle event source."""
from typing import Callable, Dict, List

from models.annotation import AnnotationRecord
from utils.logger import get_logger

logger = get_logger(__name__)

ANNOTATION_CREATED = "annotationCreated"
ANNOTATION_UPDATED = "annotationUpdated"
ANNOTATION_DELETED = "annotationDeleted"

LIFECYCLE_EVENTS = (ANNOTATION_CREATED, ANNOTATION_UPDATED, ANNOTATION_DELETED)

Handler = Callable[[AnnotationRecord], None]


class AnnotationEvents:
    """Observer registry the host publishes annotation lifecycle events through."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {name: [] for name in LIFECYCLE_EVENTS}

    def subscribe(self, event: str, handler: Handler) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown event {event}, expected one of {LIFECYCLE_EVENTS}")
        self._handlers[event].append(handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: str, record: AnnotationRecord) -> None:
        """Call every handler subscribed to `event`, in subscription order."""
        if event not in self._handlers:
            raise ValueError(f"Unknown event {event}, expected one of {LIFECYCLE_EVENTS}")
        logger.debug(f"Publishing {event} for {record!r}")
        for handler in list(self._handlers[event]):
            handler(record)

    def created(self, record: AnnotationRecord) -> None:
        self.publish(ANNOTATION_CREATED, record)

    def updated(self, record: AnnotationRecord) -> None:
        self.publish(ANNOTATION_UPDATED, record)

    def deleted(self, record: AnnotationRecord) -> None:
        self.publish(ANNOTATION_DELETED, record)
