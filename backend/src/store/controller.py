"""Wires host lifecycle events and the initial load to the orchestrator."""
from typing import Callable, Optional

from models.annotation import AnnotationRecord
from store.events import ANNOTATION_CREATED, ANNOTATION_DELETED, ANNOTATION_UPDATED, AnnotationEvents
from store.orchestrator import RequestOrchestrator
from utils.logger import get_logger

logger = get_logger(__name__)

AUTH_TOKEN_HEADER = "x-annotator-auth-token"

# Called with a continuation that must receive the token (or None) once it is available
TokenProvider = Callable[[Callable[[Optional[str]], None]], None]


class SyncController:
    """Keeps the remote store in step with the host's annotation lifecycle."""

    def __init__(
        self,
        orchestrator: RequestOrchestrator,
        events: AnnotationEvents,
        token_provider: Optional[TokenProvider] = None
    ):
        """
        Initialize the controller.

        Args:
            orchestrator: Orchestrator issuing the store requests
            events: Event source the host publishes lifecycle events on
            token_provider: Optional auth step that must finish before loading
        """
        self.orchestrator = orchestrator
        self.events = events
        self.token_provider = token_provider
        self.started = False

    def start(self) -> None:
        """Subscribe to lifecycle events and, if configured, load annotations."""
        if self.started:
            logger.warning("SyncController already started")
            return
        self.events.subscribe(ANNOTATION_CREATED, self.on_created)
        self.events.subscribe(ANNOTATION_UPDATED, self.on_updated)
        self.events.subscribe(ANNOTATION_DELETED, self.on_deleted)
        self.started = True

        if not self.orchestrator.options.auto_fetch:
            logger.info("autoFetch disabled, skipping initial load")
            return

        if self.token_provider is not None:
            logger.info("Waiting for auth token before loading annotations")
            self.token_provider(self._on_token)
        else:
            self.load()

    def stop(self) -> None:
        if not self.started:
            return
        self.events.unsubscribe(ANNOTATION_CREATED, self.on_created)
        self.events.unsubscribe(ANNOTATION_UPDATED, self.on_updated)
        self.events.unsubscribe(ANNOTATION_DELETED, self.on_deleted)
        self.started = False

    def _on_token(self, token: Optional[str]) -> None:
        if token:
            self.orchestrator.set_header(AUTH_TOKEN_HEADER, token)
        self.load()

    def load(self) -> None:
        """Run the initial load: a fan-out search, or a full read when search loading is off."""
        search_options = self.orchestrator.options.load_from_search
        if search_options is not None:
            self.orchestrator.load_from_search(search_options)
        else:
            self.orchestrator.load_annotations()

    def on_created(self, record: AnnotationRecord) -> None:
        self.orchestrator.create(record)

    def on_updated(self, record: AnnotationRecord) -> None:
        self.orchestrator.update(record)

    def on_deleted(self, record: AnnotationRecord) -> None:
        self.orchestrator.destroy(record)
