"""Composition root: builds a ready-to-start store sync controller."""
from typing import Any, Dict, Optional

from config import APP_NAME, get_settings
from models.document import HostDocument
from models.options import StoreOptions
from store.controller import SyncController, TokenProvider
from store.events import AnnotationEvents
from store.orchestrator import Deliver, Notify, RequestOrchestrator
from store.registry import AnnotationRegistry, Rebind
from store.transport import HttpxTransport, Transport
from utils.logger import get_logger

logger = get_logger(__name__)


def create_sync_controller(
    document: HostDocument,
    deliver: Deliver,
    notify: Optional[Notify] = None,
    options: Optional[Dict[str, Any]] = None,
    transport: Optional[Transport] = None,
    events: Optional[AnnotationEvents] = None,
    token_provider: Optional[TokenProvider] = None,
    on_rebind: Optional[Rebind] = None,
    base_url: str = ""
) -> SyncController:
    """
    Build a controller with its orchestrator, registry and transport.

    Args:
        document: Host document the annotations belong to
        deliver: Receives loaded annotations
        notify: Displays error messages to the user
        options: Store options in the host's camelCase form (prefix, urls,
            emulateHTTP, emulateJSON, annotationData, headers, loadFromSearch, autoFetch)
        transport: Transport to use; an HttpxTransport on `base_url` by default
        events: Event source to subscribe to; a new one is created if omitted
        token_provider: Optional auth step run before the initial load
        on_rebind: Render-layer hook called after every record update
        base_url: Store base URL for the default transport

    Returns:
        SyncController, not yet started
    """
    store_options = StoreOptions.model_validate(options or {})
    logger.info(f"{APP_NAME} settings: {get_settings()}")

    orchestrator = RequestOrchestrator(
        transport=transport if transport is not None else HttpxTransport(base_url=base_url),
        document=document,
        deliver=deliver,
        notify=notify,
        options=store_options,
        registry=AnnotationRegistry(on_rebind=on_rebind),
    )
    return SyncController(orchestrator, events if events is not None else AnnotationEvents(), token_provider)
