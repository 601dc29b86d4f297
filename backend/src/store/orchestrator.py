"""Request orchestration between the annotation registry and a remote OA store."""
import copy
from typing import Any, Callable, Dict, List, Optional

from codec.graph_codec import decode_annotations, find_by_type, graph_of, serialize_annotation
from models.annotation import AnnotationRecord
from models.document import HostDocument
from models.errors import EncodingError, TransportError
from models.graph import ANNOTATION_TYPE, PLACEHOLDER_ANNOTATION_ID
from models.options import StoreOptions
from store.load_barrier import LoadBarrier
from store.messages import Severity, error_message
from store.registry import AnnotationRegistry
from store.transport import StoreRequest, Transport
from utils.logger import get_logger

logger = get_logger(__name__)

ACTION_METHODS: Dict[str, str] = {
    "create": "POST",
    "read": "GET",
    "update": "PUT",
    "destroy": "DELETE",
    "search": "GET",
}

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
METHOD_OVERRIDE_HEADER = "X-HTTP-Method-Override"

Notify = Callable[[str, Severity], None]
Deliver = Callable[[List[AnnotationRecord]], None]


def _log_notification(message: str, severity: Severity) -> None:
    logger.info(f"[{severity.value}] {message}")


class RequestOrchestrator:
    """
    Issues store requests for annotation lifecycle events and loads.

    Responses are merged into the registry; search loads fan out one
    request per embedded resource plus one for the page and deliver the
    combined result exactly once.
    """

    def __init__(
        self,
        transport: Transport,
        document: HostDocument,
        deliver: Deliver,
        notify: Optional[Notify] = None,
        options: Optional[StoreOptions] = None,
        registry: Optional[AnnotationRegistry] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            transport: Transport used to reach the store
            document: Host document (page URI and embedded resources)
            deliver: Receives the loaded annotations once per load
            notify: Displays user-facing messages; defaults to logging them
            options: Store options; defaults come from config
            registry: Registry to keep records in; a new one is created if omitted
        """
        self.transport = transport
        self.document = document
        self.deliver = deliver
        self.notify = notify if notify is not None else _log_notification
        self.options = options or StoreOptions()
        self.registry = registry if registry is not None else AnnotationRegistry()
        self.loads_issued = 0

    # Request building

    def method_for(self, action: str) -> str:
        try:
            return ACTION_METHODS[action]
        except KeyError:
            raise ValueError(f"Unknown store action: {action}")

    def url_for(self, action: str, record_id: Optional[str] = None) -> str:
        """
        Resolve the URL of an action.

        Update and destroy address the annotation by its raw id, which the
        store hands out as a full URI. Other actions use the prefix plus the
        action's template, with `/:id` replaced by the id or dropped.
        """
        self.method_for(action)
        if action in ("update", "destroy"):
            if not record_id:
                raise ValueError(f"Cannot {action} an annotation without an id")
            return record_id

        url = self.options.prefix or ""
        url += getattr(self.options.urls, action)
        return url.replace("/:id", f"/{record_id}" if record_id else "", 1)

    def set_header(self, name: str, value: str) -> None:
        """Add a static header sent with every later request."""
        self.options.headers[name] = value

    def request_for(self, action: str, obj: Any = None) -> StoreRequest:
        """
        Build the request for an action.

        Args:
            action: create, read, update, destroy or search
            obj: The annotation record, or the query dict for search

        Returns:
            StoreRequest ready for the transport

        Raises:
            EncodingError: If the annotation cannot be encoded
        """
        record_id = obj.id if isinstance(obj, AnnotationRecord) else None
        real_method = self.method_for(action)
        method = real_method
        headers = dict(self.options.headers)

        if self.options.emulate_http and real_method in ("PUT", "DELETE"):
            headers[METHOD_OVERRIDE_HEADER] = real_method
            method = "POST"

        body: Any = None
        if action == "search":
            body = dict(obj or {})
        elif obj is not None:
            body = serialize_annotation(obj, self.document)
            if self.options.emulate_json:
                body = {"json": body}
                if self.options.emulate_http:
                    body["_method"] = real_method
            else:
                headers["Content-Type"] = JSON_CONTENT_TYPE

        return StoreRequest(
            action=action,
            url=self.url_for(action, record_id),
            method=method,
            headers=headers,
            body=body,
            record_id=record_id,
        )

    def api_request(self, action: str, obj: Any, on_success: Callable[[Any], None]) -> Optional[StoreRequest]:
        """
        Send one request; failures are reported through on_error.

        Returns:
            The request sent, or None if it could not be built
        """
        try:
            request = self.request_for(action, obj)
        except (EncodingError, ValueError) as e:
            logger.error(f"Could not build {action} request: {e}")
            self.notify(error_message(action, 0), Severity.ERROR)
            return None

        logger.info(f"Store {action}: {request.method} {request.url}")
        self.transport.send(
            request,
            on_success,
            lambda error: self.on_error(action, error, request.record_id),
        )
        return request

    def on_error(self, action: str, error: TransportError, record_id: Optional[str] = None) -> None:
        """Report a failed request to the user. Nothing is retried or rolled back."""
        message = error_message(action, error.status, has_id=record_id is not None)
        self.notify(message, Severity.ERROR)
        logger.error(f"API request failed: '{error.status}' ({action}, id={record_id})")

    # Lifecycle

    def create(self, record: AnnotationRecord) -> None:
        """
        Persist a newly created annotation.

        The record is registered before the request goes out so that
        rendering code can find it; the store-assigned id is merged in when
        the response arrives. A record that is already registered is only
        re-bound.
        """
        if record in self.registry:
            self.registry.update(record, {})
            return

        if self.options.annotation_data:
            record.merge(copy.deepcopy(self.options.annotation_data))
        self.registry.register(record)

        def on_created(payload: Any) -> None:
            annotations = find_by_type(graph_of(payload), ANNOTATION_TYPE)
            new_id = annotations[0].get("@id") if annotations else None
            if not new_id or new_id == PLACEHOLDER_ANNOTATION_ID:
                logger.warning(f"Warning: No ID returned from server for annotation {record!r}")
                self.registry.update(record, {})
                return
            self.registry.update(record, {"id": new_id})

        self.api_request("create", record, on_created)

    def update(self, record: AnnotationRecord) -> None:
        """Send the current state of a registered annotation to the store."""
        if record not in self.registry:
            logger.debug(f"Ignoring update of unregistered annotation {record!r}")
            return
        if not record.id:
            logger.warning(f"Annotation {record!r} has no store id yet, update not sent")
            return
        self.api_request("update", record, lambda _: self.registry.update(record, {}))

    def destroy(self, record: AnnotationRecord) -> None:
        """Delete a registered annotation from the store, then from the registry."""
        if record not in self.registry:
            logger.debug(f"Ignoring delete of unregistered annotation {record!r}")
            return
        if not record.id:
            logger.info(f"Annotation {record!r} was never stored, removing locally")
            self.registry.unregister(record)
            return

        def on_destroyed(_: Any) -> None:
            if record in self.registry:
                self.registry.unregister(record)

        self.api_request("destroy", record, on_destroyed)

    # Loading

    def load_from_search(self, options: Optional[Dict[str, Any]] = None) -> LoadBarrier:
        """
        Load the annotations of the page and of every embedded resource on it.

        The registry is reset, then one search per embedded resource and one
        page-level search are issued. Results are registered as they arrive;
        once every search has resolved (successfully or not) the registry
        contents are delivered exactly once. Starting another load supersedes
        this one: its late results are dropped and it never delivers.

        Args:
            options: Extra search parameters for the page-level query

        Returns:
            The barrier tracking this load
        """
        self.registry.clear()
        self.loads_issued += 1
        load_number = self.loads_issued
        barrier = LoadBarrier(lambda: self._on_load_complete(load_number))

        # Hold one slot for the page query so resource responses cannot finish the load early
        barrier.expect(1)
        for identifier in self.document.embedded_resources():
            barrier.expect(1)
            self._search({"annotates": identifier}, barrier, load_number)

        query = dict(options or {})
        query["annotates"] = self.document.uri
        self._search(query, barrier, load_number)
        return barrier

    def _is_current(self, load_number: int) -> bool:
        return load_number == self.loads_issued

    def _search(self, query: Dict[str, Any], barrier: LoadBarrier, load_number: int) -> None:
        def on_success(payload: Any) -> None:
            try:
                if not self._is_current(load_number):
                    logger.info(f"Dropping search result of superseded load {load_number}")
                    return
                records = decode_annotations(graph_of(payload), self.document)
                for record in records:
                    self.registry.register(record)
                logger.info(f"Search for {query.get('annotates')} returned {len(records)} annotations")
            finally:
                barrier.complete()

        def on_failure(error: TransportError) -> None:
            try:
                self.on_error("search", error)
            finally:
                barrier.complete()

        request = self.request_for("search", query)
        logger.info(f"Store search: {request.method} {request.url} {query}")
        self.transport.send(request, on_success, on_failure)

    def load_annotations(self) -> None:
        """Load every annotation in the store with a single read request."""
        self.registry.clear()
        self.loads_issued += 1
        load_number = self.loads_issued

        def on_success(payload: Any) -> None:
            if not self._is_current(load_number):
                logger.info(f"Dropping read result of superseded load {load_number}")
                return
            for record in decode_annotations(graph_of(payload), self.document):
                self.registry.register(record)
            self._on_load_complete(load_number)

        self.api_request("read", None, on_success)

    def _on_load_complete(self, load_number: int) -> None:
        if not self._is_current(load_number):
            logger.info(f"Load {load_number} was superseded, not delivering")
            return
        records = self.registry.snapshot()
        logger.info(f"Load {load_number} complete, delivering {len(records)} annotations")
        self.deliver(records)

    def dump_annotations(self) -> List[Dict[str, Any]]:
        return self.registry.dump()
