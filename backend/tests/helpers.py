"""Test doubles for the store sync tests."""
from typing import Any, Dict, List, Optional

from models.errors import TransportError
from models.graph import OA_CONTEXT
from store.transport import StoreRequest, Transport

PAGE_URI = "http://example.com/page.html"


class Recorder:
    """Callable that records the arguments of every call."""

    def __init__(self):
        self.calls: List[tuple] = []

    def __call__(self, *args):
        self.calls.append(args)

    def __len__(self) -> int:
        return len(self.calls)


class DeferredTransport(Transport):
    """
    Transport that queues requests until the test resolves them.

    Lets tests choose the order in which responses arrive.
    """

    def __init__(self):
        self.sent: List[StoreRequest] = []
        self.pending: List[tuple] = []

    def send(self, request, on_success, on_error) -> None:
        self.sent.append(request)
        self.pending.append((request, on_success, on_error))

    def calls(self, action: str) -> List[StoreRequest]:
        return [request for request in self.sent if request.action == action]

    def index_of(self, annotates: str) -> int:
        """Position in the pending queue of the search for `annotates`."""
        for index, (request, _, _) in enumerate(self.pending):
            if isinstance(request.body, dict) and request.body.get("annotates") == annotates:
                return index
        raise LookupError(f"No pending search for {annotates}")

    def succeed(self, index: int = 0, payload: Any = None) -> StoreRequest:
        request, on_success, _ = self.pending.pop(index)
        on_success(payload)
        return request

    def fail(self, index: int = 0, status: int = 500) -> StoreRequest:
        request, _, on_error = self.pending.pop(index)
        on_error(TransportError(status, request.action))
        return request


def text_annotation_nodes(
    annotation_id: str,
    text: str,
    source: str,
    quote: str = "hello",
    suffix: str = "1"
) -> List[Dict[str, Any]]:
    """Graph nodes of one stored text annotation, as a store would return them."""
    return [
        {
            "@id": annotation_id,
            "@type": "oa:Annotation",
            "oa:hasBody": {"@id": f"urn:uuid:body-{suffix}"},
            "oa:hasTarget": {"@id": f"urn:uuid:target-{suffix}"},
        },
        {
            "@id": f"urn:uuid:body-{suffix}",
            "@type": "cnt:ContentAsText",
            "cnt:chars": text,
            "dc:format": "text/plain",
        },
        {
            "@id": f"urn:uuid:target-{suffix}",
            "@type": "oa:SpecificResource",
            "oa:hasSource": {"@id": source},
            "oa:hasSelector": {"@id": f"urn:uuid:selector-{suffix}"},
        },
        {
            "@id": f"urn:uuid:selector-{suffix}",
            "@type": ["oa:TextPositionSelector", "oa:TextQuoteSelector"],
            "oa:exact": quote,
            "lorestore:start": "/p[1]",
            "lorestore:startOffset": 0,
            "lorestore:end": "/p[1]",
            "lorestore:endOffset": len(quote),
        },
    ]


def region_annotation_nodes(
    annotation_id: str,
    text: str,
    source: str,
    xywh: str = "xywh=10,20,30,40",
    suffix: str = "1"
) -> List[Dict[str, Any]]:
    """Graph nodes of one stored image-region annotation."""
    return [
        {
            "@id": annotation_id,
            "@type": "oa:Annotation",
            "oa:hasBody": {"@id": f"urn:uuid:body-{suffix}"},
            "oa:hasTarget": {"@id": f"urn:uuid:target-{suffix}"},
        },
        {
            "@id": f"urn:uuid:body-{suffix}",
            "@type": "cnt:ContentAsText",
            "cnt:chars": text,
            "dc:format": "text/plain",
        },
        {
            "@id": f"urn:uuid:target-{suffix}",
            "@type": "oa:SpecificResource",
            "oa:hasSource": {"@id": source},
            "oa:hasSelector": {"@id": f"urn:uuid:selector-{suffix}"},
        },
        {
            "@id": f"urn:uuid:selector-{suffix}",
            "@type": "oa:FragmentSelector",
            "rdf:value": xywh,
        },
    ]


def graph_response(*node_lists: List[Dict[str, Any]], context: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Wrap node lists into one search response document."""
    graph: List[Dict[str, Any]] = []
    for nodes in node_lists:
        graph.extend(nodes)
    return {"@context": context or dict(OA_CONTEXT), "@graph": graph}
