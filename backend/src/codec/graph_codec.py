"""Translation between annotation records and Open Annotation JSON-LD graphs."""
import json
import re
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from models.annotation import AnnotationRecord, RegionSelection, TextRange
from models.document import HostDocument
from models.errors import DecodingError, EncodingError
from models.graph import (
    ANNOTATION_TYPE,
    GRAPH_NODE_ADAPTER,
    PLACEHOLDER_ANNOTATION_ID,
    AnnotationNode,
    BodyNode,
    FragmentSelectorNode,
    GraphDocument,
    NodeRef,
    TargetNode,
    TextSelectorNode,
    node_types,
)
from utils.logger import get_logger

logger = get_logger(__name__)

XYWH_PATTERN = re.compile(r"xywh=(\d+),(\d+),(\d+),(\d+)", re.ASCII)


def new_node_id() -> str:
    """Generate a fresh, globally unique node id."""
    return f"urn:uuid:{uuid.uuid4()}"


def _build_selector(record: AnnotationRecord, selector_id: str):
    """
    Build the selector node for a record, or None for a comment-only annotation.

    Raises:
        EncodingError: If the record's selection data is inconsistent
    """
    if record.ranges and record.region is not None:
        raise EncodingError("record carries both a quote selection and a region selection")

    if record.ranges:
        if len(record.ranges) != 1:
            raise EncodingError(f"quote selection must have exactly one range, got {len(record.ranges)}")
        if not record.quote:
            raise EncodingError("text range given without a quote")
        text_range = record.ranges[0]
        return TextSelectorNode(
            id=selector_id,
            exact=record.quote,
            start=text_range.start,
            start_offset=text_range.start_offset,
            end=text_range.end,
            end_offset=text_range.end_offset,
        )

    if record.region is not None:
        region = record.region
        if min(region.x1, region.y1, region.width, region.height) < 0:
            raise EncodingError(f"region geometry must be non-negative, got {region.to_dict()}")
        return FragmentSelectorNode(
            id=selector_id,
            value=f"xywh={region.x1},{region.y1},{region.width},{region.height}",
        )

    if record.quote:
        raise EncodingError("quote given without a text range")

    return None


def encode_annotation(record: AnnotationRecord, document: HostDocument) -> Dict[str, Any]:
    """
    Encode one annotation record as an OA graph document.

    Node ids for the body, target and selector are generated fresh on
    every call. A comment-only record (no ranges, no region) produces a
    target without a selector.

    Args:
        record: Annotation to encode
        document: Host document providing the page URI and image identifiers

    Returns:
        JSON-LD document as a dict with `@context` and `@graph`

    Raises:
        EncodingError: If the record's selection data is inconsistent
    """
    body_id = new_node_id()
    target_id = new_node_id()
    selector_id = new_node_id()

    selector = _build_selector(record, selector_id)

    source = document.uri
    if record.region is not None:
        resource_id = document.resource_id(record.region.image)
        if resource_id:
            source = resource_id
        else:
            logger.debug(f"No identifier for image of annotation {record.id}, using page URI {source}")

    nodes: List[Any] = [
        AnnotationNode(
            id=record.id or PLACEHOLDER_ANNOTATION_ID,
            has_body=NodeRef(id=body_id),
            has_target=NodeRef(id=target_id),
        ),
        BodyNode(id=body_id, chars=record.text or ""),
        TargetNode(
            id=target_id,
            has_source=NodeRef(id=source),
            has_selector=NodeRef(id=selector_id) if selector is not None else None,
        ),
    ]
    if selector is not None:
        nodes.append(selector)

    return GraphDocument(graph=nodes).model_dump(by_alias=True, exclude_none=True)


def serialize_annotation(record: AnnotationRecord, document: HostDocument) -> str:
    """Encode a record and render it as JSON-LD text."""
    return json.dumps(encode_annotation(record, document))


def graph_of(payload: Any) -> List[Dict[str, Any]]:
    """
    Extract the node array from a store response body.

    A bare list is taken as the node array and a lone node object is
    wrapped; anything else yields an empty graph.
    """
    if isinstance(payload, dict):
        graph = payload.get("@graph")
        if isinstance(graph, list):
            return graph
        if "@type" in payload:
            return [payload]
        return []
    if isinstance(payload, list):
        return payload
    return []


def find_by_type(graph: List[Dict[str, Any]], type_name: str) -> List[Dict[str, Any]]:
    """Return every node whose @type includes `type_name`."""
    return [node for node in graph if isinstance(node, dict) and type_name in node_types(node)]


def find_by_id(graph: List[Dict[str, Any]], node_id: str) -> Optional[Dict[str, Any]]:
    """Return the first node with the given @id, or None."""
    for node in graph:
        if isinstance(node, dict) and node.get("@id") == node_id:
            return node
    return None


def parse_node(raw: Dict[str, Any]):
    """Validate a raw node dict into its tagged node model."""
    return GRAPH_NODE_ADAPTER.validate_python(raw)


def _resolve(graph: List[Dict[str, Any]], ref: NodeRef, expected: type, annotation_id: Optional[str]):
    raw = find_by_id(graph, ref.id)
    if raw is None:
        raise DecodingError(annotation_id, f"node {ref.id} not found in graph")
    try:
        node = parse_node(raw)
    except ValidationError as e:
        raise DecodingError(annotation_id, f"node {ref.id} is malformed: {e}")
    if not isinstance(node, expected):
        raise DecodingError(annotation_id, f"node {ref.id} is not a {expected.__name__}")
    return node


def decode_annotation(
    graph: List[Dict[str, Any]],
    annotation_node: Dict[str, Any],
    document: HostDocument
) -> AnnotationRecord:
    """
    Decode one annotation node of a fetched graph into a record.

    A text selector with a non-empty quote yields a quote selection; a
    fragment selector with an `xywh=` value yields a region selection whose
    image is looked up by the target's source. Any other selector shape, or
    none at all, yields a plain comment.

    Args:
        graph: Full node array the annotation node came from
        annotation_node: The raw oa:Annotation node
        document: Host document used to resolve image identifiers

    Returns:
        A new AnnotationRecord

    Raises:
        DecodingError: If the annotation, body or target node is missing or malformed
    """
    raw_id = annotation_node.get("@id") if isinstance(annotation_node, dict) else None
    try:
        annotation = AnnotationNode.model_validate(annotation_node)
    except ValidationError as e:
        raise DecodingError(raw_id, f"annotation node is malformed: {e}")

    body = _resolve(graph, annotation.has_body, BodyNode, annotation.id)
    target = _resolve(graph, annotation.has_target, TargetNode, annotation.id)

    record = AnnotationRecord(
        id=None if annotation.id == PLACEHOLDER_ANNOTATION_ID else annotation.id,
        text=body.chars,
    )

    if target.has_selector is None:
        return record

    raw_selector = find_by_id(graph, target.has_selector.id)
    if raw_selector is None:
        logger.warning(f"Selector {target.has_selector.id} of annotation {annotation.id} not in graph")
        return record
    try:
        selector = parse_node(raw_selector)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed selector of annotation {annotation.id}: {e}")
        return record

    if isinstance(selector, TextSelectorNode) and selector.exact:
        record.quote = selector.exact
        record.ranges = [TextRange(
            start=selector.start,
            start_offset=selector.start_offset,
            end=selector.end,
            end_offset=selector.end_offset,
        )]
    elif isinstance(selector, FragmentSelectorNode):
        match = XYWH_PATTERN.fullmatch(selector.value)
        if match:
            x, y, w, h = (int(group) for group in match.groups())
            record.region = RegionSelection.from_box(
                x, y, w, h, image=document.find_resource(target.has_source.id)
            )
        else:
            logger.debug(f"Unsupported fragment {selector.value!r} on annotation {annotation.id}")
    else:
        logger.debug(f"Annotation {annotation.id} has no usable selector, loading as comment")

    return record


def decode_annotations(graph: List[Dict[str, Any]], document: HostDocument) -> List[AnnotationRecord]:
    """
    Decode every annotation node of a fetched graph.

    Annotations that fail to decode are logged and skipped; the rest of the
    graph is still processed.
    """
    records = []
    for annotation_node in find_by_type(graph, ANNOTATION_TYPE):
        try:
            records.append(decode_annotation(graph, annotation_node, document))
        except DecodingError as e:
            logger.warning(f"Skipping annotation: {e}")
    return records
