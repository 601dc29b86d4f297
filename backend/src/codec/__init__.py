"""Open Annotation JSON-LD graph codec."""
from codec.graph_codec import (
    decode_annotation,
    decode_annotations,
    encode_annotation,
    find_by_id,
    find_by_type,
    graph_of,
    new_node_id,
    parse_node,
    serialize_annotation,
)

__all__ = [
    "decode_annotation",
    "decode_annotations",
    "encode_annotation",
    "find_by_id",
    "find_by_type",
    "graph_of",
    "new_node_id",
    "parse_node",
    "serialize_annotation",
]
