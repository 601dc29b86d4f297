"""Pydantic models for Open Annotation JSON-LD graph documents.

Field aliases carry the exact JSON-LD keys; they are part of the wire
contract with OA-speaking stores and must not change.
"""
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, Discriminator, Field, Tag, TypeAdapter, field_validator


OA_CONTEXT: Dict[str, str] = {
    "oa": "http://www.w3.org/ns/oa#",
    "dc": "http://purl.org/dc/elements/1.1/",
    "cnt": "http://www.w3.org/2011/content#",
    "lorestore": "http://auselit.metadata.net/lorestore/",
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
}

ANNOTATION_TYPE = "oa:Annotation"
BODY_TYPE = "cnt:ContentAsText"
TARGET_TYPE = "oa:SpecificResource"
TEXT_POSITION_SELECTOR_TYPE = "oa:TextPositionSelector"
TEXT_QUOTE_SELECTOR_TYPE = "oa:TextQuoteSelector"
FRAGMENT_SELECTOR_TYPE = "oa:FragmentSelector"

# Annotation node id used before the store has assigned one
PLACEHOLDER_ANNOTATION_ID = "urn:uuid:00000000-0000-0000-0000-000000000000"

NodeType = Union[str, List[str]]


def node_types(node: Any) -> List[str]:
    """Return the @type values of a raw node dict or a node model as a list."""
    if isinstance(node, dict):
        value = node.get("@type")
    else:
        value = getattr(node, "type", None)
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    return []


class NodeRef(BaseModel):
    """A reference to another node in the same graph."""
    id: str = Field(..., alias="@id")

    class Config:
        populate_by_name = True


def _as_ref(value: Any) -> Any:
    """Accept a bare id string wherever a node reference is expected."""
    if isinstance(value, str):
        return {"@id": value}
    return value


class AnnotationNode(BaseModel):
    """oa:Annotation node linking a body and a target."""
    id: str = Field(..., alias="@id")
    type: NodeType = Field(default=ANNOTATION_TYPE, alias="@type")
    has_body: NodeRef = Field(..., alias="oa:hasBody")
    has_target: NodeRef = Field(..., alias="oa:hasTarget")

    class Config:
        populate_by_name = True

    @field_validator("has_body", "has_target", mode="before")
    @classmethod
    def coerce_ref(cls, v: Any) -> Any:
        return _as_ref(v)


class BodyNode(BaseModel):
    """cnt:ContentAsText body holding the annotation text."""
    id: str = Field(..., alias="@id")
    type: NodeType = Field(default=BODY_TYPE, alias="@type")
    chars: str = Field(default="", alias="cnt:chars")
    format: str = Field(default="text/plain", alias="dc:format")

    class Config:
        populate_by_name = True


class TargetNode(BaseModel):
    """oa:SpecificResource target: a source resource plus an optional selector."""
    id: str = Field(..., alias="@id")
    type: NodeType = Field(default=TARGET_TYPE, alias="@type")
    has_source: NodeRef = Field(..., alias="oa:hasSource")
    has_selector: Optional[NodeRef] = Field(None, alias="oa:hasSelector")

    class Config:
        populate_by_name = True

    @field_validator("has_source", "has_selector", mode="before")
    @classmethod
    def coerce_ref(cls, v: Any) -> Any:
        return _as_ref(v)


class TextSelectorNode(BaseModel):
    """Combined text position + quote selector.

    Range fields live under the store-specific `lorestore` namespace.
    """
    id: str = Field(..., alias="@id")
    type: NodeType = Field(
        default_factory=lambda: [TEXT_POSITION_SELECTOR_TYPE, TEXT_QUOTE_SELECTOR_TYPE],
        alias="@type"
    )
    exact: str = Field(default="", alias="oa:exact")
    start: str = Field(default="", alias="lorestore:start")
    start_offset: int = Field(default=0, ge=0, alias="lorestore:startOffset")
    end: str = Field(default="", alias="lorestore:end")
    end_offset: int = Field(default=0, ge=0, alias="lorestore:endOffset")

    class Config:
        populate_by_name = True


class FragmentSelectorNode(BaseModel):
    """oa:FragmentSelector carrying a media fragment such as `xywh=x,y,w,h`."""
    id: str = Field(..., alias="@id")
    type: NodeType = Field(default=FRAGMENT_SELECTOR_TYPE, alias="@type")
    value: str = Field(..., alias="rdf:value")

    class Config:
        populate_by_name = True


class OtherNode(BaseModel):
    """Any node shape this client does not interpret; kept verbatim."""
    id: Optional[str] = Field(None, alias="@id")
    type: Optional[NodeType] = Field(None, alias="@type")

    class Config:
        populate_by_name = True
        extra = "allow"


def node_kind(v: Any) -> str:
    """Route a raw node (or node model) to its tagged variant by @type."""
    types = node_types(v)
    if ANNOTATION_TYPE in types:
        return "annotation"
    if BODY_TYPE in types:
        return "body"
    if TARGET_TYPE in types:
        return "target"
    if TEXT_QUOTE_SELECTOR_TYPE in types:
        return "text_selector"
    if FRAGMENT_SELECTOR_TYPE in types:
        return "fragment_selector"
    return "other"


GraphNode = Annotated[
    Union[
        Annotated[AnnotationNode, Tag("annotation")],
        Annotated[BodyNode, Tag("body")],
        Annotated[TargetNode, Tag("target")],
        Annotated[TextSelectorNode, Tag("text_selector")],
        Annotated[FragmentSelectorNode, Tag("fragment_selector")],
        Annotated[OtherNode, Tag("other")],
    ],
    Discriminator(node_kind),
]

GRAPH_NODE_ADAPTER: TypeAdapter = TypeAdapter(GraphNode)


class GraphDocument(BaseModel):
    """Complete OA graph document: fixed context plus the node array."""
    context: Dict[str, str] = Field(default_factory=lambda: dict(OA_CONTEXT), alias="@context")
    graph: List[GraphNode] = Field(default_factory=list, alias="@graph")

    class Config:
        populate_by_name = True
