"""Pydantic models for store client options."""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from config import STORE_EMULATE_HTTP, STORE_EMULATE_JSON, STORE_PREFIX


class StoreUrls(BaseModel):
    """Per-action path templates. `:id` is replaced with the annotation id."""
    create: str = Field(default="/annotations", description="Path for create requests")
    read: str = Field(default="/annotations/:id", description="Path for read requests")
    update: str = Field(default="/annotations/:id", description="Path template for update requests")
    destroy: str = Field(default="/annotations/:id", description="Path template for destroy requests")
    search: str = Field(default="/search", description="Path for search requests")


class StoreOptions(BaseModel):
    """Options recognized by the store client (camelCase aliases match the host's option names)."""
    prefix: str = Field(default=STORE_PREFIX, description="URL prefix; empty disables prefixing")
    urls: StoreUrls = Field(default_factory=StoreUrls, description="Per-action path templates")
    emulate_http: bool = Field(
        default=STORE_EMULATE_HTTP,
        alias="emulateHTTP",
        description="Send PUT/DELETE as POST with X-HTTP-Method-Override"
    )
    emulate_json: bool = Field(
        default=STORE_EMULATE_JSON,
        alias="emulateJSON",
        description="Send the graph document as a form field named `json`"
    )
    annotation_data: Dict[str, Any] = Field(
        default_factory=dict,
        alias="annotationData",
        description="Fields merged into every annotation at creation time"
    )
    headers: Dict[str, str] = Field(default_factory=dict, description="Static headers sent with every request")
    load_from_search: Optional[Dict[str, Any]] = Field(
        default_factory=dict,
        alias="loadFromSearch",
        description="Search options for the initial load; None loads the whole store instead"
    )
    auto_fetch: bool = Field(default=True, alias="autoFetch", description="Load annotations on start")

    class Config:
        populate_by_name = True  # Allow both field names and aliases
