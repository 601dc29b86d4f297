"""Annotation record model shared by the codec, registry and orchestrator."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class TextRange:
    """A text range: start/end node paths plus character offsets."""
    start: str
    start_offset: int
    end: str
    end_offset: int

    def __post_init__(self):
        """Validate range offsets."""
        if self.start_offset < 0 or self.end_offset < 0:
            raise ValueError(
                f"Range offsets must be >= 0, got start={self.start_offset}, end={self.end_offset}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextRange":
        """Build a range from a dict using either camelCase or snake_case offset keys."""
        return cls(
            start=data["start"],
            start_offset=int(data.get("startOffset", data.get("start_offset", 0))),
            end=data["end"],
            end_offset=int(data.get("endOffset", data.get("end_offset", 0))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start,
            "startOffset": self.start_offset,
            "end": self.end,
            "endOffset": self.end_offset,
        }


@dataclass
class RegionSelection:
    """
    A rectangular region of an embedded image.

    Coordinates are integer pixels. `image` is the host's handle on the
    embedded resource element; it is resolved by the host document and
    never serialized.
    """
    x1: int
    y1: int
    x2: int
    y2: int
    width: int
    height: int
    image: Any = None

    def __post_init__(self):
        """Validate region geometry."""
        for name in ("x1", "y1", "x2", "y2", "width", "height"):
            if getattr(self, name) < 0:
                raise ValueError(f"Region {name} must be >= 0, got {getattr(self, name)}")

    @classmethod
    def from_box(cls, x: int, y: int, width: int, height: int, image: Any = None) -> "RegionSelection":
        """Build a region from its top-left corner and size."""
        return cls(x1=x, y1=y, x2=x + width, y2=y + height, width=width, height=height, image=image)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegionSelection":
        if "x2" not in data:
            return cls.from_box(data["x1"], data["y1"], data["width"], data["height"], data.get("image"))
        return cls(
            x1=data["x1"],
            y1=data["y1"],
            x2=data["x2"],
            y2=data["y2"],
            width=data["width"],
            height=data["height"],
            image=data.get("image"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "width": self.width,
            "height": self.height,
        }


# Keys merge() assigns to attributes; everything else lands in extra
_RECORD_FIELDS = ("id", "text", "quote", "ranges", "region")


@dataclass(eq=False)
class AnnotationRecord:
    """
    A client-side annotation.

    Records compare by identity: the registry and the host's render layer
    hold the same instance, and updates are merged into it in place.
    """
    id: Optional[str] = None
    text: str = ""
    quote: Optional[str] = None
    ranges: List[TextRange] = field(default_factory=list)
    region: Optional[RegionSelection] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate that at most one selection kind is set."""
        if self.ranges and self.region is not None:
            raise ValueError("Annotation cannot carry both a quote selection and a region selection")

    @property
    def has_quote_selection(self) -> bool:
        return bool(self.ranges)

    @property
    def has_region_selection(self) -> bool:
        return self.region is not None

    def merge(self, patch: Dict[str, Any]) -> "AnnotationRecord":
        """
        Merge fields into this record in place.

        Args:
            patch: Field values; `ranges` and `region` may be plain dicts

        Returns:
            This same record
        """
        for key, value in patch.items():
            if key == "ranges":
                self.ranges = [r if isinstance(r, TextRange) else TextRange.from_dict(r) for r in value or []]
            elif key == "region":
                if value is None or isinstance(value, RegionSelection):
                    self.region = value
                else:
                    self.region = RegionSelection.from_dict(value)
            elif key in _RECORD_FIELDS:
                setattr(self, key, value)
            else:
                self.extra[key] = value
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Dump the record as plain data, without the host image handle."""
        data: Dict[str, Any] = dict(self.extra)
        if self.id is not None:
            data["id"] = self.id
        data["text"] = self.text
        if self.quote is not None:
            data["quote"] = self.quote
        data["ranges"] = [r.to_dict() for r in self.ranges]
        if self.region is not None:
            data["region"] = self.region.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotationRecord":
        return cls().merge(data)

    def __repr__(self) -> str:
        kind = "quote" if self.ranges else "region" if self.region else "comment"
        return f"AnnotationRecord(id={self.id}, kind={kind}, text={self.text!r})"
