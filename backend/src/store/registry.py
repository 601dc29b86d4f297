"""In-memory registry of the annotation records known to the client."""
from typing import Any, Callable, Dict, Iterator, List, Optional

from models.annotation import AnnotationRecord
from models.errors import UnregisteredAnnotationError
from utils.logger import get_logger

logger = get_logger(__name__)

Rebind = Callable[[AnnotationRecord], None]


class AnnotationRegistry:
    """
    Ordered collection of annotation records, keyed by instance identity.

    The registry owns the canonical record instances. The host's render
    layer keeps references to the same instances, so updates are always
    merged in place and then announced through `on_rebind`.
    """

    def __init__(self, on_rebind: Optional[Rebind] = None):
        """
        Initialize an empty registry.

        Args:
            on_rebind: Called with a record after every update so the render
                layer can re-associate its highlights with it
        """
        self._records: List[AnnotationRecord] = []
        self.on_rebind = on_rebind

    def __contains__(self, record: Any) -> bool:
        return any(existing is record for existing in self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AnnotationRecord]:
        return iter(self._records)

    def register(self, record: AnnotationRecord) -> None:
        """Append a record. Duplicates are not checked."""
        self._records.append(record)

    def unregister(self, record: AnnotationRecord) -> None:
        """
        Remove the first occurrence of a record.

        Raises:
            UnregisteredAnnotationError: If the record is not registered
        """
        for index, existing in enumerate(self._records):
            if existing is record:
                del self._records[index]
                return
        raise UnregisteredAnnotationError(record)

    def update(self, record: AnnotationRecord, patch: Dict[str, Any]) -> AnnotationRecord:
        """
        Merge fields into a registered record in place.

        An unregistered record is still merged and re-bound so the rendered
        view stays consistent; the condition is logged rather than raised,
        since records loaded for display may be rendered before they are
        registered.

        Args:
            record: Record to update
            patch: Fields to merge

        Returns:
            The same record instance
        """
        if record not in self:
            logger.error(str(UnregisteredAnnotationError(record)))
        record.merge(patch)
        if self.on_rebind is not None:
            self.on_rebind(record)
        return record

    def snapshot(self) -> List[AnnotationRecord]:
        """Shallow copy of the current records, in registration order."""
        return list(self._records)

    def clear(self) -> None:
        self._records = []

    def dump(self) -> List[Dict[str, Any]]:
        """Plain-data copy of every record."""
        return [record.to_dict() for record in self._records]
