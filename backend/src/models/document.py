"""Host document abstraction: the page annotations are attached to."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class HostDocument(ABC):
    """
    The annotated page as seen by the store client.

    The host application owns the real document; the store only needs the
    page URI and a way to map embedded resources (images) to and from
    their external identifiers.
    """

    @property
    @abstractmethod
    def uri(self) -> str:
        """URI of the current page."""

    @abstractmethod
    def embedded_resources(self) -> List[str]:
        """Identifiers of the embedded resources that carry their own annotations."""

    @abstractmethod
    def resource_id(self, element: Any) -> Optional[str]:
        """External identifier of an embedded resource element, or None."""

    @abstractmethod
    def find_resource(self, identifier: str) -> Optional[Any]:
        """First element whose external identifier equals `identifier`, or None."""


class StaticDocument(HostDocument):
    """In-memory host document built from a page URI and an identifier -> element map."""

    def __init__(self, uri: str, resources: Optional[Dict[str, Any]] = None):
        """
        Initialize a StaticDocument.

        Args:
            uri: Page URI
            resources: Ordered mapping of external identifier to element handle
        """
        self._uri = uri
        self._resources: Dict[str, Any] = dict(resources or {})

    @property
    def uri(self) -> str:
        return self._uri

    def embedded_resources(self) -> List[str]:
        return list(self._resources.keys())

    def resource_id(self, element: Any) -> Optional[str]:
        for identifier, candidate in self._resources.items():
            if candidate is element:
                return identifier
        return None

    def find_resource(self, identifier: str) -> Optional[Any]:
        return self._resources.get(identifier)

    def add_resource(self, identifier: str, element: Any) -> None:
        self._resources[identifier] = element
