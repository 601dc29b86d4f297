"""User-facing messages for failed store requests."""
from enum import Enum


class Severity(str, Enum):
    """Notification severity understood by the host's notification display."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


def error_message(action: str, status: int, has_id: bool = True) -> str:
    """
    Pick the message shown to the user for a failed request.

    Args:
        action: Store action that failed (create, read, update, destroy, search)
        status: HTTP status code (0 when the request never got a response)
        has_id: Whether the request was about one identified annotation

    Returns:
        Human-readable message
    """
    if status == 401:
        return f"Sorry you are not allowed to {action} this annotation"
    if status == 404:
        return "Sorry we could not connect to the annotations store"
    if status == 500:
        return "Sorry something went wrong with the annotation store"
    if action == "search":
        return "Sorry we could not search the store for annotations"
    if action == "read" and not has_id:
        return f"Sorry we could not {action} the annotations from the store"
    return f"Sorry we could not {action} this annotation"
