"""Tests for failed-request messages."""
import pytest

from store.messages import error_message


def test_status_specific_messages_are_distinct():
    messages = {error_message("create", status) for status in (401, 404, 500)}
    assert len(messages) == 3


@pytest.mark.parametrize("status,expected", [
    (401, "Sorry you are not allowed to update this annotation"),
    (404, "Sorry we could not connect to the annotations store"),
    (500, "Sorry something went wrong with the annotation store"),
    (400, "Sorry we could not update this annotation"),
    (0, "Sorry we could not update this annotation"),
])
def test_update_messages(status, expected):
    assert error_message("update", status) == expected


def test_search_generic_message():
    assert error_message("search", 503) == "Sorry we could not search the store for annotations"


def test_read_without_id_generic_message():
    assert error_message("read", 503, has_id=False) == "Sorry we could not read the annotations from the store"
    assert error_message("read", 503, has_id=True) == "Sorry we could not read this annotation"


def test_status_wins_over_action_specific_generic():
    assert error_message("search", 500) == "Sorry something went wrong with the annotation store"
