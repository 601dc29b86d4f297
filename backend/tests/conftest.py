"""Shared fixtures for the store sync tests."""
import os
import sys

import pytest

# Add src to path to match how the modules import each other
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
sys.path.insert(0, os.path.dirname(__file__))

from models.document import StaticDocument
from helpers import PAGE_URI, DeferredTransport, Recorder


@pytest.fixture
def page_document():
    """A page with no embedded resources."""
    return StaticDocument(PAGE_URI)


@pytest.fixture
def image_document():
    """A page with two embedded images."""
    return StaticDocument(PAGE_URI, {
        "http://example.com/images/one.png": "<img one>",
        "http://example.com/images/two.png": "<img two>",
    })


@pytest.fixture
def transport():
    return DeferredTransport()


@pytest.fixture
def notifications():
    """Records notify(message, severity) calls."""
    return Recorder()


@pytest.fixture
def deliveries():
    """Records deliver(records) calls."""
    return Recorder()
