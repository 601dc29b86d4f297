"""End-to-end tests against the fake OA store over HttpxTransport."""
import httpx
import pytest
from fastapi.testclient import TestClient

from main import create_sync_controller
from models.annotation import AnnotationRecord, RegionSelection, TextRange
from models.document import StaticDocument
from store.messages import Severity
from store.transport import HttpxTransport, StoreRequest
from fake_store import REQUEST_LOG, REQUIRED_TOKEN, STORED_GRAPHS, app, reset_store
from helpers import PAGE_URI, Recorder

IMAGE_ID = "http://example.com/images/one.png"


@pytest.fixture
def client():
    """Create a test client for the fake store."""
    reset_store()
    yield TestClient(app)
    reset_store()


@pytest.fixture
def document():
    return StaticDocument(PAGE_URI, {IMAGE_ID: "<img one>"})


def create_controller(client, document, deliveries, notifications, **options):
    options.setdefault("prefix", "/store")
    options.setdefault("autoFetch", False)
    return create_sync_controller(
        document=document,
        deliver=deliveries,
        notify=notifications,
        options=options,
        transport=HttpxTransport(client=client),
    )


def test_create_update_delete_round_trip(client, document, deliveries, notifications):
    controller = create_controller(client, document, deliveries, notifications)
    controller.start()
    record = AnnotationRecord(text="first", quote="hello", ranges=[TextRange("/p[1]", 0, "/p[1]", 5)])

    controller.events.created(record)
    assert record.id == "http://testserver/store/annotations/1"
    assert record.id in STORED_GRAPHS

    record.text = "second"
    controller.events.updated(record)
    stored_body = [n for n in STORED_GRAPHS[record.id] if n["@type"] == "cnt:ContentAsText"][0]
    assert stored_body["cnt:chars"] == "second"

    controller.events.deleted(record)
    assert STORED_GRAPHS == {}
    assert record not in controller.orchestrator.registry
    assert notifications.calls == []


def test_fan_out_load_returns_page_and_image_annotations(client, document, deliveries, notifications):
    writer = create_controller(client, document, Recorder(), notifications)
    writer.start()
    writer.events.created(AnnotationRecord(text="on page", quote="hello", ranges=[TextRange("/p[1]", 0, "/p[1]", 5)]))
    writer.events.created(AnnotationRecord(
        text="on image",
        region=RegionSelection.from_box(10, 20, 30, 40, image=document.find_resource(IMAGE_ID)),
    ))

    reader = create_controller(client, document, deliveries, notifications, autoFetch=True)
    reader.start()

    assert len(deliveries) == 1
    loaded = {record.text: record for record in deliveries.calls[0][0]}
    assert set(loaded) == {"on page", "on image"}
    assert loaded["on page"].quote == "hello"
    region = loaded["on image"].region
    assert (region.x2, region.y2) == (40, 60)
    assert region.image == "<img one>"


def test_emulated_http_and_json(client, document, deliveries, notifications):
    controller = create_controller(client, document, deliveries, notifications, emulateHTTP=True, emulateJSON=True)
    controller.start()
    record = AnnotationRecord(text="emulated")

    controller.events.created(record)
    record.text = "emulated edit"
    controller.events.updated(record)
    controller.events.deleted(record)

    assert [entry[0] for entry in REQUEST_LOG] == ["POST", "POST", "POST"]
    assert [entry[2] for entry in REQUEST_LOG] == [None, "PUT", "DELETE"]
    assert STORED_GRAPHS == {}
    assert notifications.calls == []


def test_unauthorized_request_notifies(client, document, deliveries, notifications):
    REQUIRED_TOKEN["value"] = "secret"
    controller = create_controller(client, document, deliveries, notifications)
    controller.start()
    record = AnnotationRecord(text="denied")

    controller.events.created(record)

    assert record.id is None
    assert record in controller.orchestrator.registry
    assert notifications.calls == [("Sorry you are not allowed to create this annotation", Severity.ERROR)]


def test_token_provider_authorizes_load(client, document, deliveries, notifications):
    REQUIRED_TOKEN["value"] = "secret"
    controller = create_sync_controller(
        document=document,
        deliver=deliveries,
        notify=notifications,
        options={"prefix": "/store"},
        transport=HttpxTransport(client=client),
        token_provider=lambda done: done("secret"),
    )

    controller.start()

    assert len(deliveries) == 1
    assert notifications.calls == []


def test_missing_route_maps_to_store_unreachable(client, document, deliveries, notifications):
    controller = create_controller(client, document, deliveries, notifications, prefix="/nowhere", autoFetch=True)
    controller.start()

    # Two searches (image + page) both fail; the load still completes once
    assert len(deliveries) == 1
    assert deliveries.calls[0][0] == []
    assert notifications.calls == [("Sorry we could not connect to the annotations store", Severity.ERROR)] * 2


def test_transport_reports_network_errors():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport = HttpxTransport(client=httpx.Client(transport=httpx.MockTransport(refuse), base_url="http://store"))
    succeeded, failed = Recorder(), Recorder()

    transport.send(StoreRequest(action="search", url="/search", method="GET", body={}), succeeded, failed)

    assert len(succeeded) == 0
    assert failed.calls[0][0].status == 0
    assert failed.calls[0][0].action == "search"


def test_transport_rejects_invalid_json():
    transport = HttpxTransport(client=httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
        base_url="http://store",
    ))
    succeeded, failed = Recorder(), Recorder()

    transport.send(StoreRequest(action="read", url="/annotations", method="GET"), succeeded, failed)

    assert len(succeeded) == 0
    assert failed.calls[0][0].status == 200


def test_transport_empty_body_is_none():
    transport = HttpxTransport(client=httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(204)),
        base_url="http://store",
    ))
    succeeded, failed = Recorder(), Recorder()

    transport.send(StoreRequest(action="destroy", url="http://store/a/1", method="DELETE"), succeeded, failed)

    assert succeeded.calls == [(None,)]
    assert len(failed) == 0
