"""
FastHTML integration: the set, call and live routes.
"""

import pytest
from fasthtml.common import FastHTML, to_xml
from starlette.testclient import TestClient

from starwidgets import accordion, alert, confirm, configure_app, headers, notifications
from starwidgets.config import Environment, WidgetsConfig, get_config
from starwidgets.routes import live

OPTIONS = [("First", "one"), ("Second", "two"), ("Third", "three")]


@pytest.fixture
def client(testing_config):
    app = configure_app(FastHTML(secret_key="test"), config=testing_config)
    return TestClient(app)


def test_set_route_resolves_confirm(client):
    answers = []
    wdg = confirm(answers.append, "Overwrite?")
    to_xml(wdg)

    response = client.post(wdg.scope.set_url("value"), json={"value": True})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert answers == [True]
    assert wdg.observe().get() is True


def test_set_route_streams_queued_commands(client):
    wdg = accordion(OPTIONS, multiple=False)
    to_xml(wdg)

    response = client.post(wdg.scope.set_url("index"), json={"value": 2})

    assert response.status_code == 200
    assert "datastar-merge-signals" in response.text
    assert wdg.observe().get() == 2
    assert len(wdg.scope.view) == 0


def test_set_route_accepts_datastar_query_payload(client):
    answers = []
    wdg = confirm(answers.append, "Sure?")
    response = client.post(wdg.scope.set_url("value") + '?datastar={"value": false}')
    assert response.status_code == 200
    assert answers == [False]


def test_set_route_errors(client):
    answers = []
    wdg = confirm(answers.append, "Sure?")

    assert client.post("/widgets/scope_missing/set/value", json={"value": True}).status_code == 404
    assert client.post(wdg.scope.set_url("nope"), json={"value": True}).status_code == 404
    assert client.post(wdg.scope.set_url("value"), json={}).status_code == 400
    assert client.post(wdg.scope.set_url("value"), json={"value": "yes"}).status_code == 400
    bad = client.post(wdg.scope.set_url("value"), content=b"{not json",
                      headers={"content-type": "application/json"})
    assert bad.status_code == 400
    assert answers == []


def test_set_route_only_writes_writable_observables(client):
    shout = alert("x")
    wdg = accordion(OPTIONS, multiple=False)
    records = [{"label": "x", "i": 0, "content": "<img src=x onerror=alert(1)>"}]

    assert client.post(shout.scope.set_url("text"), json={"value": "y"}).status_code == 404
    assert client.post(wdg.scope.set_url("options_js"), json={"value": records}).status_code == 404
    assert client.post(wdg.scope.set_url("index"), json={"value": "garbage"}).status_code == 400
    assert client.post(wdg.scope.set_url("index"), json={"value": 3}).status_code == 400

    assert shout["text"].get() == "x"
    assert wdg.observe().get() == 0
    assert "onerror" not in to_xml(wdg)


def test_call_route_dismisses_notification(client):
    wdg = notifications(["A", "B", "C"])
    keys = list(wdg.keys)
    to_xml(wdg)

    response = client.post(f"/widgets/{wdg.scope.id}/call/dismiss?key={keys[1]}")

    assert response.status_code == 200
    assert "datastar-merge-fragments" in response.text
    assert wdg.observe().get() == ["A", "C"]


def test_call_route_arguments(client):
    wdg = accordion(OPTIONS, multiple=False)
    base = f"/widgets/{wdg.scope.id}/call/on_click"

    assert client.post(f"{base}?i=1&x=1").status_code == 200
    assert wdg.observe().get() == 1
    assert client.post(base).status_code == 400
    assert client.post(f"{base}?i=9").status_code == 400
    assert client.post(f"{base}?i=first").status_code == 400
    assert wdg.observe().get() == 1


def test_call_route_errors(client):
    wdg = notifications(["A"])
    assert client.post(f"/widgets/{wdg.scope.id}/call/explode").status_code == 404
    assert client.post("/widgets/scope_missing/call/dismiss").status_code == 404


def test_custom_route_prefix():
    config = WidgetsConfig.from_dict({"environment": "testing", "route_prefix": "ui/"})
    client = TestClient(configure_app(FastHTML(secret_key="test"), config=config))
    wdg = confirm("Sure?")

    assert wdg.scope.set_url("value") == f"/ui/{wdg.scope.id}/set/value"
    assert client.post(wdg.scope.set_url("value"), json={"value": True}).status_code == 200
    assert get_config().environment is Environment.TESTING


def test_headers_include_datastar_and_theme():
    html = to_xml(headers())
    assert "datastar" in html
    assert "bulma" in html


class DisconnectedRequest:
    """Request stub whose client has already gone away."""

    def __init__(self, scope_id):
        self.path_params = {"scope_id": scope_id}

    async def is_disconnected(self):
        return True


async def test_live_stream_flushes_pending_commands():
    wdg = alert("Error!")
    to_xml(wdg)
    wdg.invoke()

    response = await live(DisconnectedRequest(wdg.scope.id))
    body = "".join([chunk async for chunk in response.body_iterator])

    assert 'alert("Error!")' in body
    assert len(wdg.scope.view) == 0
    assert wdg.scope.view.listeners == 0


async def test_live_stream_unknown_scope():
    response = await live(DisconnectedRequest("scope_missing"))
    assert response.status_code == 404
