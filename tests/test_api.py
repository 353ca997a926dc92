import pytest
from fastapi.testclient import TestClient
import config
from flowcanvas.main import app, session_manager

client = TestClient(app)


@pytest.fixture
def session():
    name = "test_canvas"
    response = client.post("/api/sessions", json={"name": name})
    assert response.status_code == 200
    yield f"/api/sessions/{name}"
    client.delete(f"/api/sessions/{name}")


def add_task(base, config_values=None, x=0, y=0):
    response = client.post(f"{base}/nodes", json={
        "variant": "task",
        "position": {"x": x, "y": y},
        "config": config_values or {},
    })
    assert response.status_code == 200
    return response.json()


def test_catalog_endpoints():
    variants = client.get("/api/variants").json()
    assert {v["type"] for v in variants} == {"task", "trigger", "input", "output", "error", "finally", "note"}

    palette = client.get("/api/palette", params={"query": "log"}).json()
    assert any(item["pluginType"] == "io.kestra.plugin.core.log.Log" for item in palette)

    response = client.get("/api/task-metadata/io.kestra.plugin.core.log.Log")
    assert response.status_code == 200
    assert response.json()["displayName"] == "Log"
    assert client.get("/api/task-metadata/io.kestra.plugin.nope").status_code == 404


def test_default_session_exists():
    assert "default" in client.get("/api/sessions").json()
    assert client.delete("/api/sessions/default").status_code == 400


def test_unknown_session():
    assert client.get("/api/sessions/missing").status_code == 404


def test_connect_and_cascade(session):
    first = add_task(session, {"id": "log_task_001", "type": ""}, 100, 100)
    second = add_task(session, x=300, y=100)

    response = client.post(f"{session}/edges", json={"source": first["id"], "target": second["id"]})
    assert response.status_code == 200

    document = client.get(session).json()
    assert len(document["data"]["edges"]) == 1

    response = client.delete(f"{session}/nodes/{first['id']}")
    assert response.status_code == 200
    document = client.get(session).json()
    assert [n["id"] for n in document["data"]["nodes"]] == [second["id"]]
    assert document["data"]["edges"] == []


def test_invalid_connection_is_400(session):
    task = add_task(session)
    note = client.post(f"{session}/nodes", json={"variant": "note"}).json()
    response = client.post(f"{session}/edges", json={"source": task["id"], "target": note["id"]})
    assert response.status_code == 400


def test_missing_node_is_404(session):
    assert client.delete(f"{session}/nodes/task-404").status_code == 404
    assert client.put(f"{session}/selection", json={"node_id": "task-404"}).status_code == 404


def test_every_change_is_saved(session):
    add_task(session, {"id": "a"})
    saved = client.get(f"{session}/saved").json()
    assert saved["data"]["nodes"][0]["data"]["config"]["id"] == "a"


def test_drop_and_menu(session):
    response = client.post(f"{session}/drop", json={
        "transfer": {"application/reactflow-label": "Note"},
        "clientX": 100,
        "clientY": 100,
    })
    assert response.json()["node"] is None

    response = client.post(f"{session}/drop", json={
        "transfer": {
            "application/reactflow": "task",
            "application/reactflow-label": "Log",
            "application/reactflow-plugin": "io.kestra.plugin.core.log.Log",
        },
        "clientX": 150,
        "clientY": 120,
        "bounds": {"left": 50, "top": 20},
    })
    node = response.json()["node"]
    assert node["position"] == {"x": 100.0, "y": 100.0}
    assert node["data"]["config"]["type"] == "io.kestra.plugin.core.log.Log"

    response = client.post(f"{session}/menu", json={"item_id": "note"})
    assert response.json()["position"] == config.DEFAULT_NODE_POSITION
    assert client.post(f"{session}/menu", json={"item_id": "nope"}).status_code == 404


def test_form_and_commit(session):
    node = add_task(session, {"id": "log_001", "type": "io.kestra.plugin.core.log.Log"})
    form = client.get(f"{session}/nodes/{node['id']}/form").json()
    assert [f["name"] for f in form["fields"]][:3] == ["id", "type", "message"]

    response = client.post(f"{session}/nodes/{node['id']}/properties", json={
        "values": {"id": "greeter"},
        "references": {"message": "{{ execution.id }}"},
        "customYaml": "extra: true",
    })
    assert response.status_code == 200
    committed = response.json()
    assert committed["data"]["label"] == "greeter"
    assert committed["data"]["config"]["message"] == "{{ execution.id }}"
    assert committed["data"]["config"]["extra"] is True


def test_note_size_not_editable_from_panel(session):
    note = client.post(f"{session}/nodes", json={"variant": "note"}).json()
    response = client.post(f"{session}/nodes/{note['id']}/properties", json={"values": {"width": 999}})
    assert response.status_code == 400

    response = client.put(f"{session}/nodes/{note['id']}/size", json={"width": 400, "height": 200})
    assert response.json()["data"]["config"]["width"] == 400


def test_navigation(session):
    a = add_task(session, {"id": "a"})
    b = add_task(session, {"id": "b"})
    client.post(f"{session}/edges", json={"source": a["id"], "target": b["id"]})
    client.put(f"{session}/editing", json={"node_id": a["id"]})

    response = client.post(f"{session}/navigate", json={"direction": "next"})
    assert response.json()["editing"] == b["id"]
    response = client.post(f"{session}/navigate", json={"direction": "previous"})
    assert response.json()["editing"] == a["id"]


def test_inputs_panel(session):
    a = add_task(session, {"id": "fetch", "type": "io.kestra.plugin.core.debug.Return"})
    b = add_task(session, {"id": "log"})
    client.post(f"{session}/edges", json={"source": a["id"], "target": b["id"]})

    panel = client.get(f"{session}/nodes/{b['id']}/inputs").json()
    assert panel["connected"][0]["outputs"][0]["token"] == "{{ outputs.fetch.value }}"
    assert panel["context"][0]["name"] == "execution.id"


def test_playground(session, monkeypatch):
    monkeypatch.setattr(config, "PLAYGROUND_LATENCY_SECONDS", 0)
    node = add_task(session, {"id": "r", "type": "io.kestra.plugin.core.debug.Return", "format": "ok"})

    response = client.post(f"{session}/nodes/{node['id']}/playground")
    assert response.status_code == 200
    assert response.json()["result"]["outputs"] == {"value": "ok"}

    document = client.get(session).json()
    assert "outputs" not in document["data"]["nodes"][0]["data"]["config"]


def test_properties_and_export(session):
    response = client.put(f"{session}/properties", json={"id": "demo", "namespace": "company.team"})
    assert response.status_code == 200
    add_task(session, {"id": "hello", "type": "io.kestra.plugin.core.log.Log"})

    text = client.get(f"{session}/export").text
    assert "id: demo" in text
    assert "- id: hello" in text


def test_create_session_from_document():
    document = {
        "data": {
            "nodes": [{"id": "task-1", "type": "task", "position": {"x": 1, "y": 2},
                       "data": {"label": "t", "config": {"id": "t", "type": ""}}}],
            "edges": [],
        },
        "properties": {"id": "loaded", "namespace": "ns"},
    }
    response = client.post("/api/sessions", json={"name": "loaded", "document": document})
    assert response.status_code == 200
    try:
        fetched = client.get("/api/sessions/loaded").json()
        assert fetched["data"]["nodes"][0]["position"] == {"x": 1.0, "y": 2.0}
        assert fetched["properties"]["id"] == "loaded"
        assert "loaded" in session_manager.list_sessions()
    finally:
        client.delete("/api/sessions/loaded")


def test_logs_endpoint():
    response = client.get("/api/logs")
    assert response.status_code == 200
    assert isinstance(response.json(), list)


def test_debounced_autosave_over_http(monkeypatch):
    monkeypatch.setattr(config, "AUTOSAVE_DEBOUNCE_SECONDS", 10)
    assert client.post("/api/sessions", json={"name": "debounced"}).status_code == 200
    base = "/api/sessions/debounced"
    try:
        add_task(base, {"id": "a"})
        assert client.get(f"{base}/saved").status_code == 404

        client.post(f"{base}/save")
        saved = client.get(f"{base}/saved").json()
        assert saved["data"]["nodes"][0]["data"]["config"]["id"] == "a"
    finally:
        client.delete(base)


def test_commit_applies_type_before_its_fields(session):
    node = client.post(f"{session}/nodes", json={"variant": "input", "config": {"id": "count"}}).json()
    response = client.post(f"{session}/nodes/{node['id']}/properties", json={
        "values": {"min": "1", "type": "INT"},
    })
    assert response.status_code == 200
    assert response.json()["data"]["config"]["min"] == 1


def test_playground_usable_after_panel_closes(session, monkeypatch):
    monkeypatch.setattr(config, "PLAYGROUND_LATENCY_SECONDS", 0)
    node = add_task(session, {"id": "r", "type": "io.kestra.plugin.core.debug.Return", "format": "ok"})
    client.put(f"{session}/editing", json={"node_id": node["id"]})

    response = client.put(f"{session}/editing", json={"node_id": None})
    assert response.json()["editing"] is None
    response = client.post(f"{session}/nodes/{node['id']}/playground")
    assert response.json()["status"] == "done"
