import pytest
from flowcanvas.errors import CanvasError, EdgeNotFound, InvalidConnection, NodeNotFound
from flowcanvas.graph import GraphModel
from flowcanvas.schemas import Edge, Node, NodeData, NodeVariant, Position


@pytest.fixture
def graph():
    return GraphModel()


@pytest.fixture
def events(graph):
    received = []
    graph.subscribe(lambda event, payload: received.append((event, payload)))
    return received


def test_connect_and_remove_scenario(graph):
    first = graph.add_node("task", (100, 100), {"id": "log_task_001", "type": ""})
    second = graph.add_node("task", (300, 100))

    edge = graph.connect(first.id, second.id)

    assert edge.source == first.id
    assert edge.target == second.id
    assert graph.edge_count() == 1

    graph.remove_node(first.id)

    assert not graph.has_node(first.id)
    assert graph.edge_count() == 0
    assert graph.node_count() == 1


def test_add_node_seeds_variant_defaults(graph):
    note = graph.add_node(NodeVariant.NOTE, {"x": 0, "y": 0})
    assert note.config["width"] == 240
    assert note.config["height"] == 120
    assert note.config["text"] == "Double click to edit me. Guide"

    task = graph.add_node(NodeVariant.TASK, Position(x=5, y=6), {"id": "hello"})
    assert task.config == {"id": "hello", "type": ""}
    assert task.data.label == "hello"
    assert task.position == Position(x=5, y=6)


def test_node_ids_are_unique_and_prefixed(graph):
    ids = {graph.add_node("task", (0, 0)).id for _ in range(20)}
    assert len(ids) == 20
    assert all(node_id.startswith("task-") for node_id in ids)


def test_node_ids_skip_loaded_ids(graph):
    graph.load([Node(id="task-1", type="task", position=Position(), data=NodeData())], [])
    node = graph.add_node("task", (0, 0))
    assert node.id != "task-1"


def test_unknown_variant_rejected(graph):
    with pytest.raises(CanvasError):
        graph.add_node("bogus", (0, 0))
    assert graph.node_count() == 0


@pytest.mark.parametrize("source,target,allowed", [
    ("task", "task", True),
    ("task", "error", True),
    ("finally", "task", True),
    ("error", "finally", True),
    ("trigger", "task", False),
    ("task", "trigger", False),
    ("input", "task", False),
    ("task", "output", False),
    ("note", "task", False),
    ("task", "note", False),
])
def test_connection_validity_follows_ports(graph, source, target, allowed):
    a = graph.add_node(source, (0, 0))
    b = graph.add_node(target, (100, 0))

    if allowed:
        graph.connect(a.id, b.id)
        assert graph.edge_count() == 1
    else:
        with pytest.raises(InvalidConnection):
            graph.connect(a.id, b.id)
        assert graph.edge_count() == 0


def test_connect_missing_endpoint(graph):
    a = graph.add_node("task", (0, 0))
    with pytest.raises(InvalidConnection):
        graph.connect(a.id, "task-999")
    with pytest.raises(InvalidConnection):
        graph.connect("task-999", a.id)
    assert graph.edge_count() == 0


def test_connect_same_pair_twice_keeps_one_edge(graph):
    a = graph.add_node("task", (0, 0))
    b = graph.add_node("task", (100, 0))
    first = graph.connect(a.id, b.id)
    second = graph.connect(a.id, b.id)
    assert first.id == second.id
    assert graph.edge_count() == 1


def test_cascade_delete_removes_only_touching_edges(graph):
    a, b, c, d = (graph.add_node("task", (i * 100, 0)) for i in range(4))
    graph.connect(a.id, b.id)
    graph.connect(b.id, c.id)
    graph.connect(c.id, d.id)
    graph.connect(a.id, d.id)

    removed = graph.remove_node(b.id)

    assert sorted(removed) == sorted([f"e-{a.id}-{b.id}", f"e-{b.id}-{c.id}"])
    assert [(e.source, e.target) for e in graph.edges] == [(c.id, d.id), (a.id, d.id)]


def test_remove_edge(graph):
    a = graph.add_node("task", (0, 0))
    b = graph.add_node("task", (100, 0))
    edge = graph.connect(a.id, b.id)

    graph.remove_edge(edge.id)
    assert graph.edge_count() == 0

    with pytest.raises(EdgeNotFound):
        graph.remove_edge(edge.id)


def test_label_follows_id_until_renamed(graph):
    node = graph.add_node("task", (0, 0), {"id": "log_001", "type": "io.kestra.plugin.core.log.Log"})
    assert node.data.label == node.config["id"]

    node = graph.update_node(node.id, {"config": {**node.config, "id": "log_002"}})
    assert node.data.label == "log_002"

    node = graph.update_node(node.id, {"label": "My logger"})
    node = graph.update_node(node.id, {"config": {**node.config, "id": "log_003"}})
    assert node.data.label == "My logger"
    assert node.config["id"] == "log_003"


def test_update_never_changes_variant(graph):
    node = graph.add_node("task", (0, 0))
    with pytest.raises(CanvasError):
        graph.update_node(node.id, {"type": "note"})
    assert graph.get_node(node.id).type == NodeVariant.TASK


def test_note_resize_only_touches_size(graph):
    note = graph.add_node("note", (0, 0))
    before = note.model_copy(deep=True)

    resized = graph.resize_node(note.id, 400, 300)

    assert resized.config["width"] == 400
    assert resized.config["height"] == 300
    assert resized.type == before.type
    assert resized.position == before.position
    assert resized.data.label == before.data.label
    for key in ("text", "color"):
        assert resized.config[key] == before.config[key]


def test_only_notes_resize(graph):
    task = graph.add_node("task", (0, 0))
    with pytest.raises(CanvasError):
        graph.resize_node(task.id, 400, 300)


def test_update_keeps_note_size(graph):
    note = graph.add_node("note", (0, 0))
    graph.resize_node(note.id, 500, 200)
    updated = graph.update_node(note.id, {"config": {"text": "hi", "color": "#FDE047", "width": 1, "height": 1}})
    assert updated.config["width"] == 500
    assert updated.config["height"] == 200
    assert updated.config["text"] == "hi"


def test_selection_cleared_on_remove(graph):
    node = graph.add_node("task", (0, 0))
    graph.set_selected(node.id)
    graph.set_editing(node.id)

    graph.remove_node(node.id)

    assert graph.selected is None
    assert graph.editing is None


def test_select_missing_node(graph):
    with pytest.raises(NodeNotFound):
        graph.set_selected("task-42")
    with pytest.raises(NodeNotFound):
        graph.set_editing("task-42")


def test_delete_selected(graph):
    node = graph.add_node("task", (0, 0))
    assert graph.delete_selected() is False
    graph.set_selected(node.id)
    assert graph.delete_selected() is True
    assert graph.node_count() == 0


def test_mutations_notify_but_view_state_does_not(graph, events):
    node = graph.add_node("task", (0, 0))
    graph.set_selected(node.id)
    graph.set_editing(node.id)
    graph.move_node(node.id, (10, 20))

    assert [e for e, _ in events] == ["node_added", "node_moved"]


def test_unsubscribe(graph):
    received = []
    unsubscribe = graph.subscribe(lambda event, payload: received.append(event))
    graph.add_node("task", (0, 0))
    unsubscribe()
    graph.add_node("task", (0, 0))
    assert received == ["node_added"]


def test_failing_listener_does_not_break_mutation(graph):
    def boom(event, payload):
        raise RuntimeError("listener down")

    graph.subscribe(boom)
    node = graph.add_node("task", (0, 0))
    assert graph.has_node(node.id)


def test_accessors_return_copies(graph):
    node = graph.add_node("task", (0, 0))
    graph.nodes[0].data.config["id"] = "mutated"
    graph.get_node(node.id).data.label = "mutated"
    stored = graph.get_node(node.id)
    assert stored.config["id"] == ""
    assert stored.data.label != "mutated"


def test_load_drops_dangling_edges(graph):
    nodes = [Node(id="a", type="task", position=Position(), data=NodeData())]
    edges = [Edge(id="e1", source="a", target="missing")]
    graph.load(nodes, edges)
    assert graph.node_count() == 1
    assert graph.edge_count() == 0


def test_editing_watchers(graph):
    seen = []
    unwatch = graph.watch_editing(seen.append)
    a = graph.add_node("task", (0, 0))
    b = graph.add_node("task", (0, 0))

    graph.set_editing(a.id)
    graph.set_editing(b.id)
    graph.remove_node(b.id)
    unwatch()
    graph.set_editing(a.id)

    assert seen == [a.id, b.id, None]


def test_has_config_id(graph):
    graph.add_node("task", (0, 0), {"id": "fetch", "type": ""})
    assert graph.has_config_id("fetch")
    assert not graph.has_config_id("other")
