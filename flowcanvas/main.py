from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from typing import List, Optional
import uvicorn
import logging
from .catalog import get_task_metadata, metadata_for_node
from .drag import add_from_menu, drop
from .errors import EdgeNotFound, NodeNotFound, SessionNotFound
from .exporter import export_yaml
from .node_registry import registry
from .palette import get_palette_item, search_palette
from .properties import PropertiesDraft, build_form
from .references import connected_inputs, execution_context
from .schemas import (
    CreateSessionRequest, DropRequest, EdgeCreate, FlowProperties, MenuRequest, NavigateRequest,
    NodeCreate, NodeUpdate, PaletteItem, Position, PropertiesCommit, SizeUpdate, SlotUpdate,
    TaskMetadata, VariantMetadata,
)
from .session_manager import SessionManager

# Setup Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Flow Canvas")

session_manager = SessionManager()


@app.on_event("shutdown")
async def shutdown_event():
    for name in session_manager.list_sessions():
        await session_manager.get_session(name).close()


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _http_error(e: ValueError) -> HTTPException:
    status = 404 if isinstance(e, (NodeNotFound, EdgeNotFound, SessionNotFound)) else 400
    return HTTPException(status_code=status, detail=str(e))


def _session(name: str):
    try:
        return session_manager.get_session(name)
    except ValueError as e:
        raise _http_error(e)


@app.get("/")
def read_root():
    return {"message": "Flow Canvas API"}


# --- CATALOG ENDPOINTS ---

@app.get("/api/variants", response_model=List[VariantMetadata])
def get_variants():
    return registry.get_all_metadata()


@app.get("/api/palette", response_model=List[PaletteItem])
def get_palette(query: str = "", group: Optional[str] = None):
    return search_palette(query, group)


@app.get("/api/task-metadata/{plugin_type:path}", response_model=TaskMetadata)
def get_metadata(plugin_type: str):
    metadata = get_task_metadata(plugin_type)
    if metadata is None:
        raise HTTPException(status_code=404, detail="Task metadata not found")
    return metadata


# --- SESSION ENDPOINTS ---

@app.get("/api/sessions")
def list_sessions():
    return session_manager.list_sessions()


@app.post("/api/sessions")
async def create_session(request: CreateSessionRequest):
    try:
        session_manager.create_session(request.name, request.document)
    except ValueError as e:
        raise _http_error(e)
    return {"status": "created", "name": request.name}


@app.get("/api/sessions/{name}")
def get_session(name: str):
    return _session(name).document()


@app.get("/api/sessions/{name}/saved")
def get_saved(name: str):
    saved = _session(name).saved
    if saved is None:
        raise HTTPException(status_code=404, detail="Nothing saved yet")
    return saved


@app.delete("/api/sessions/{name}")
async def delete_session(name: str):
    try:
        await session_manager.delete_session(name)
    except ValueError as e:
        raise _http_error(e)
    return {"status": "deleted", "name": name}


@app.put("/api/sessions/{name}/properties")
async def update_properties(name: str, properties: FlowProperties):
    session = _session(name)
    session.set_properties(properties)
    return session.properties


@app.post("/api/sessions/{name}/save")
async def save_session(name: str):
    return _session(name).autosaver.save()


@app.get("/api/sessions/{name}/export")
def export_session(name: str):
    session = _session(name)
    return PlainTextResponse(export_yaml(session.graph, session.properties), media_type="application/x-yaml")


# --- GRAPH ENDPOINTS ---

@app.post("/api/sessions/{name}/nodes")
async def add_node(name: str, request: NodeCreate):
    session = _session(name)
    try:
        return session.graph.add_node(request.variant, request.position, request.config, request.label)
    except ValueError as e:
        raise _http_error(e)


@app.patch("/api/sessions/{name}/nodes/{node_id}")
async def update_node(name: str, node_id: str, request: NodeUpdate):
    session = _session(name)
    try:
        return session.graph.update_node(node_id, request.model_dump(exclude_unset=True))
    except ValueError as e:
        raise _http_error(e)


@app.put("/api/sessions/{name}/nodes/{node_id}/position")
async def move_node(name: str, node_id: str, position: Position):
    session = _session(name)
    try:
        return session.graph.move_node(node_id, position)
    except ValueError as e:
        raise _http_error(e)


@app.put("/api/sessions/{name}/nodes/{node_id}/size")
async def resize_node(name: str, node_id: str, size: SizeUpdate):
    session = _session(name)
    try:
        return session.graph.resize_node(node_id, size.width, size.height)
    except ValueError as e:
        raise _http_error(e)


@app.delete("/api/sessions/{name}/nodes/{node_id}")
async def remove_node(name: str, node_id: str):
    session = _session(name)
    try:
        removed = session.graph.remove_node(node_id)
    except ValueError as e:
        raise _http_error(e)
    return {"status": "deleted", "node_id": node_id, "edges": removed}


@app.post("/api/sessions/{name}/edges")
async def connect(name: str, request: EdgeCreate):
    session = _session(name)
    try:
        return session.graph.connect(request.source, request.target, request.sourceHandle, request.targetHandle)
    except ValueError as e:
        raise _http_error(e)


@app.delete("/api/sessions/{name}/edges/{edge_id}")
async def remove_edge(name: str, edge_id: str):
    session = _session(name)
    try:
        session.graph.remove_edge(edge_id)
    except ValueError as e:
        raise _http_error(e)
    return {"status": "deleted", "edge_id": edge_id}


@app.put("/api/sessions/{name}/selection")
async def set_selection(name: str, request: SlotUpdate):
    session = _session(name)
    try:
        session.graph.set_selected(request.node_id)
    except ValueError as e:
        raise _http_error(e)
    return {"selected": session.graph.selected}


@app.post("/api/sessions/{name}/selection/delete")
async def delete_selection(name: str):
    session = _session(name)
    return {"deleted": session.graph.delete_selected()}


@app.put("/api/sessions/{name}/editing")
async def set_editing(name: str, request: SlotUpdate):
    session = _session(name)
    try:
        session.graph.set_editing(request.node_id)
    except ValueError as e:
        raise _http_error(e)
    return {"editing": session.graph.editing}


@app.post("/api/sessions/{name}/navigate")
async def navigate(name: str, request: NavigateRequest):
    session = _session(name)
    try:
        if request.direction == "previous":
            session.navigator.go_previous()
        else:
            session.navigator.go_next()
    except ValueError as e:
        raise _http_error(e)
    return {"editing": session.graph.editing, "selected": session.graph.selected}


# --- CREATION ENDPOINTS ---

@app.post("/api/sessions/{name}/drop")
async def drop_node(name: str, request: DropRequest):
    session = _session(name)
    node = drop(session.graph, request.transfer, request.clientX, request.clientY, request.bounds, request.viewport)
    return {"node": node}


@app.post("/api/sessions/{name}/menu")
async def add_menu_node(name: str, request: MenuRequest):
    session = _session(name)
    item = get_palette_item(request.item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Palette item not found")
    return add_from_menu(session.graph, item)


# --- SIDE PANEL ENDPOINTS ---

@app.get("/api/sessions/{name}/nodes/{node_id}/form")
def get_form(name: str, node_id: str):
    session = _session(name)
    try:
        node = session.graph.get_node(node_id)
        draft = PropertiesDraft(session.graph, node_id)
    except ValueError as e:
        raise _http_error(e)
    return {
        "fields": build_form(node),
        "values": node.config,
        "label": node.data.label,
        "customYaml": draft.custom_properties_yaml() if registry.get(node.type).has_plugin_type else "",
        "metadata": metadata_for_node(node),
    }


@app.post("/api/sessions/{name}/nodes/{node_id}/properties")
async def commit_properties(name: str, node_id: str, request: PropertiesCommit):
    session = _session(name)
    try:
        draft = PropertiesDraft(session.graph, node_id)
        draft.set_many(request.values)
        for field, token in request.references.items():
            draft.drop_reference(field, token)
        if request.customYaml is not None:
            draft.set_custom_properties_yaml(request.customYaml)
        if request.label is not None:
            draft.set_label(request.label)
        return draft.commit()
    except ValueError as e:
        raise _http_error(e)


@app.get("/api/sessions/{name}/nodes/{node_id}/inputs")
def get_inputs(name: str, node_id: str):
    session = _session(name)
    try:
        inputs = connected_inputs(session.graph, node_id)
    except ValueError as e:
        raise _http_error(e)
    return {"connected": inputs, "context": execution_context()}


@app.post("/api/sessions/{name}/nodes/{node_id}/playground")
async def run_playground(name: str, node_id: str):
    session = _session(name)
    try:
        if session.playground.is_running(node_id):
            return {"status": "running", "result": None}
        result = await session.playground.run(node_id)
    except ValueError as e:
        raise _http_error(e)
    return {"status": "done" if result is not None else "failed", "result": result}


# Log Buffer
log_buffer = []


class ListHandler(logging.Handler):
    def emit(self, record):
        log_buffer.append(self.format(record))
        if len(log_buffer) > 100:
            log_buffer.pop(0)


handler = ListHandler()
formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
handler.setFormatter(formatter)
logging.getLogger().addHandler(handler)


@app.get("/api/logs")
def get_logs():
    return log_buffer


if __name__ == "__main__":
    uvicorn.run("flowcanvas.main:app", host="0.0.0.0", port=8000, reload=True, timeout_keep_alive=300)
