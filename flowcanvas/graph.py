"""
In-memory node graph of one canvas editing session.

The model owns nodes, edges and the selection/editing slots. Every structural
mutation runs to completion synchronously and then notifies the subscribers
(auto-save, websocket relays, tests). Selection and editing are view state and
do not notify; editing watchers (the playground) hear about the editing slot
separately.
"""

import itertools
import logging
from copy import deepcopy
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
from .errors import CanvasError, EdgeNotFound, InvalidConnection, NodeNotFound
from .node_registry import NodeVariantRegistry, registry
from .nodes.note import SIZE_FIELDS
from .schemas import Edge, Node, NodeData, NodeVariant, Position

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str, Dict[str, Any]], None]
EditingCallback = Callable[[Optional[str]], None]
PositionLike = Union[Position, Dict[str, float], tuple, list]


def to_position(position: PositionLike) -> Position:
    if isinstance(position, Position):
        return position.model_copy()
    if isinstance(position, dict):
        return Position(**position)
    x, y = position
    return Position(x=x, y=y)


class GraphModel:
    def __init__(
        self,
        nodes: Optional[Iterable[Node]] = None,
        edges: Optional[Iterable[Edge]] = None,
        variant_registry: Optional[NodeVariantRegistry] = None,
    ):
        self.registry = variant_registry or registry
        self._nodes: List[Node] = []
        self._edges: List[Edge] = []
        self._counter = itertools.count(1)
        self._listeners: List[ChangeCallback] = []
        self._editing_listeners: List[EditingCallback] = []
        self.selected: Optional[str] = None
        self.editing: Optional[str] = None
        if nodes or edges:
            self.load(nodes or [], edges or [], notify=False)

    # --- Subscriptions ---

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, event: str, payload: Dict[str, Any]):
        for callback in list(self._listeners):
            try:
                callback(event, payload)
            except Exception as e:
                logger.error(f"Change listener failed on {event}: {e}")

    def watch_editing(self, callback: EditingCallback) -> Callable[[], None]:
        """Call ``callback(node_id)`` whenever the editing slot is set or cleared."""
        self._editing_listeners.append(callback)

        def unwatch():
            if callback in self._editing_listeners:
                self._editing_listeners.remove(callback)

        return unwatch

    def _set_editing(self, node_id: Optional[str]):
        self.editing = node_id
        for callback in list(self._editing_listeners):
            try:
                callback(node_id)
            except Exception as e:
                logger.error(f"Editing listener failed for {node_id}: {e}")

    # --- Lookups ---

    def _find(self, node_id: str) -> Node:
        for node in self._nodes:
            if node.id == node_id:
                return node
        raise NodeNotFound(node_id)

    def has_node(self, node_id: Optional[str]) -> bool:
        return any(node.id == node_id for node in self._nodes)

    def has_config_id(self, config_id: str) -> bool:
        return any(node.data.config.get("id") == config_id for node in self._nodes)

    def get_node(self, node_id: str) -> Node:
        return self._find(node_id).model_copy(deep=True)

    def get_edge(self, edge_id: str) -> Edge:
        for edge in self._edges:
            if edge.id == edge_id:
                return edge.model_copy()
        raise EdgeNotFound(edge_id)

    @property
    def nodes(self) -> List[Node]:
        return [node.model_copy(deep=True) for node in self._nodes]

    @property
    def edges(self) -> List[Edge]:
        return [edge.model_copy() for edge in self._edges]

    def node_count(self) -> int:
        return len(self._nodes)

    def edge_count(self) -> int:
        return len(self._edges)

    def edges_for(self, node_id: str) -> List[Edge]:
        return [e.model_copy() for e in self._edges if e.source == node_id or e.target == node_id]

    @property
    def selected_node(self) -> Optional[Node]:
        return self.get_node(self.selected) if self.selected else None

    @property
    def editing_node(self) -> Optional[Node]:
        return self.get_node(self.editing) if self.editing else None

    # --- Id generation ---

    def new_token(self) -> int:
        return next(self._counter)

    def _next_node_id(self, variant: NodeVariant) -> str:
        while True:
            node_id = f"{variant.value}-{self.new_token()}"
            if not self.has_node(node_id):
                return node_id

    # --- Node mutations ---

    def add_node(
        self,
        variant: Union[NodeVariant, str],
        position: PositionLike,
        initial_config: Optional[Dict[str, Any]] = None,
        label: Optional[str] = None,
    ) -> Node:
        caps = self.registry.get(variant)
        node_config = caps.default_config()
        node_config.update(deepcopy(initial_config or {}))

        if label is None:
            label = node_config.get("id") or caps.variant.value

        node = Node(
            id=self._next_node_id(caps.variant),
            type=caps.variant,
            position=to_position(position),
            data=NodeData(label=label, config=node_config),
        )
        self._nodes.append(node)
        logger.info(f"Added node {node.id} at ({node.position.x}, {node.position.y})")
        self._notify("node_added", {"node_id": node.id})
        return node.model_copy(deep=True)

    def update_node(self, node_id: str, partial_data: Dict[str, Any]) -> Node:
        """Merge ``partial_data`` (``label`` and/or ``config``) into a node's data.

        A given ``config`` replaces the previous one. When the config id
        changes and the label still equals the old id, the label follows the
        new id; a label the user renamed is never touched again.
        """
        node = self._find(node_id)
        unknown = set(partial_data) - {"label", "config"}
        if unknown:
            raise CanvasError(f"Cannot update {', '.join(sorted(unknown))} of node {node_id}")

        old_config = node.data.config
        label = node.data.label
        new_config = old_config

        if "config" in partial_data:
            new_config = deepcopy(partial_data["config"] or {})
            if self.registry.get(node.type).is_resizable:
                for key in SIZE_FIELDS:
                    if key in old_config:
                        new_config[key] = old_config[key]
                    else:
                        new_config.pop(key, None)
            old_id = old_config.get("id")
            new_id = new_config.get("id")
            if new_id != old_id and label == old_id:
                label = new_id if new_id is not None else ""

        if "label" in partial_data:
            label = partial_data["label"]

        node.data = NodeData(label=label, config=new_config)
        self._notify("node_updated", {"node_id": node_id})
        return node.model_copy(deep=True)

    def move_node(self, node_id: str, position: PositionLike) -> Node:
        node = self._find(node_id)
        node.position = to_position(position)
        self._notify("node_moved", {"node_id": node_id})
        return node.model_copy(deep=True)

    def resize_node(self, node_id: str, width: float, height: float) -> Node:
        node = self._find(node_id)
        if not self.registry.get(node.type).is_resizable:
            raise CanvasError(f"Node {node_id} ({node.type.value}) cannot be resized")
        if width <= 0 or height <= 0:
            raise CanvasError(f"Invalid size {width}x{height} for node {node_id}")
        node.data.config["width"] = width
        node.data.config["height"] = height
        self._notify("node_resized", {"node_id": node_id})
        return node.model_copy(deep=True)

    def remove_node(self, node_id: str) -> List[str]:
        """Remove a node and every edge touching it. Returns the removed edge ids."""
        node = self._find(node_id)
        self._nodes.remove(node)
        removed = [e.id for e in self._edges if e.source == node_id or e.target == node_id]
        self._edges = [e for e in self._edges if e.source != node_id and e.target != node_id]
        if self.selected == node_id:
            self.selected = None
        if self.editing == node_id:
            self._set_editing(None)
        logger.info(f"Removed node {node_id} and {len(removed)} edge(s)")
        self._notify("node_removed", {"node_id": node_id, "edge_ids": removed})
        return removed

    def delete_selected(self) -> bool:
        if not self.selected:
            return False
        self.remove_node(self.selected)
        return True

    # --- Edge mutations ---

    def connect(
        self,
        source_id: str,
        target_id: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
    ) -> Edge:
        if not self.has_node(source_id):
            raise InvalidConnection(source_id, target_id, f"source {source_id} does not exist")
        if not self.has_node(target_id):
            raise InvalidConnection(source_id, target_id, f"target {target_id} does not exist")

        source = self._find(source_id)
        target = self._find(target_id)
        if not self.registry.get(source.type).has_output_port:
            raise InvalidConnection(source_id, target_id, f"{source.type.value} nodes have no output port")
        if not self.registry.get(target.type).has_input_port:
            raise InvalidConnection(source_id, target_id, f"{target.type.value} nodes have no input port")

        for edge in self._edges:
            if edge.source == source_id and edge.target == target_id:
                return edge.model_copy()

        edge = Edge(
            id=f"e-{source_id}-{target_id}",
            source=source_id,
            target=target_id,
            sourceHandle=source_handle,
            targetHandle=target_handle,
        )
        self._edges.append(edge)
        logger.info(f"Connected {source_id} -> {target_id}")
        self._notify("edge_added", {"edge_id": edge.id})
        return edge.model_copy()

    def remove_edge(self, edge_id: str):
        edge = self.get_edge(edge_id)
        self._edges = [e for e in self._edges if e.id != edge_id]
        self._notify("edge_removed", {"edge_id": edge.id})

    # --- View state ---

    def set_selected(self, node_id: Optional[str]):
        if node_id is not None and not self.has_node(node_id):
            raise NodeNotFound(node_id)
        self.selected = node_id

    def set_editing(self, node_id: Optional[str]):
        if node_id is not None and not self.has_node(node_id):
            raise NodeNotFound(node_id)
        self._set_editing(node_id)

    # --- Whole-graph replacement ---

    def load(self, nodes: Iterable[Node], edges: Iterable[Edge], notify: bool = True):
        self._nodes = [node.model_copy(deep=True) for node in nodes]
        self._edges = []
        for edge in edges:
            if not (self.has_node(edge.source) and self.has_node(edge.target)):
                logger.warning(f"Dropping edge {edge.id}: endpoint missing ({edge.source} -> {edge.target})")
                continue
            self._edges.append(edge.model_copy())
        self.selected = None
        self._set_editing(None)
        if notify:
            self._notify("graph_loaded", {"nodes": len(self._nodes), "edges": len(self._edges)})
