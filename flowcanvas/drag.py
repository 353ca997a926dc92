"""
Creating nodes from palette entries, by drag-and-drop or by menu click.

A drag carries three string channels; only the variant channel is required.
Both creation paths seed the node the same way and differ only in where the
node lands.
"""

import logging
import re
from typing import Dict, Optional, Union
import config
from .graph import GraphModel
from .schemas import CanvasBounds, Node, NodeVariant, PaletteItem, Position, Viewport

logger = logging.getLogger(__name__)

VARIANT_CHANNEL = "application/reactflow"
LABEL_CHANNEL = "application/reactflow-label"
PLUGIN_CHANNEL = "application/reactflow-plugin"

DROP_EFFECT = "move"


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", (text or "").lower()).strip("_")


def drag_start(item: PaletteItem) -> Dict[str, str]:
    return {
        VARIANT_CHANNEL: item.type.value,
        LABEL_CHANNEL: item.label,
        PLUGIN_CHANNEL: item.pluginType,
    }


def drag_over(transfer: Optional[Dict[str, str]] = None) -> str:
    # Hover feedback only, the graph is never touched here
    return DROP_EFFECT


def seed_config(graph: GraphModel, variant: NodeVariant, label: str, plugin_type: str) -> Dict[str, str]:
    """Config overrides applied on top of the variant defaults for a new node."""
    caps = graph.registry.get(variant)
    if caps.has_plugin_type or variant in (NodeVariant.INPUT, NodeVariant.OUTPUT):
        prefix = slugify(label) or variant.value
        config_id = f"{prefix}_{graph.new_token():03d}"
        # Config ids stay unique, loaded nodes included
        while graph.has_config_id(config_id):
            config_id = f"{prefix}_{graph.new_token():03d}"
        if caps.has_plugin_type:
            return {"id": config_id, "type": plugin_type or ""}
        return {"id": config_id}
    return {}


def create_node(
    graph: GraphModel,
    variant: Union[NodeVariant, str],
    label: Optional[str],
    plugin_type: Optional[str],
    position: Position,
) -> Node:
    resolved = graph.registry.resolve(variant)
    label = label or resolved.value
    initial = seed_config(graph, resolved, label, plugin_type or "")
    return graph.add_node(resolved, position, initial, label=label)


def to_canvas_position(
    client_x: float,
    client_y: float,
    bounds: Optional[CanvasBounds] = None,
    viewport: Optional[Viewport] = None,
) -> Position:
    bounds = bounds or CanvasBounds()
    x = client_x - bounds.left
    y = client_y - bounds.top
    if viewport:
        zoom = viewport.zoom or 1.0
        x = (x - viewport.x) / zoom
        y = (y - viewport.y) / zoom
    return Position(x=x, y=y)


def drop(
    graph: GraphModel,
    transfer: Dict[str, str],
    client_x: float,
    client_y: float,
    bounds: Optional[CanvasBounds] = None,
    viewport: Optional[Viewport] = None,
) -> Optional[Node]:
    """Create the dragged node under the pointer.

    Returns None without touching the graph when the transfer has no variant
    or names a variant the registry does not know.
    """
    variant = (transfer or {}).get(VARIANT_CHANNEL)
    if not variant:
        return None
    if not graph.registry.is_known(variant):
        logger.warning(f"Ignoring drop of unknown node type '{variant}'")
        return None

    position = to_canvas_position(client_x, client_y, bounds, viewport)
    return create_node(graph, variant, transfer.get(LABEL_CHANNEL), transfer.get(PLUGIN_CHANNEL), position)


def add_from_menu(graph: GraphModel, item: PaletteItem, position: Optional[Position] = None) -> Node:
    position = position or Position(**config.DEFAULT_NODE_POSITION)
    return create_node(graph, item.type, item.label, item.pluginType, position)
