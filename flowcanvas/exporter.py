"""
Flow definition export.

Groups node configs the way a flow definition lists them: inputs, tasks,
triggers, errors, finally and outputs. Tasks follow the edge topology.
"""

import logging
from collections import deque
from typing import Any, Dict, List
import yaml
from .graph import GraphModel
from .schemas import FlowProperties, Node, NodeVariant

logger = logging.getLogger(__name__)

# Definition key per variant, in output order
SECTIONS = [
    ("inputs", NodeVariant.INPUT),
    ("tasks", NodeVariant.TASK),
    ("triggers", NodeVariant.TRIGGER),
    ("errors", NodeVariant.ERROR),
    ("finally", NodeVariant.FINALLY),
    ("outputs", NodeVariant.OUTPUT),
]


def _clean(config: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in config.items() if v is not None and v != ""}


def order_tasks(nodes: List[Node], edges) -> List[Node]:
    """Topological order over task-to-task edges, ties broken by node order."""
    ids = [n.id for n in nodes]
    by_id = {n.id: n for n in nodes}
    indegree = {node_id: 0 for node_id in ids}
    children: Dict[str, List[str]] = {node_id: [] for node_id in ids}

    for edge in edges:
        if edge.source in by_id and edge.target in by_id and edge.source != edge.target:
            children[edge.source].append(edge.target)
            indegree[edge.target] += 1

    position = {node_id: i for i, node_id in enumerate(ids)}
    ready = deque(node_id for node_id in ids if indegree[node_id] == 0)
    ordered = []
    while ready:
        current = ready.popleft()
        ordered.append(current)
        for child in children[current]:
            indegree[child] -= 1
            if indegree[child] == 0:
                ready.append(child)
        ready = deque(sorted(ready, key=position.get))

    if len(ordered) < len(ids):
        leftover = [node_id for node_id in ids if node_id not in ordered]
        logger.warning(f"Cycle between tasks {leftover}, keeping canvas order for them")
        ordered.extend(leftover)

    return [by_id[node_id] for node_id in ordered]


def build_flow_definition(graph: GraphModel, properties: FlowProperties = None) -> Dict[str, Any]:
    properties = properties or FlowProperties()
    definition: Dict[str, Any] = {"id": properties.id, "namespace": properties.namespace}
    definition.update(properties.model_dump(exclude_none=True, exclude={"id", "namespace"}))
    for key in ("labels", "variables"):
        if not definition.get(key):
            definition.pop(key, None)

    nodes = graph.nodes
    for key, variant in SECTIONS:
        group = [n for n in nodes if n.type == variant]
        if variant == NodeVariant.TASK:
            group = order_tasks(group, graph.edges)
        if group:
            definition[key] = [_clean(n.config) for n in group]

    return definition


def export_yaml(graph: GraphModel, properties: FlowProperties = None) -> str:
    return yaml.dump(build_flow_definition(graph, properties), default_flow_style=False, sort_keys=False)
