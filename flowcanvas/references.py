import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import config
from .catalog import get_task_metadata
from .graph import GraphModel
from .schemas import ConnectedInput, ContextEntry, ReferenceOutput

logger = logging.getLogger(__name__)


def format_reference(path: str) -> str:
    """Expression token dropped into a property field."""
    return f"{{{{ {path} }}}}"


def connected_inputs(graph: GraphModel, node_id: str) -> List[ConnectedInput]:
    """Upstream nodes of ``node_id`` and the outputs they expose."""
    graph.get_node(node_id)
    result = []
    for edge in graph.edges:
        if edge.target != node_id:
            continue
        source = graph.get_node(edge.source)
        task_id = source.config.get("id") or source.data.label
        metadata = get_task_metadata(source.config.get("type"))
        outputs = []
        for output in (metadata.outputs if metadata else []):
            path = f"outputs.{task_id}.{output.name}"
            outputs.append(ReferenceOutput(name=output.name, type=output.type, path=path,
                                           token=format_reference(path)))
        result.append(ConnectedInput(
            taskId=task_id,
            label=source.data.label,
            nodeType=source.type,
            outputs=outputs,
            hasOutputs=bool(outputs),
        ))
    return result


def execution_context(context: Optional[Dict[str, Any]] = None) -> List[ContextEntry]:
    context = {**config.DEFAULT_EXECUTION_CONTEXT, **(context or {})}
    start_date = context.get("startDate") or datetime.now(timezone.utc).isoformat()
    rows = [
        ("execution.id", "String", context.get("id")),
        ("execution.startDate", "DateTime", start_date),
        ("flow.id", "String", context.get("flowId")),
        ("flow.namespace", "String", context.get("namespace")),
    ]
    return [ContextEntry(name=name, type=kind, value=value, token=format_reference(name))
            for name, kind, value in rows]
