import logging
from typing import Optional
from .graph import GraphModel

logger = logging.getLogger(__name__)


class SidePanelNavigator:
    """Moves the side panel along edges.

    Only the editing slot changes; the selection and the graph stay as they
    are. With several incoming or outgoing edges the first one in edge order
    wins.
    """

    def __init__(self, graph: GraphModel):
        self.graph = graph

    def previous_task(self, node_id: str) -> Optional[str]:
        self.graph.get_node(node_id)
        return next((e.source for e in self.graph.edges if e.target == node_id), None)

    def next_task(self, node_id: str) -> Optional[str]:
        self.graph.get_node(node_id)
        return next((e.target for e in self.graph.edges if e.source == node_id), None)

    def go_previous(self) -> Optional[str]:
        return self._go(self.previous_task)

    def go_next(self) -> Optional[str]:
        return self._go(self.next_task)

    def _go(self, step) -> Optional[str]:
        current = self.graph.editing
        if current is None:
            return None
        target = step(current)
        if target is None:
            return None
        self.graph.set_editing(target)
        logger.info(f"Side panel moved from {current} to {target}")
        return target
