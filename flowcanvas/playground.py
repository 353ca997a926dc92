"""
Playground preview runs.

A run produces a transient PlaygroundExecutionData for one node. Results live
on the simulator only and are never written into the graph. Each node has at
most one run in flight; a second request while it runs is ignored.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set
from pocketflow import AsyncNode
import config
from .catalog import OUTPUT_NODE_PLUGIN
from .errors import CanvasError
from .graph import GraphModel
from .schemas import Node, NodeVariant, PlaygroundExecutionData

logger = logging.getLogger(__name__)

RUNNABLE_VARIANTS = (NodeVariant.TASK, NodeVariant.ERROR, NodeVariant.FINALLY, NodeVariant.OUTPUT)

SCRIPT_PLUGINS = (
    "io.kestra.plugin.scripts.python.Script",
    "io.kestra.plugin.scripts.node.Script",
    "io.kestra.plugin.scripts.shell.Script",
    "io.kestra.plugin.scripts.powershell.Script",
)

PlaygroundCallback = Callable[[str], Awaitable[Any]]


def _duration(latency: float) -> str:
    return f"PT{latency:g}S"


def _mock_log(node: Node, latency: float) -> Dict[str, Any]:
    level = node.config.get("level", "INFO")
    return {
        "outputs": {},
        "metrics": {"duration": _duration(latency)},
        "logs": [f"[{level}] {node.config.get('message', '')}"],
    }


def _mock_return(node: Node, latency: float) -> Dict[str, Any]:
    value = str(node.config.get("format", ""))
    return {
        "outputs": {"value": value},
        "metrics": {"duration": _duration(latency), "length": len(value)},
        "logs": [f"[INFO] Returned {len(value)} characters"],
    }


def _mock_http(node: Node, latency: float) -> Dict[str, Any]:
    uri = node.config.get("uri", "")
    method = node.config.get("method", "GET")
    return {
        "outputs": {"code": 200, "uri": uri, "headers": {"content-type": ["application/json"]}, "body": "{}"},
        "metrics": {"duration": _duration(latency), "response.length": 2},
        "logs": [f"[INFO] {method} {uri} -> 200"],
    }


def _mock_script(node: Node, latency: float) -> Dict[str, Any]:
    return {
        "outputs": {"exitCode": 0, "vars": {}},
        "metrics": {"duration": _duration(latency)},
        "logs": ["[INFO] Script exited with code 0"],
    }


def _mock_output(node: Node, latency: float) -> Dict[str, Any]:
    output_id = node.config.get("id") or node.data.label
    return {
        "outputs": {output_id: node.config.get("value")},
        "metrics": {},
        "logs": [f"[INFO] Output {output_id} resolved"],
    }


def _mock_generic(node: Node, latency: float) -> Dict[str, Any]:
    return {
        "outputs": {"status": "SUCCESS"},
        "metrics": {"duration": _duration(latency)},
        "logs": [f"[INFO] {node.config.get('type') or node.type.value} completed"],
    }


MOCK_RESULTS: Dict[str, Callable[[Node, float], Dict[str, Any]]] = {
    "io.kestra.plugin.core.log.Log": _mock_log,
    "io.kestra.plugin.core.debug.Return": _mock_return,
    "io.kestra.plugin.core.http.Request": _mock_http,
    OUTPUT_NODE_PLUGIN: _mock_output,
}
MOCK_RESULTS.update({plugin: _mock_script for plugin in SCRIPT_PLUGINS})


class MockTaskExecutor(AsyncNode):
    """Fakes a task run: waits for the configured latency, then answers by plugin type."""

    def __init__(self, latency: Optional[float] = None):
        super().__init__()
        self.latency = config.PLAYGROUND_LATENCY_SECONDS if latency is None else latency

    async def prep_async(self, shared):
        return shared["node"]

    async def exec_async(self, node: Node):
        await asyncio.sleep(self.latency)
        plugin_type = OUTPUT_NODE_PLUGIN if node.type == NodeVariant.OUTPUT else node.config.get("type", "")
        handler = MOCK_RESULTS.get(plugin_type, _mock_generic)
        return PlaygroundExecutionData(**handler(node, self.latency))

    async def post_async(self, shared, prep_res, exec_res):
        if "results" not in shared:
            shared["results"] = {}
        shared["results"][prep_res.id] = exec_res
        return None


class PlaygroundSimulator:
    def __init__(
        self,
        graph: GraphModel,
        on_playground_run: Optional[PlaygroundCallback] = None,
        latency: Optional[float] = None,
    ):
        self.graph = graph
        self.on_playground_run = on_playground_run
        self.latency = latency
        self.results: Dict[str, PlaygroundExecutionData] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._cancelled: Set[str] = set()
        self._closed = False
        self._unwatch = graph.watch_editing(self._panel_moved)

    def is_running(self, node_id: str) -> bool:
        task = self._tasks.get(node_id)
        return task is not None and not task.done()

    async def _execute(self, node: Node) -> PlaygroundExecutionData:
        if self.on_playground_run is not None:
            data = await self.on_playground_run(node.id)
            if isinstance(data, PlaygroundExecutionData):
                return data
            return PlaygroundExecutionData.model_validate(data or {})

        shared = {"node": node}
        await MockTaskExecutor(self.latency).run_async(shared)
        return shared["results"][node.id]

    async def run(self, node_id: str) -> Optional[PlaygroundExecutionData]:
        """Run a preview for one node.

        Returns None when a run for the node is already in flight or when the
        run fails; failures are logged and leave no result behind.
        """
        if self._closed:
            raise CanvasError("Playground is closed")
        node = self.graph.get_node(node_id)
        if node.type not in RUNNABLE_VARIANTS:
            raise CanvasError(f"{node.type.value} nodes cannot be run in the playground")
        if self.is_running(node_id):
            logger.warning(f"Playground run for {node_id} already in progress, ignoring")
            return None

        logger.info(f"Playground run started for {node_id}")
        task = asyncio.create_task(self._execute(node))
        self._tasks[node_id] = task
        try:
            data = await task
        except asyncio.CancelledError:
            if node_id not in self._cancelled and not self._closed:
                raise
            logger.info(f"Playground run for {node_id} cancelled")
            return None
        except Exception as e:
            logger.error(f"Playground execution failed for {node_id}: {e}")
            self.results.pop(node_id, None)
            return None
        finally:
            if self._tasks.get(node_id) is task:
                del self._tasks[node_id]
                self._cancelled.discard(node_id)

        self.results[node_id] = data
        logger.info(f"Playground run finished for {node_id}")
        return data

    def get_result(self, node_id: str) -> Optional[PlaygroundExecutionData]:
        return self.results.get(node_id)

    def cancel(self, node_id: str) -> bool:
        """Cancel the run in flight for ``node_id``. Returns False when there is none."""
        task = self._tasks.get(node_id)
        if task is None or task.done():
            return False
        self._cancelled.add(node_id)
        task.cancel()
        logger.info(f"Cancelling playground run for {node_id}")
        return True

    def cancel_all(self) -> List[str]:
        return [node_id for node_id in list(self._tasks) if self.cancel(node_id)]

    def _panel_moved(self, editing: Optional[str]):
        for node_id in list(self._tasks):
            if node_id != editing:
                self.cancel(node_id)

    async def close(self):
        """Cancel in-flight runs and drop every transient result."""
        self._closed = True
        self._unwatch()
        tasks = list(self._tasks.values())
        self.cancel_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self.results.clear()
