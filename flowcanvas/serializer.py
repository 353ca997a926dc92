"""
Flow document conversion and auto-save.

to_flow/from_flow are exact inverses over ids, positions, configs, edges and
flow properties. The serializer performs no I/O: AutoSaver hands documents to
an ``on_save`` callback owned by the host.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
import config
from .graph import GraphModel
from .schemas import Edge, FlowCanvasData, FlowDocument, FlowProperties, Node, Viewport

logger = logging.getLogger(__name__)

PropertiesLike = Union[FlowProperties, Dict[str, Any], None]
SaveCallback = Callable[[FlowCanvasData, FlowProperties], None]


def _properties(properties: PropertiesLike) -> FlowProperties:
    if properties is None:
        return FlowProperties()
    if isinstance(properties, FlowProperties):
        return properties.model_copy(deep=True)
    return FlowProperties.model_validate(properties)


def to_flow(graph: GraphModel, properties: PropertiesLike = None, viewport: Optional[Viewport] = None) -> FlowDocument:
    return FlowDocument(
        data=FlowCanvasData(nodes=graph.nodes, edges=graph.edges, viewport=viewport),
        properties=_properties(properties),
    )


def from_flow(document: Union[FlowDocument, Dict[str, Any]]) -> Tuple[List[Node], List[Edge], FlowProperties]:
    if not isinstance(document, FlowDocument):
        document = FlowDocument.model_validate(document)
    data = document.data
    return (
        [node.model_copy(deep=True) for node in data.nodes],
        [edge.model_copy() for edge in data.edges],
        document.properties.model_copy(deep=True),
    )


def load_flow(graph: GraphModel, document: Union[FlowDocument, Dict[str, Any]]) -> FlowProperties:
    nodes, edges, properties = from_flow(document)
    graph.load(nodes, edges)
    return properties


def to_json(document: FlowDocument, indent: Optional[int] = None) -> str:
    return document.model_dump_json(indent=indent)


def from_json(payload: Union[str, bytes]) -> FlowDocument:
    return FlowDocument.model_validate_json(payload)


class AutoSaver:
    """Hands a fresh document to ``on_save`` after graph changes.

    With no debounce every change is saved synchronously. With a debounce the
    save is a one-shot APScheduler job that each new change replaces, so a
    burst of edits produces a single document of the final state.
    """

    JOB_ID = "autosave"

    def __init__(
        self,
        graph: GraphModel,
        properties_getter: Callable[[], PropertiesLike],
        on_save: SaveCallback,
        debounce: Optional[float] = None,
    ):
        self.graph = graph
        self.properties_getter = properties_getter
        self.on_save = on_save
        self.debounce = config.AUTOSAVE_DEBOUNCE_SECONDS if debounce is None else debounce
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.save_count = 0
        self.last_document: Optional[FlowDocument] = None
        self._unsubscribe = graph.subscribe(self._on_change)

    def _on_change(self, event: str, payload: Dict[str, Any]):
        if self.debounce <= 0:
            self.save()
            return
        self._schedule()

    def _schedule(self):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, saving without debounce")
            self.save()
            return

        if self.scheduler is not None and self._loop is not loop:
            # Jobs of a scheduler bound to another loop would never fire
            if self.has_pending():
                self.save()
            self._stop_scheduler()

        if self.scheduler is None:
            self.scheduler = AsyncIOScheduler(event_loop=loop)
            self._loop = loop
            self.scheduler.start()
            logger.info("Auto-save scheduler started")

        run_date = datetime.now(timezone.utc) + timedelta(seconds=self.debounce)
        self.scheduler.add_job(
            self._flush,
            DateTrigger(run_date=run_date),
            id=self.JOB_ID,
            replace_existing=True,
        )

    def has_pending(self) -> bool:
        return bool(self.scheduler and self.scheduler.get_job(self.JOB_ID))

    def _cancel_pending(self):
        if self.has_pending():
            self.scheduler.remove_job(self.JOB_ID)

    async def _flush(self):
        try:
            self.save()
        except Exception as e:
            logger.error(f"Auto-save failed: {e}")

    def save(self) -> FlowDocument:
        """Serialise the current graph and hand it off right away."""
        self._cancel_pending()
        document = to_flow(self.graph, self.properties_getter())
        self.on_save(document.data, document.properties)
        self.save_count += 1
        self.last_document = document
        return document

    def close(self, flush: bool = True):
        if flush and self.has_pending():
            self.save()
        self._unsubscribe()
        self._stop_scheduler()

    def _stop_scheduler(self):
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Auto-save scheduler stopped")
        self.scheduler = None
        self._loop = None
