import logging
from typing import Dict, List, Optional
from .errors import CanvasError, SessionNotFound
from .graph import GraphModel
from .navigator import SidePanelNavigator
from .playground import PlaygroundSimulator
from .schemas import FlowCanvasData, FlowDocument, FlowProperties, Viewport
from .serializer import AutoSaver, load_flow, to_flow

logger = logging.getLogger(__name__)


class CanvasSession:
    """Everything one open canvas needs: graph, properties, auto-save, side panel, playground."""

    def __init__(self, name: str, document: Optional[FlowDocument] = None, debounce: Optional[float] = None):
        self.name = name
        self.graph = GraphModel()
        self.properties = FlowProperties()
        self.viewport: Optional[Viewport] = None
        if document is not None:
            self.properties = load_flow(self.graph, document)
            self.viewport = document.data.viewport
        self.saved: Optional[FlowDocument] = None
        self.autosaver = AutoSaver(self.graph, lambda: self.properties, self._store, debounce)
        self.navigator = SidePanelNavigator(self.graph)
        self.playground = PlaygroundSimulator(self.graph)

    def _store(self, data: FlowCanvasData, properties: FlowProperties):
        data.viewport = self.viewport
        self.saved = FlowDocument(data=data, properties=properties)

    def document(self) -> FlowDocument:
        return to_flow(self.graph, self.properties, self.viewport)

    def set_properties(self, properties: FlowProperties):
        self.properties = properties
        self.autosaver.save()

    async def close(self):
        self.autosaver.close()
        await self.playground.close()


class SessionManager:
    def __init__(self, debounce: Optional[float] = None):
        self.debounce = debounce
        self.sessions: Dict[str, CanvasSession] = {}
        self.default_session = "default"
        self.create_session(self.default_session)

    def create_session(self, name: str, document: Optional[FlowDocument] = None) -> CanvasSession:
        if not name:
            raise CanvasError("Session name is required")
        if name in self.sessions:
            if document is not None:
                raise CanvasError(f"Session {name} already exists")
            return self.sessions[name]
        session = CanvasSession(name, document, self.debounce)
        self.sessions[name] = session
        logger.info(f"Created session: {name}")
        return session

    def list_sessions(self) -> List[str]:
        return list(self.sessions)

    def get_session(self, name: str) -> CanvasSession:
        session = self.sessions.get(name)
        if session is None:
            raise SessionNotFound(name)
        return session

    async def delete_session(self, name: str):
        if name == self.default_session:
            raise CanvasError("Cannot delete default session")
        session = self.get_session(name)
        await session.close()
        del self.sessions[name]
        logger.info(f"Deleted session: {name}")
