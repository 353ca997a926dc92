from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Any, Optional, Literal


class NodeVariant(str, Enum):
    TASK = "task"
    TRIGGER = "trigger"
    INPUT = "input"
    OUTPUT = "output"
    ERROR = "error"  # error handler
    FINALLY = "finally"
    NOTE = "note"


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class NodeData(BaseModel):
    label: str = ""
    config: Dict[str, Any] = {}


class Node(BaseModel):
    id: str
    type: NodeVariant
    position: Position
    data: NodeData

    @property
    def variant(self) -> NodeVariant:
        return self.type

    @property
    def config(self) -> Dict[str, Any]:
        return self.data.config


class Edge(BaseModel):
    id: str
    source: str
    target: str
    sourceHandle: Optional[str] = None
    targetHandle: Optional[str] = None
    animated: bool = True


class Viewport(BaseModel):
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


class FlowCanvasData(BaseModel):
    nodes: List[Node] = []
    edges: List[Edge] = []
    viewport: Optional[Viewport] = None


# Flow-level properties edited in the properties panel

class Concurrency(BaseModel):
    model_config = ConfigDict(extra="allow")

    behavior: Literal["QUEUE", "CANCEL", "FAIL"] = "QUEUE"
    limit: Optional[int] = None


class Retry(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[Literal["constant", "exponential"]] = None
    maxAttempt: Optional[int] = None
    maxDuration: Optional[str] = None


class Sla(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    duration: Optional[str] = None


class AfterExecution(BaseModel):
    model_config = ConfigDict(extra="allow")

    onSuccess: Optional[str] = None
    onFailure: Optional[str] = None


class FlowProperties(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    namespace: str = ""
    description: Optional[str] = None
    disabled: Optional[bool] = None
    revision: Optional[int] = None
    tenantId: Optional[str] = None
    workerGroup: Optional[str] = None
    concurrency: Optional[Concurrency] = None
    labels: Dict[str, str] = {}
    variables: Dict[str, Any] = {}
    taskDefaults: Optional[Dict[str, Any]] = None
    pluginDefaults: Optional[Dict[str, Any]] = None
    afterExecution: Optional[AfterExecution] = None
    retry: Optional[Retry] = None
    sla: Optional[Sla] = None


class FlowDocument(BaseModel):
    data: FlowCanvasData
    properties: FlowProperties


# Task metadata catalog entries (read-only, keyed by plugin type)

class SelectOption(BaseModel):
    label: str
    value: str


class TaskProperty(BaseModel):
    name: str
    type: Literal["string", "number", "boolean", "array", "object", "select", "multiselect", "enum"] = "string"
    description: str = ""
    required: bool = False
    default: Any = None
    options: Optional[List[SelectOption]] = None
    placeholder: Optional[str] = None
    helpUrl: Optional[str] = None


class TaskOutput(BaseModel):
    name: str
    type: str
    description: Optional[str] = None


class TaskMetric(BaseModel):
    name: str
    type: Literal["counter", "timer", "gauge"]
    description: Optional[str] = None


class TaskMetadata(BaseModel):
    pluginType: str
    displayName: str
    description: str = ""
    category: str = ""
    properties: List[TaskProperty] = []
    outputs: List[TaskOutput] = []
    metrics: List[TaskMetric] = []
    documentationUrl: Optional[str] = None


class PlaygroundExecutionData(BaseModel):
    outputs: Dict[str, Any] = {}
    metrics: Dict[str, Any] = {}
    logs: List[str] = []


class PaletteItem(BaseModel):
    id: str
    label: str
    type: NodeVariant
    pluginType: str = ""
    description: str = ""
    category: Optional[str] = None


class VariantMetadata(BaseModel):
    type: NodeVariant
    description: str
    inputs: List[str] = []
    outputs: List[str] = []
    resizable: bool = False
    pluginTyped: bool = False
    color: str = "#9CA3AF"


class FormField(BaseModel):
    name: str
    label: str
    control: Literal["text", "textarea", "number", "toggle", "select", "color", "list"]
    section: Literal["identity", "required", "optional", "core", "note", "io"]
    required: bool = False
    description: str = ""
    default: Any = None
    options: Optional[List[SelectOption]] = None
    placeholder: Optional[str] = None
    helpUrl: Optional[str] = None
    accepts_reference: bool = Field(default=True, description="Whether a reference token can be dropped on the field")


# Drag-and-drop payloads

class CanvasBounds(BaseModel):
    left: float = 0.0
    top: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None


# Inputs panel entries

class ReferenceOutput(BaseModel):
    name: str
    type: str
    path: str
    token: str


class ConnectedInput(BaseModel):
    taskId: str
    label: str
    nodeType: NodeVariant
    outputs: List[ReferenceOutput] = []
    hasOutputs: bool = False


class ContextEntry(BaseModel):
    name: str
    type: str
    value: Any = None
    token: str


# API request bodies

class CreateSessionRequest(BaseModel):
    name: str
    document: Optional[FlowDocument] = None


class NodeCreate(BaseModel):
    variant: NodeVariant
    position: Position = Position()
    config: Dict[str, Any] = {}
    label: Optional[str] = None


class NodeUpdate(BaseModel):
    label: Optional[str] = None
    config: Optional[Dict[str, Any]] = None


class SizeUpdate(BaseModel):
    width: float
    height: float


class EdgeCreate(BaseModel):
    source: str
    target: str
    sourceHandle: Optional[str] = None
    targetHandle: Optional[str] = None


class SlotUpdate(BaseModel):
    node_id: Optional[str] = None


class DropRequest(BaseModel):
    transfer: Dict[str, str] = {}
    clientX: float
    clientY: float
    bounds: CanvasBounds = CanvasBounds()
    viewport: Optional[Viewport] = None


class MenuRequest(BaseModel):
    item_id: str


class NavigateRequest(BaseModel):
    direction: Literal["previous", "next"]


class PropertiesCommit(BaseModel):
    values: Dict[str, Any] = {}
    references: Dict[str, str] = {}
    label: Optional[str] = None
    customYaml: Optional[str] = None
