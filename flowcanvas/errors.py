class CanvasError(ValueError):
    """Base error for rejected canvas operations. The graph is left unchanged."""


class NodeNotFound(CanvasError):
    def __init__(self, node_id: str):
        super().__init__(f"Node {node_id} does not exist")
        self.node_id = node_id


class EdgeNotFound(CanvasError):
    def __init__(self, edge_id: str):
        super().__init__(f"Edge {edge_id} does not exist")
        self.edge_id = edge_id


class InvalidConnection(CanvasError):
    def __init__(self, source: str, target: str, reason: str):
        super().__init__(f"Cannot connect {source} -> {target}: {reason}")
        self.source = source
        self.target = target
        self.reason = reason


class UnknownVariant(CanvasError):
    def __init__(self, variant: str):
        super().__init__(f"Unknown node variant: {variant}")
        self.variant = variant


class ReadOnlyField(CanvasError):
    def __init__(self, field: str, variant: str):
        super().__init__(f"Field '{field}' of a {variant} node cannot be edited from the properties panel")
        self.field = field
        self.variant = variant


class SessionNotFound(CanvasError):
    def __init__(self, name: str):
        super().__init__(f"Session {name} does not exist")
        self.name = name
