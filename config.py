from pathlib import Path

# Define the root directory of the project
ROOT_DIR = Path(__file__).resolve().parent

# Canvas Defaults - Node Creation
DEFAULT_NODE_POSITION = {"x": 250.0, "y": 150.0}
NOTE_DEFAULT_TEXT = "Double click to edit me. Guide"
NOTE_DEFAULT_WIDTH = 240
NOTE_DEFAULT_HEIGHT = 120
NOTE_DEFAULT_COLOR = "#9B8B6B"
NOTE_LABEL_MAX_LENGTH = 50

STICKY_NOTE_COLORS = {
    "Tan": "#9B8B6B",
    "Yellow": "#FDE047",
    "Pink": "#FDA4AF",
    "Blue": "#93C5FD",
    "Green": "#86EFAC",
    "Purple": "#C4B5FD",
}

# App Defaults - Auto-save
AUTOSAVE_DEBOUNCE_SECONDS = 0.0

# App Defaults - Playground
PLAYGROUND_LATENCY_SECONDS = 1.0

DEFAULT_EXECUTION_CONTEXT = {
    "id": "exec_preview_123",
    "namespace": "company.team",
    "flowId": "my-flow",
    "flowRevision": 1,
    "state": "RUNNING",
}
