from typing import Any, Dict
import config
from .base import VariantCapabilities
from ..schemas import NodeVariant

# Only changed by resizing on the canvas
SIZE_FIELDS = ("width", "height")


def note_config() -> Dict[str, Any]:
    return {
        "text": config.NOTE_DEFAULT_TEXT,
        "color": config.NOTE_DEFAULT_COLOR,
        "width": config.NOTE_DEFAULT_WIDTH,
        "height": config.NOTE_DEFAULT_HEIGHT,
    }


def note_label(text: str) -> str:
    limit = config.NOTE_LABEL_MAX_LENGTH
    return text[:limit] + ("..." if len(text) > limit else "")


NOTE = VariantCapabilities(
    variant=NodeVariant.NOTE,
    description="A sticky note for documentation",
    is_resizable=True,
    color="#6B7280",
    default_config_factory=note_config,
)
