"""
Flow inputs and outputs.

Both variants use a fixed schema instead of a catalog plugin. Other nodes
reference them through expressions only, so neither exposes a port.
"""

import json
from typing import Any, Dict, List
from .base import VariantCapabilities
from ..errors import CanvasError
from ..schemas import NodeVariant

INPUT_TYPES = [
    "STRING", "INT", "FLOAT", "BOOL", "ARRAY", "SELECT", "MULTISELECT",
    "DATETIME", "DATE", "TIME", "DURATION", "FILE", "JSON", "URI", "SECRET", "YAML",
]

# Shared by every input/output regardless of its type
BASE_FIELDS = ["id", "type", "description", "displayName", "required"]

# control, description
FIELD_DEFS: Dict[str, tuple] = {
    "id": ("text", "Unique identifier"),
    "type": ("select", "Data type"),
    "description": ("textarea", "What this value represents"),
    "displayName": ("text", "Human-readable name"),
    "required": ("toggle", "Whether a value must be provided"),
    "defaults": ("text", "Default value"),
    "value": ("textarea", "The value expression for this output"),
    "itemType": ("select", "Type of the array items"),
    "min": ("text", "Minimum value"),
    "max": ("text", "Maximum value"),
    "validator": ("text", "Regular expression the value must match"),
    "prefill": ("text", "Value shown before the user edits it"),
    "values": ("list", "Allowed values"),
    "expression": ("text", "Expression returning the allowed values"),
    "allowCustomValue": ("toggle", "Accept values outside the list"),
    "autoSelectFirst": ("toggle", "Select the first value by default"),
    "isRadio": ("toggle", "Render as radio buttons"),
    "allowedFileExtensions": ("list", "Accepted file extensions"),
    "after": ("text", "Earliest accepted date"),
    "before": ("text", "Latest accepted date"),
}

TYPE_SPECIFIC_FIELDS: Dict[str, List[str]] = {
    "STRING": ["validator", "prefill"],
    "INT": ["min", "max"],
    "FLOAT": ["min", "max"],
    "DURATION": ["min", "max"],
    "ARRAY": ["itemType"],
    "SELECT": ["values", "expression", "prefill", "allowCustomValue", "autoSelectFirst", "isRadio"],
    "MULTISELECT": ["values", "expression", "prefill"],
    "FILE": ["allowedFileExtensions"],
    "JSON": ["prefill"],
    "YAML": ["prefill"],
    "DATETIME": ["after", "before"],
}


def input_config() -> Dict[str, Any]:
    return {"id": "", "type": "STRING", "description": "", "displayName": "", "required": True}


def output_config() -> Dict[str, Any]:
    return {"id": "", "type": "STRING", "description": "", "displayName": "", "required": True}


def field_names(variant: NodeVariant, io_type: str) -> List[str]:
    """Ordered field names shown for an input/output of the given type."""
    names = list(BASE_FIELDS)
    names.append("defaults" if variant == NodeVariant.INPUT else "value")
    names.extend(TYPE_SPECIFIC_FIELDS.get(io_type, []))
    return names


def _blank(value: Any) -> bool:
    return value is None or value == "" or value == []


def _to_number(value: Any, field: str):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        raise CanvasError(f"Invalid configuration: '{field}' must be a number, got {value!r}")
    return int(number) if number.is_integer() else number


def parse_default(io_type: str, raw: Any) -> Any:
    """Convert a default typed in the editor to the value stored in the config."""
    if not isinstance(raw, str):
        return raw
    if io_type == "INT":
        try:
            return int(float(raw.strip()))
        except ValueError:
            raise CanvasError(f"Invalid configuration: default {raw!r} is not an integer")
    if io_type == "FLOAT":
        try:
            return float(raw.strip())
        except ValueError:
            raise CanvasError(f"Invalid configuration: default {raw!r} is not a number")
    if io_type == "BOOL":
        return raw.lower() == "true"
    if io_type == "ARRAY":
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return [v.strip() for v in raw.split(",")]
    return raw


def build_io_config(variant: NodeVariant, values: Dict[str, Any]) -> Dict[str, Any]:
    """Assemble the persisted config of an input/output from editor values.

    Type-specific keys are kept only for the types that use them and only
    when they carry a value.
    """
    io_type = values.get("type") or "STRING"
    config: Dict[str, Any] = {
        "id": values.get("id", ""),
        "type": io_type,
        "description": values.get("description", ""),
        "displayName": values.get("displayName", ""),
        "required": values.get("required") is not False,
    }

    if variant == NodeVariant.INPUT and not _blank(values.get("defaults")):
        config["defaults"] = parse_default(io_type, values["defaults"])
    elif variant == NodeVariant.OUTPUT and not _blank(values.get("value")):
        config["value"] = values["value"]

    if io_type == "ARRAY":
        config["itemType"] = values.get("itemType") or "STRING"

    if io_type in ("INT", "FLOAT", "DURATION"):
        for bound in ("min", "max"):
            if not _blank(values.get(bound)):
                config[bound] = values[bound] if io_type == "DURATION" else _to_number(values[bound], bound)

    if io_type == "STRING":
        for key in ("validator", "prefill"):
            if values.get(key):
                config[key] = values[key]

    if io_type in ("SELECT", "MULTISELECT"):
        if values.get("values"):
            config["values"] = list(values["values"])
        for key in ("expression", "prefill"):
            if values.get(key):
                config[key] = values[key]
        if io_type == "SELECT":
            for key in ("allowCustomValue", "autoSelectFirst", "isRadio"):
                if values.get(key):
                    config[key] = True

    if io_type == "FILE" and values.get("allowedFileExtensions"):
        config["allowedFileExtensions"] = list(values["allowedFileExtensions"])

    if io_type in ("JSON", "YAML") and values.get("prefill"):
        config["prefill"] = values["prefill"]

    if io_type == "DATETIME":
        for key in ("after", "before"):
            if values.get(key):
                config[key] = values[key]

    return config


INPUT = VariantCapabilities(
    variant=NodeVariant.INPUT,
    description="Flow input parameter",
    color="#3B82F6",
    default_config_factory=input_config,
)

OUTPUT = VariantCapabilities(
    variant=NodeVariant.OUTPUT,
    description="Flow output value",
    color="#F59E0B",
    default_config_factory=output_config,
)
