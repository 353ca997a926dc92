"""
Schema-driven property forms and the editing draft behind them.

build_form() lays out the fields for a node from its variant and, for plugin
typed nodes, from the task metadata catalog. A PropertiesDraft holds edits
locally; nothing reaches the graph until commit().
"""

import logging
from copy import deepcopy
from typing import Any, Dict, List, Optional
import yaml
import config
from .catalog import get_task_metadata
from .errors import CanvasError, ReadOnlyField
from .graph import GraphModel
from .nodes.io import FIELD_DEFS, INPUT_TYPES, build_io_config, field_names
from .nodes.note import SIZE_FIELDS, note_label
from .nodes.task import CORE_PROPERTIES
from .schemas import FormField, Node, NodeVariant, SelectOption, TaskMetadata, TaskProperty

logger = logging.getLogger(__name__)

TEXTAREA_HINTS = ("format", "message", "script")

IO_VARIANTS = (NodeVariant.INPUT, NodeVariant.OUTPUT)


def _title(name: str) -> str:
    if name == "id":
        return "ID"
    words = []
    for ch in name:
        if ch.isupper() and words:
            words.append(" ")
        words.append(ch)
    return "".join(words).capitalize()


def control_for(prop: TaskProperty) -> str:
    if prop.type == "boolean":
        return "toggle"
    if prop.type == "number":
        return "number"
    if prop.type in ("select", "enum"):
        return "select"
    if prop.type in ("array", "multiselect"):
        return "list"
    if prop.type == "object":
        return "textarea"
    lowered = prop.name.lower()
    return "textarea" if any(hint in lowered for hint in TEXTAREA_HINTS) else "text"


def _field_from_property(prop: TaskProperty, section: str) -> FormField:
    return FormField(
        name=prop.name,
        label=_title(prop.name),
        control=control_for(prop),
        section=section,
        required=prop.required,
        description=prop.description,
        default=prop.default,
        options=prop.options,
        placeholder=prop.placeholder,
        helpUrl=prop.helpUrl,
    )


def _note_form() -> List[FormField]:
    colors = [SelectOption(label=name, value=hex_code) for name, hex_code in config.STICKY_NOTE_COLORS.items()]
    return [
        FormField(name="text", label="Content", control="textarea", section="note",
                  placeholder="Enter your note content...", accepts_reference=False),
        FormField(name="color", label="Color", control="select", section="note",
                  default=config.NOTE_DEFAULT_COLOR, options=colors, accepts_reference=False),
    ]


def _io_form(variant: NodeVariant, io_type: str) -> List[FormField]:
    type_options = [SelectOption(label=t, value=t) for t in INPUT_TYPES]
    fields = []
    for name in field_names(variant, io_type):
        control, description = FIELD_DEFS[name]
        fields.append(FormField(
            name=name,
            label=_title(name),
            control=control,
            section="io",
            required=name in ("id", "type"),
            description=description,
            options=type_options if name in ("type", "itemType") else None,
        ))
    return fields


def _task_form(metadata: Optional[TaskMetadata]) -> List[FormField]:
    fields = [
        FormField(name="id", label="ID", control="text", section="identity", required=True,
                  description="Unique identifier of the task", placeholder="task-id"),
        FormField(name="type", label="Type", control="text", section="identity", required=True,
                  description="Plugin type", placeholder="io.kestra.plugin.core.log.Log"),
    ]
    seen = {"id", "type"}
    if metadata:
        for required in (True, False):
            for prop in metadata.properties:
                if prop.required == required and prop.name not in seen:
                    fields.append(_field_from_property(prop, "required" if required else "optional"))
                    seen.add(prop.name)
    for prop in CORE_PROPERTIES:
        if prop.name not in seen:
            fields.append(_field_from_property(prop, "core"))
            seen.add(prop.name)
    return fields


def build_form(node: Node, metadata: Optional[TaskMetadata] = None) -> List[FormField]:
    """Ordered form fields for a node.

    Plugin typed nodes get id and type first, then the plugin's required and
    optional properties, then the core task properties. When ``metadata`` is
    omitted it is looked up from the node's plugin type; a plugin without a
    catalog entry yields identity and core fields only.
    """
    if node.type == NodeVariant.NOTE:
        return _note_form()
    if node.type in IO_VARIANTS:
        return _io_form(node.type, node.config.get("type") or "STRING")
    if metadata is None:
        metadata = get_task_metadata(node.config.get("type"))
    return _task_form(metadata)


def _coerce(field: FormField, value: Any) -> Any:
    if field.control == "number":
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if isinstance(value, bool):
            raise CanvasError(f"Invalid configuration: '{field.name}' must be a number")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise CanvasError(f"Invalid configuration: '{field.name}' must be a number, got {value!r}")
    if field.control == "toggle":
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)
    if field.control == "list" and isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


class PropertiesDraft:
    """Local edits of one node's label and config, applied atomically on commit."""

    def __init__(self, graph: GraphModel, node_id: str, metadata: Optional[TaskMetadata] = None):
        self.graph = graph
        self.node_id = node_id
        self.metadata = metadata
        self.reset()

    def reset(self):
        node = self.graph.get_node(self.node_id)
        self.variant = node.type
        self.values: Dict[str, Any] = deepcopy(node.config)
        self.label: Optional[str] = None
        self._base_label = node.data.label

    @property
    def fields(self) -> List[FormField]:
        node = self.graph.get_node(self.node_id)
        node.data.config = self.values
        return build_form(node, self.metadata)

    def field(self, name: str) -> Optional[FormField]:
        return next((f for f in self.fields if f.name == name), None)

    def _check_writable(self, name: str) -> Optional[FormField]:
        if self.variant == NodeVariant.NOTE and name in SIZE_FIELDS:
            raise ReadOnlyField(name, self.variant.value)
        field = self.field(name)
        if field is None and self.variant in (NodeVariant.NOTE,) + IO_VARIANTS:
            raise CanvasError(f"Unknown field '{name}' for {self.variant.value} node")
        return field

    def set(self, name: str, value: Any):
        field = self._check_writable(name)
        value = _coerce(field, value) if field else value
        if value is None:
            self.values.pop(name, None)
        else:
            self.values[name] = value

    def set_many(self, values: Dict[str, Any]):
        """Apply several field edits; ``type`` goes first since it decides which fields exist."""
        values = dict(values)
        if "type" in values:
            self.set("type", values.pop("type"))
        for name, value in values.items():
            self.set(name, value)

    def set_label(self, label: str):
        self.label = label

    def drop_reference(self, name: str, token: str) -> str:
        """Put a dropped reference token into a field, replacing its value."""
        field = self._check_writable(name)
        if field is not None and not field.accepts_reference:
            raise CanvasError(f"Field '{name}' does not accept references")
        self.values[name] = token
        return token

    def _form_keys(self) -> set:
        return {f.name for f in self.fields} | set(FIELD_DEFS) | set(SIZE_FIELDS) | {"text", "color"}

    def custom_properties(self) -> Dict[str, Any]:
        keys = self._form_keys()
        return {k: v for k, v in self.values.items() if k not in keys}

    def custom_properties_yaml(self) -> str:
        custom = self.custom_properties()
        return yaml.safe_dump(custom, sort_keys=False) if custom else ""

    def set_custom_properties_yaml(self, text: str):
        """Replace the properties the form has no field for with a YAML mapping."""
        if self.variant == NodeVariant.NOTE or self.variant in IO_VARIANTS:
            raise CanvasError(f"{self.variant.value} nodes have no custom properties")
        try:
            parsed = yaml.safe_load(text) if text and text.strip() else {}
        except yaml.YAMLError as e:
            raise CanvasError(f"Invalid YAML in custom properties: {e}")
        if parsed is None:
            parsed = {}
        if not isinstance(parsed, dict):
            raise CanvasError("Invalid YAML in custom properties: expected a mapping")

        for key in list(self.custom_properties()):
            del self.values[key]
        for key, value in parsed.items():
            if key in ("id", "type"):
                logger.warning(f"Ignoring '{key}' in custom properties of {self.node_id}")
                continue
            self.values[str(key)] = value

    def commit(self) -> Node:
        if self.variant in IO_VARIANTS:
            new_config = build_io_config(self.variant, self.values)
        else:
            new_config = dict(self.values)

        partial: Dict[str, Any] = {"config": new_config}
        if self.label is not None:
            partial["label"] = self.label
        elif self.variant == NodeVariant.NOTE:
            partial["label"] = note_label(new_config.get("text", ""))

        node = self.graph.update_node(self.node_id, partial)
        logger.info(f"Committed properties of {self.node_id}")
        self.reset()
        return node
