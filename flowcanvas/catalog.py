"""
Read-only catalog of task plugin schemas, keyed by plugin type.

Lookups are exact matches on the plugin type. A node whose plugin has no
entry still gets an editable form, just without plugin-specific fields.
"""

import logging
from typing import Dict, Optional
from .schemas import NodeVariant, SelectOption, TaskMetadata, TaskMetric, TaskOutput, TaskProperty

logger = logging.getLogger(__name__)

OUTPUT_NODE_PLUGIN = "__output_node__"

LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "WARN", "ERROR"]


def _options(values):
    return [SelectOption(label=v, value=v) for v in values]


TASK_METADATA_REGISTRY: Dict[str, TaskMetadata] = {
    OUTPUT_NODE_PLUGIN: TaskMetadata(
        pluginType=OUTPUT_NODE_PLUGIN,
        displayName="Flow Output",
        description="Define an output value for the flow",
        category="Flow",
        properties=[
            TaskProperty(name="type", type="select", description="The data type of the output",
                         required=True, default="STRING",
                         options=_options(["STRING", "NUMBER", "BOOLEAN", "OBJECT", "ARRAY"])),
            TaskProperty(name="id", description="Unique identifier for this output",
                         required=True, placeholder="output_name"),
            TaskProperty(name="displayName", description="Human-readable name for the output",
                         placeholder="Order ID"),
            TaskProperty(name="description", description="Description of what this output represents",
                         placeholder="The unique identifier for the order"),
            TaskProperty(name="validator", description="Regular expression pattern to validate the output value",
                         placeholder="^[a-zA-Z]+$"),
            TaskProperty(name="prefill", description="Default/prefill value for the output", placeholder=""),
            TaskProperty(name="value", description="The value expression for this output",
                         required=True, placeholder="{{ outputs.task1.value }}"),
            TaskProperty(name="required", type="boolean", description="Whether this output is required",
                         default=False),
        ],
    ),
    "io.kestra.plugin.core.debug.Return": TaskMetadata(
        pluginType="io.kestra.plugin.core.debug.Return",
        displayName="Return",
        description=(
            "Return a value for debugging purposes. This task is mostly useful for troubleshooting. "
            "It allows you to return some templated functions, inputs or outputs."
        ),
        category="Core",
        properties=[
            TaskProperty(name="format", description="The templated string to render.", required=True,
                         placeholder="{{ outputs.previousTask.value }}",
                         helpUrl="https://kestra.io/docs/developer-guide/variables"),
        ],
        outputs=[TaskOutput(name="value", type="String", description="The generated string.")],
        metrics=[
            TaskMetric(name="duration", type="timer", description="Task execution duration"),
            TaskMetric(name="length", type="counter", description="Length of the returned value"),
        ],
        documentationUrl="https://kestra.io/plugins/core/debug/io.kestra.plugin.core.debug.return",
    ),
    "io.kestra.plugin.core.log.Log": TaskMetadata(
        pluginType="io.kestra.plugin.core.log.Log",
        displayName="Log",
        description="Log a message to the execution logs.",
        category="Core",
        properties=[
            TaskProperty(name="message", description="The message to log.", required=True,
                         placeholder="Processing started at {{ execution.startDate }}"),
            TaskProperty(name="level", type="select", description="The log level.",
                         default="INFO", options=_options(LOG_LEVELS)),
        ],
        metrics=[TaskMetric(name="duration", type="timer")],
    ),
}


def get_task_metadata(plugin_type: Optional[str]) -> Optional[TaskMetadata]:
    if not plugin_type:
        return None
    return TASK_METADATA_REGISTRY.get(plugin_type)


def register_task_metadata(metadata: TaskMetadata):
    if metadata.pluginType in TASK_METADATA_REGISTRY:
        logger.info(f"Replacing task metadata for {metadata.pluginType}")
    TASK_METADATA_REGISTRY[metadata.pluginType] = metadata


def metadata_for_node(node) -> Optional[TaskMetadata]:
    """Output nodes use the flow output schema, everything else its plugin type."""
    if node.type == NodeVariant.OUTPUT:
        return get_task_metadata(OUTPUT_NODE_PLUGIN)
    return get_task_metadata(node.config.get("type"))
