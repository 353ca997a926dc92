"""
Task-like variants: tasks, error handlers, finally tasks and triggers.

Tasks, error handlers and finally tasks sit on the execution graph and expose
one target and one source port. Triggers carry a plugin type as well but
never connect structurally.
"""

from typing import Any, Dict, List
from .base import VariantCapabilities
from ..schemas import NodeVariant, TaskProperty, SelectOption


def task_config() -> Dict[str, Any]:
    return {"id": "", "type": ""}


# Generic properties every task accepts, independent of its plugin schema
CORE_PROPERTIES: List[TaskProperty] = [
    TaskProperty(name="description", type="string", description="Describe what this task does",
                 placeholder="Describe what this task does..."),
    TaskProperty(name="retry", type="string", description="Retry configuration",
                 placeholder="Retry configuration"),
    TaskProperty(name="timeout", type="string", description="Maximum task duration",
                 placeholder="PT1H (ISO 8601 duration)"),
    TaskProperty(name="runIf", type="string", description="Condition to run task",
                 placeholder="Condition to run task"),
    TaskProperty(name="disabled", type="boolean", description="Skip this task", default=False),
    TaskProperty(name="workerGroup", type="string", description="Worker group configuration",
                 placeholder="Worker group configuration"),
    TaskProperty(name="allowFailure", type="boolean", description="Continue on failure", default=False),
    TaskProperty(name="allowWarning", type="boolean", description="Treat warnings as success", default=False),
    TaskProperty(
        name="logLevel",
        type="select",
        description="Minimum log level sent to the backend",
        default="INFO",
        options=[SelectOption(label=level, value=level) for level in ("TRACE", "DEBUG", "INFO", "WARN", "ERROR")],
    ),
    TaskProperty(name="logToFile", type="boolean", description="Store task logs in a file", default=False),
]

CORE_PROPERTY_NAMES = [p.name for p in CORE_PROPERTIES]


TASK = VariantCapabilities(
    variant=NodeVariant.TASK,
    description="Run a plugin task",
    has_input_port=True,
    has_output_port=True,
    has_plugin_type=True,
    color="#8408FF",
    default_config_factory=task_config,
)

ERROR_HANDLER = VariantCapabilities(
    variant=NodeVariant.ERROR,
    description="Task run when the flow fails",
    has_input_port=True,
    has_output_port=True,
    has_plugin_type=True,
    color="#EF4444",
    default_config_factory=task_config,
)

FINALLY = VariantCapabilities(
    variant=NodeVariant.FINALLY,
    description="Cleanup task that always runs",
    has_input_port=True,
    has_output_port=True,
    has_plugin_type=True,
    color="#8B5CF6",
    default_config_factory=task_config,
)

TRIGGER = VariantCapabilities(
    variant=NodeVariant.TRIGGER,
    description="Start the flow on a schedule or event",
    has_plugin_type=True,
    color="#10B981",
    default_config_factory=task_config,
)
