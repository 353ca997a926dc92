from pydantic import BaseModel, ConfigDict
from typing import Any, Callable, Dict
from ..schemas import NodeVariant, VariantMetadata


def empty_config() -> Dict[str, Any]:
    return {}


class VariantCapabilities(BaseModel):
    """One row of the variant capability table.

    Rendering, connection checks, form layout and palette seeding all read
    these flags instead of switching on the variant string.
    """
    model_config = ConfigDict(frozen=True)

    variant: NodeVariant
    description: str
    has_input_port: bool = False
    has_output_port: bool = False
    is_resizable: bool = False
    has_plugin_type: bool = False  # config.type names a catalog plugin
    color: str = "#9CA3AF"
    default_config_factory: Callable[[], Dict[str, Any]] = empty_config

    def default_config(self) -> Dict[str, Any]:
        # Factories return a fresh dict on every call
        return self.default_config_factory()

    def get_schema(self) -> VariantMetadata:
        return VariantMetadata(
            type=self.variant,
            description=self.description,
            inputs=["default"] if self.has_input_port else [],
            outputs=["default"] if self.has_output_port else [],
            resizable=self.is_resizable,
            pluginTyped=self.has_plugin_type,
            color=self.color,
        )
