import logging
from typing import Dict, List, Union
from .errors import UnknownVariant
from .nodes.base import VariantCapabilities
from .nodes.task import TASK, TRIGGER, ERROR_HANDLER, FINALLY
from .nodes.io import INPUT, OUTPUT
from .nodes.note import NOTE
from .schemas import NodeVariant, VariantMetadata

logger = logging.getLogger(__name__)


class NodeVariantRegistry:
    def __init__(self):
        self.variants: Dict[NodeVariant, VariantCapabilities] = {}

        # Explicit registration, palette order
        self.register(TASK)
        self.register(TRIGGER)
        self.register(INPUT)
        self.register(OUTPUT)
        self.register(ERROR_HANDLER)
        self.register(FINALLY)
        self.register(NOTE)

    def register(self, capabilities: VariantCapabilities):
        self.variants[capabilities.variant] = capabilities

    def get(self, variant: Union[NodeVariant, str]) -> VariantCapabilities:
        try:
            return self.variants[NodeVariant(variant)]
        except (ValueError, KeyError):
            raise UnknownVariant(str(variant))

    def resolve(self, variant: Union[NodeVariant, str]) -> NodeVariant:
        return self.get(variant).variant

    def is_known(self, variant: Union[NodeVariant, str, None]) -> bool:
        if not variant:
            return False
        try:
            self.get(variant)
        except UnknownVariant:
            return False
        return True

    def can_connect(self, source: Union[NodeVariant, str], target: Union[NodeVariant, str]) -> bool:
        return self.get(source).has_output_port and self.get(target).has_input_port

    def get_all_metadata(self) -> List[VariantMetadata]:
        return [caps.get_schema() for caps in self.variants.values()]


registry = NodeVariantRegistry()
