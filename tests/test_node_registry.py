import unittest
from flowcanvas.errors import UnknownVariant
from flowcanvas.node_registry import registry
from flowcanvas.schemas import NodeVariant


class TestNodeVariantRegistry(unittest.TestCase):
    def test_every_variant_registered(self):
        self.assertEqual(set(registry.variants), set(NodeVariant))

    def test_ports(self):
        """Only task-like variants expose ports."""
        for variant in (NodeVariant.TASK, NodeVariant.ERROR, NodeVariant.FINALLY):
            caps = registry.get(variant)
            self.assertTrue(caps.has_input_port)
            self.assertTrue(caps.has_output_port)
        for variant in (NodeVariant.TRIGGER, NodeVariant.INPUT, NodeVariant.OUTPUT, NodeVariant.NOTE):
            caps = registry.get(variant)
            self.assertFalse(caps.has_input_port)
            self.assertFalse(caps.has_output_port)

    def test_only_note_resizes(self):
        resizable = [v for v, caps in registry.variants.items() if caps.is_resizable]
        self.assertEqual(resizable, [NodeVariant.NOTE])

    def test_lookup_by_wire_name(self):
        self.assertEqual(registry.resolve("error"), NodeVariant.ERROR)
        self.assertTrue(registry.is_known("finally"))
        self.assertFalse(registry.is_known("widget"))
        self.assertFalse(registry.is_known(None))

    def test_unknown_variant(self):
        with self.assertRaises(UnknownVariant):
            registry.get("widget")

    def test_default_config_is_fresh(self):
        caps = registry.get("note")
        first = caps.default_config()
        first["text"] = "changed"
        self.assertNotEqual(caps.default_config()["text"], "changed")

    def test_can_connect(self):
        self.assertTrue(registry.can_connect("task", "finally"))
        self.assertFalse(registry.can_connect("trigger", "task"))

    def test_metadata(self):
        metadata = {m.type: m for m in registry.get_all_metadata()}
        self.assertEqual(metadata[NodeVariant.TASK].inputs, ["default"])
        self.assertEqual(metadata[NodeVariant.NOTE].outputs, [])
        self.assertTrue(metadata[NodeVariant.NOTE].resizable)
        self.assertTrue(metadata[NodeVariant.TRIGGER].pluginTyped)


if __name__ == '__main__':
    unittest.main()
