from __future__ import annotations

import unittest

from app.api.route_registry import RouteRegistry


class TestRouteRegistry(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = RouteRegistry()

    def test_add_mounts_normalized_path(self) -> None:
        self.registry.add("api/sqlViews/abc/data.json/", lambda code: f"record:{code}")

        self.assertEqual(self.registry.paths(), ["/api/sqlViews/abc/data.json"])
        handler = self.registry.resolve("/api/sqlViews/abc/data.json")
        self.assertIsNotNone(handler)
        self.assertEqual(handler("F1"), "record:F1")

    def test_re_adding_path_replaces_handler(self) -> None:
        self.registry.add("/x", lambda code: "old")
        self.registry.add("/x", lambda code: "new")

        self.assertEqual(self.registry.paths(), ["/x"])
        self.assertEqual(self.registry.resolve("/x")("F1"), "new")

    def test_remove_only_touches_exact_path(self) -> None:
        self.registry.add("/x", lambda code: None)
        self.registry.add("/x/y", lambda code: None)
        self.registry.add("/z", lambda code: None)

        self.assertTrue(self.registry.remove("/x"))

        self.assertEqual(self.registry.paths(), ["/x/y", "/z"])

    def test_remove_unknown_path_is_noop(self) -> None:
        self.registry.add("/x", lambda code: None)

        self.assertFalse(self.registry.remove("/missing"))
        self.assertEqual(self.registry.paths(), ["/x"])

    def test_resolve_unknown_path_returns_none(self) -> None:
        self.assertIsNone(self.registry.resolve("/nothing"))
        self.assertFalse(self.registry.has("/nothing"))

    def test_clear(self) -> None:
        self.registry.add("/x", lambda code: None)
        self.registry.clear()
        self.assertEqual(self.registry.paths(), [])


if __name__ == "__main__":
    unittest.main()
