"""Tests for the web service and the command-line entry point.

Run: python -m pytest tests/test_server.py -v
"""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from dashgrid.__main__ import main as cli_main
from dashgrid.layout import layout_to_dict
from dashgrid.web import server
from dashgrid.web.server import app
from tests.dashboard_fixture import make_sample_dashboard


def _by_id(items: list[dict]) -> dict[str, dict]:
    return {i["componentId"]: i for i in items}


class ServerTestCase(unittest.TestCase):
    """Runs every test against a throwaway sessions directory."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self._patch = patch("dashgrid.session.SESSIONS_DIR", Path(self._tmp.name))
        self._patch.start()
        self.client = TestClient(app)

    def tearDown(self):
        self._patch.stop()
        self._tmp.cleanup()

    def create_sample(self) -> str:
        resp = self.client.post("/api/sessions", json={
            "name": "sample", "layout": layout_to_dict(make_sample_dashboard()),
        })
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["id"]


class TestSessions(ServerTestCase):

    def test_component_types(self):
        data = self.client.get("/api/component_types").json()
        self.assertEqual(data["grid_columns"], 12)
        self.assertEqual(data["types"]["Chart"], {"width": 6, "height": 2})

    def test_create_and_fetch(self):
        sid = self.create_sample()
        data = self.client.get(f"/api/sessions/{sid}").json()
        self.assertEqual(data["name"], "sample")
        self.assertEqual(data["items"], layout_to_dict(make_sample_dashboard()))
        self.assertEqual(data["violations"], [])

        listed = self.client.get("/api/sessions").json()["sessions"]
        self.assertEqual([s["id"] for s in listed], [sid])

    def test_create_empty(self):
        resp = self.client.post("/api/sessions", json={})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["items"], [])

    def test_create_from_legacy_rows(self):
        resp = self.client.post("/api/sessions", json={"layout": [
            {"items": [{"componentId": "a", "componentType": "KPI"},
                       {"componentId": "b", "componentType": "KPI"}]},
        ]})
        self.assertEqual(resp.status_code, 200)
        items = resp.json()["items"]
        self.assertEqual([(i["x"], i["width"]) for i in items], [(0, 6), (6, 6)])

    def test_invalid_seed_rejected(self):
        resp = self.client.post("/api/sessions", json={"layout": [
            {"componentId": "a", "componentType": "KPI", "x": 0, "y": 0, "width": 2, "height": 2},
            {"componentId": "b", "componentType": "KPI", "x": 1, "y": 1, "width": 2, "height": 2},
        ]})
        self.assertEqual(resp.status_code, 422)

    def test_duplicate_ids_in_seed_rejected(self):
        resp = self.client.post("/api/sessions", json={"layout": [
            {"componentId": "a", "componentType": "KPI", "x": 0, "y": 0, "width": 1, "height": 1},
            {"componentId": "a", "componentType": "KPI", "x": 0, "y": 3, "width": 1, "height": 1},
        ]})
        self.assertEqual(resp.status_code, 422)
        self.assertIn("duplicate", resp.text)
        self.assertEqual(self.client.get("/api/sessions").json()["sessions"], [])

    def test_malformed_seed_rejected(self):
        resp = self.client.post("/api/sessions", json={"layout": [{"componentId": "a"}]})
        self.assertEqual(resp.status_code, 422)

    def test_unknown_session(self):
        self.assertEqual(self.client.get("/api/sessions/nope").status_code, 404)
        resp = self.client.post("/api/sessions/nope/components",
                                json={"component_type": "KPI", "x": 0, "y": 0})
        self.assertEqual(resp.status_code, 404)


class TestMutations(ServerTestCase):

    def setUp(self):
        super().setUp()
        self.sid = self.create_sample()
        self.base = f"/api/sessions/{self.sid}"

    def stored_items(self) -> dict[str, dict]:
        return _by_id(self.client.get(self.base).json()["items"])

    def test_add_with_default_size(self):
        resp = self.client.post(f"{self.base}/components",
                                json={"component_type": "KPI", "x": 0, "y": 0})
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        added = _by_id(data["items"])[data["component_id"]]
        self.assertEqual((added["x"], added["y"], added["width"], added["height"]),
                         (0, 5, 3, 1))
        self.assertTrue(data["component_id"].startswith("comp-"))
        self.assertEqual(data["violations"], [])
        self.assertIn(data["component_id"], self.stored_items())

    def test_add_rejected(self):
        resp = self.client.post(f"{self.base}/components", json={
            "component_type": "KPI", "x": 11, "y": 0, "width": 3, "height": 1,
        })
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(len(self.stored_items()), 4)

    def test_add_duplicate_id(self):
        resp = self.client.post(f"{self.base}/components", json={
            "component_type": "KPI", "x": 0, "y": 0, "component_id": "chart-a",
        })
        self.assertEqual(resp.status_code, 409)

    def test_add_unknown_type_needs_size(self):
        resp = self.client.post(f"{self.base}/components",
                                json={"component_type": "Map", "x": 0, "y": 0})
        self.assertEqual(resp.status_code, 422)
        resp = self.client.post(f"{self.base}/components", json={
            "component_type": "Map", "x": 0, "y": 0, "width": 2, "height": 2,
        })
        self.assertEqual(resp.status_code, 200)

    def test_move(self):
        resp = self.client.post(f"{self.base}/components/chart-b/move", json={"x": 0, "y": 0})
        self.assertEqual(resp.status_code, 200)
        moved = self.stored_items()["chart-b"]
        self.assertEqual((moved["x"], moved["y"]), (0, 5))

    def test_move_rejected_keeps_layout(self):
        resp = self.client.post(f"{self.base}/components/chart-a/move", json={"x": 8, "y": 0})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(self.stored_items(), _by_id(layout_to_dict(make_sample_dashboard())))

    def test_move_unknown_component(self):
        resp = self.client.post(f"{self.base}/components/nope/move", json={"x": 0, "y": 0})
        self.assertEqual(resp.status_code, 404)

    def test_resize_right_rejected(self):
        resp = self.client.post(f"{self.base}/components/chart-a/resize",
                                json={"edge": "right", "value": 8})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertFalse(data["applied"])
        self.assertEqual(data["items"], layout_to_dict(make_sample_dashboard()))

    def test_resize_bottom_pushes(self):
        resp = self.client.post(f"{self.base}/components/chart-b/resize",
                                json={"edge": "bottom", "value": 2})
        data = resp.json()
        self.assertTrue(data["applied"])
        self.assertEqual(data["violations"], [])
        stored = self.stored_items()
        self.assertEqual(stored["kpi-c"]["y"], 2)
        self.assertEqual(stored["grid-d"]["y"], 3)

    def test_resize_left(self):
        resp = self.client.post(f"{self.base}/components/chart-b/resize",
                                json={"edge": "left", "value": 9})
        self.assertTrue(resp.json()["applied"])
        b = self.stored_items()["chart-b"]
        self.assertEqual((b["x"], b["width"]), (9, 3))

    def test_resize_bad_edge(self):
        resp = self.client.post(f"{self.base}/components/chart-b/resize",
                                json={"edge": "top", "value": 2})
        self.assertEqual(resp.status_code, 422)

    def test_locks_released_after_requests(self):
        self.client.post(f"{self.base}/components/chart-a/resize",
                         json={"edge": "bottom", "value": 3})
        self.client.post(f"{self.base}/components/chart-a/move", json={"x": 11, "y": 0})
        self.client.post("/api/sessions/nope/components/x/move", json={"x": 0, "y": 0})
        self.assertEqual(server._locks, {})

    def test_delete_is_idempotent(self):
        resp = self.client.delete(f"{self.base}/components/chart-b")
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("chart-b", self.stored_items())
        resp = self.client.delete(f"{self.base}/components/chart-b")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(self.stored_items()), 3)


class TestStatelessEndpoints(ServerTestCase):

    def test_validate(self):
        resp = self.client.post("/api/validate", json={"items": [
            {"componentId": "a", "componentType": "KPI", "x": 0, "y": 0, "width": 2, "height": 2},
            {"componentId": "b", "componentType": "KPI", "x": 1, "y": 1, "width": 2, "height": 2},
        ]})
        violations = resp.json()["violations"]
        self.assertEqual([v["kind"] for v in violations], ["overlap"])
        self.assertEqual(violations[0]["affectedIds"], ["a", "b"])

    def test_migrate(self):
        resp = self.client.post("/api/migrate", json={"rows": [
            {"items": [{"componentId": "a", "componentType": "Chart"}]},
        ]})
        self.assertEqual(resp.json()["items"], [{
            "componentId": "a", "componentType": "Chart",
            "x": 0, "y": 0, "width": 12, "height": 1,
        }])

    def test_migrate_bad_row(self):
        for rows in ([{"items": 5}], [7]):
            resp = self.client.post("/api/migrate", json={"rows": rows})
            self.assertEqual(resp.status_code, 422, rows)


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, name: str, data) -> str:
        p = self.dir / name
        p.write_text(json.dumps(data), encoding="utf-8")
        return str(p)

    def test_validate_ok(self):
        path = self._write("layout.json", layout_to_dict(make_sample_dashboard()))
        self.assertEqual(cli_main(["validate", path]), 0)

    def test_validate_reports_violations(self):
        path = self._write("layout.json", [
            {"componentId": "a", "componentType": "KPI", "x": 10, "y": 0, "width": 4, "height": 1},
        ])
        self.assertEqual(cli_main(["validate", path]), 1)

    def test_migrate_to_file(self):
        src = self._write("rows.json", [{"items": [
            {"componentId": "a", "componentType": "KPI"},
            {"componentId": "b", "componentType": "KPI"},
            {"componentId": "c", "componentType": "KPI"},
        ]}])
        out = self.dir / "layout.json"
        self.assertEqual(cli_main(["migrate", src, "--out", str(out)]), 0)
        items = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual([i["width"] for i in items], [4, 4, 4])

    def test_missing_file(self):
        self.assertEqual(cli_main(["validate", str(self.dir / "missing.json")]), 2)


if __name__ == "__main__":
    unittest.main()
