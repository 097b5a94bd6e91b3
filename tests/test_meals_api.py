# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import unittest
from datetime import date, timedelta
from pathlib import Path
from unittest import mock

from fastapi.testclient import TestClient

from support import load_app, register

EGG = {
    "name": "Boiled Egg",
    "calories": 78,
    "protein": 6.3,
    "carbs": 0.6,
    "fat": 5.3,
    "serving_size": "1",
    "serving_unit": "large egg",
}


class TestAppApi(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="diettracker-test-"))
        self.api = load_app(self._tmp)
        self.client = TestClient(self.api.app)
        self.headers = register(self.client)

    def tearDown(self) -> None:
        self.client.close()
        shutil.rmtree(self._tmp, ignore_errors=True)

    def _user_id(self, headers=None) -> str:
        resp = self.client.get("/api/auth/me", headers=headers or self.headers)
        self.assertEqual(resp.status_code, 200)
        return resp.json()["id"]

    def test_health(self) -> None:
        self.assertEqual(self.client.get("/api/health").json(), {"ok": True})

    def test_auth_flow(self) -> None:
        me = self.client.get("/api/auth/me", headers=self.headers).json()
        self.assertEqual(me["email"], "demo@example.com")

        dup = self.client.post("/api/auth/register", json={"email": "Demo@Example.com", "password": "password123"})
        self.assertEqual(dup.status_code, 400)
        self.assertEqual(dup.json(), {"error": "Email already registered"})

        ok = self.client.post("/api/auth/login", json={"email": "demo@example.com", "password": "password123"})
        self.assertEqual(ok.status_code, 200)
        self.assertEqual(ok.json()["token_type"], "bearer")

        bad = self.client.post("/api/auth/login", json={"email": "demo@example.com", "password": "wrong-password"})
        self.assertEqual(bad.status_code, 401)
        self.assertEqual(bad.json(), {"error": "Invalid email or password"})

        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

    def test_meal_crud(self) -> None:
        body = {
            "meal_name": "Eggs and Toast",
            "meal_type": "breakfast",
            "calories": 300,
            "protein": 18,
            "carbs": 30,
            "fats": 12,
            "meal_date": "2026-03-02",
        }
        created = self.client.post("/api/meals", json=body, headers=self.headers)
        self.assertEqual(created.status_code, 200, created.text)
        meal = created.json()
        self.assertEqual(meal["meal_name"], "Eggs and Toast")
        self.assertEqual(meal["meal_type"], "breakfast")
        self.assertEqual(meal["calories"], 300)
        self.assertEqual(meal["meal_date"], "2026-03-02")

        listed = self.client.get("/api/meals", headers=self.headers).json()
        self.assertEqual(listed["count"], 1)
        self.assertEqual(listed["items"][0]["id"], meal["id"])
        ranged = self.client.get("/api/meals", params={"start": "2026-03-03"}, headers=self.headers).json()
        self.assertEqual(ranged["count"], 0)

        # Another user can neither see nor delete it.
        other = register(self.client, email="other@example.com")
        self.assertEqual(self.client.get("/api/meals", headers=other).json()["count"], 0)
        resp = self.client.delete(f"/api/meals/{meal['id']}", headers=other)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "Meal not found"})

        self.assertEqual(self.client.delete(f"/api/meals/{meal['id']}", headers=self.headers).json(), {"status": "ok"})
        self.assertEqual(self.client.get("/api/meals", headers=self.headers).json()["count"], 0)
        self.assertEqual(self.client.delete(f"/api/meals/{meal['id']}", headers=self.headers).status_code, 404)

    def test_meal_without_date_uses_today(self) -> None:
        resp = self.client.post("/api/meals", json={"meal_name": "Apple"}, headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["meal_date"], date.today().isoformat())
        self.assertIsNone(resp.json()["calories"])

    def test_meal_validation(self) -> None:
        for body in (
            {"meal_name": "Cake", "calories": -5},
            {"meal_name": ""},
            {"meal_name": "Cake", "meal_type": "brunch"},
            {"meal_name": "Cake", "meal_date": "02/03/2026"},
        ):
            resp = self.client.post("/api/meals", json=body, headers=self.headers)
            self.assertEqual(resp.status_code, 400, body)
            data = resp.json()
            self.assertEqual(data["error"], "Invalid input format.")
            self.assertTrue(data["details"])

    def test_meal_from_food_scales_servings(self) -> None:
        resp = self.client.post(
            "/api/meals/from-food",
            json={"food": EGG, "servings": 2, "meal_type": "breakfast", "meal_date": "2026-03-02"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        meal = resp.json()
        self.assertEqual(meal["meal_name"], "Boiled Egg")
        self.assertEqual((meal["calories"], meal["protein"], meal["carbs"], meal["fats"]), (156, 13, 1, 11))
        self.assertEqual(meal["notes"], "2 x 1 large egg")

        # Halves round up: 2.5 -> 3, 0.5 -> 1, 1.5 -> 2.
        half = dict(EGG, name="Cracker", calories=5, protein=1, carbs=3, fat=1)
        resp = self.client.post(
            "/api/meals/from-food",
            json={"food": half, "servings": 0.5, "meal_type": "snack"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        meal = resp.json()
        self.assertEqual((meal["calories"], meal["protein"], meal["carbs"], meal["fats"]), (3, 1, 2, 1))
        self.assertEqual(meal["notes"], "0.5 x 1 large egg")

        bad = self.client.post(
            "/api/meals/from-food",
            json={"food": EGG, "servings": 0, "meal_type": "breakfast"},
            headers=self.headers,
        )
        self.assertEqual(bad.status_code, 400)

    def test_weekly_stats(self) -> None:
        today = date.today()
        for days_ago, calories, protein in ((0, 500, 30), (3, 700, 40.5), (10, 900, 50)):
            self.client.post(
                "/api/meals",
                json={
                    "meal_name": f"Meal {days_ago}",
                    "calories": calories,
                    "protein": protein,
                    "meal_date": (today - timedelta(days=days_ago)).isoformat(),
                },
                headers=self.headers,
            )
        stats = self.client.get("/api/meals/stats/weekly", headers=self.headers).json()
        self.assertEqual(stats["meals"], 2)
        self.assertEqual(stats["calories"], 1200)
        self.assertEqual(stats["protein"], 71)
        self.assertEqual(stats["avg_calories"], 600)
        self.assertEqual(stats["end"], today.isoformat())

    def test_audit_rows_written(self) -> None:
        from diettracker.audit.storage import list_audit_events

        meal = self.client.post("/api/meals", json={"meal_name": "Soup"}, headers=self.headers).json()
        self.client.delete(f"/api/meals/{meal['id']}", headers=self.headers)

        events = list_audit_events(user_id=self._user_id())
        self.assertEqual(sorted(e["action"] for e in events), ["create", "delete"])
        for event in events:
            self.assertEqual(event["table_name"], "meals")
            self.assertEqual(event["record_id"], meal["id"])
        delete = next(e for e in events if e["action"] == "delete")
        self.assertEqual(delete["old_data"]["meal_name"], "Soup")

    def test_audit_failure_never_blocks(self) -> None:
        from diettracker.audit.storage import log_audit_event
        from diettracker.config import settings

        blocker = self._tmp / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        with mock.patch.object(settings, "db_path", blocker / "audit.db"):
            with self.assertLogs("diettracker.audit.storage", level="WARNING") as logs:
                log_audit_event(user_id="u1", action="create", table_name="meals", record_id="m1")
        self.assertIn("audit logging failed", logs.output[0])

    def test_chat_history(self) -> None:
        for role, content in (("user", "hi"), ("assistant", "hello!"), ("user", "I ate soup")):
            resp = self.client.post("/api/chat/messages", json={"role": role, "content": content}, headers=self.headers)
            self.assertEqual(resp.status_code, 200)

        history = self.client.get("/api/chat/messages", headers=self.headers).json()
        self.assertEqual(history["count"], 3)
        self.assertEqual([m["content"] for m in history["items"]], ["hi", "hello!", "I ate soup"])

        latest = self.client.get("/api/chat/messages", params={"limit": 2}, headers=self.headers).json()
        self.assertEqual([m["content"] for m in latest["items"]], ["hello!", "I ate soup"])

        bad = self.client.post("/api/chat/messages", json={"role": "system", "content": "x"}, headers=self.headers)
        self.assertEqual(bad.status_code, 400)


if __name__ == "__main__":
    unittest.main()
