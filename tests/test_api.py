# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from nutricoach.ai.client import get_ai_factory
from nutricoach.api import app
from tests.support import DatabaseTestCase, ScriptedAI, factory_for


class ApiTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.ai = ScriptedAI()
        app.dependency_overrides[get_ai_factory] = lambda: factory_for(self.ai)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self.client.close()
        app.dependency_overrides.clear()
        super().tearDown()

    def create_client(self, name: str = "Asha", **fields) -> str:
        resp = self.client.put("/api/clients", json={"name": name, **fields})
        self.assertEqual(resp.status_code, 200)
        return resp.json()["id"]

    def call(self, name: str, payload: dict) -> dict:
        resp = self.client.post(f"/api/functions/{name}", json=payload)
        self.assertEqual(resp.status_code, 200)
        return resp.json()


class TestFunctionEnvelope(ApiTestCase):
    def test_health_endpoint(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")

    def test_validation_errors_use_the_envelope(self) -> None:
        body = self.call("send-card-to-client", {})
        self.assertFalse(body["success"])
        self.assertTrue(body["error"].startswith("Invalid request:"))

    def test_not_found_uses_the_envelope(self) -> None:
        body = self.call("send-card-to-client", {"card_id": "missing"})
        self.assertEqual(body, {"success": False, "error": "Card not found: missing"})

    def test_unknown_assessment_type(self) -> None:
        client_id = self.create_client()
        body = self.call("request-assessment", {"client_id": client_id, "assessment_type": "mood"})
        self.assertFalse(body["success"])
        self.assertEqual(body["error"], "Unknown assessment type: mood")

    def test_cors_preflight(self) -> None:
        resp = self.client.options(
            "/api/functions/send-card-to-client",
            headers={"Origin": "https://coach.example", "Access-Control-Request-Method": "POST"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertIn("access-control-allow-origin", resp.headers)


class TestAssessmentFlow(ApiTestCase):
    def test_request_submit_review_and_send(self) -> None:
        client_id = self.create_client()

        body = self.call("request-assessment", {"client_id": client_id, "assessment_type": "sleep_assessment"})
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Assessment request sent to client successfully")
        request_id = body["data"]["request"]["id"]

        self.ai.replies.append("## Sleep report\nGo to bed earlier.")
        body = self.call(
            "submit-client-assessment",
            {
                "request_id": request_id,
                "assessment_type": "sleep_assessment",
                "client_id": client_id,
                "client_name": "Asha",
                "form_data": {"actual_sleep_hours": 5, "bedtime_usual": "01:00"},
            },
        )
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Assessment submitted and generated successfully.")
        card_id = body["data"]["card_id"]

        resp = self.client.get("/api/review/cards")
        self.assertEqual(resp.status_code, 200)
        listing = resp.json()
        self.assertEqual(listing["count"], 1)
        self.assertEqual(listing["cards"][0]["client_name"], "Asha")
        self.assertEqual(listing["cards"][0]["card_type"], "sleep_card")

        resp = self.client.patch(
            f"/api/review/cards/{card_id}",
            json={"generated_content": {"assessment_text": "Reviewed report"}},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "edited")

        body = self.call("send-card-to-client", {"card_id": card_id, "reviewed_by": "coach-1"})
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Sleep Quality Card sent to Asha")

        self.assertEqual(self.client.get("/api/review/cards").json()["count"], 0)
        resp = self.client.patch(f"/api/review/cards/{card_id}", json={"generated_content": {}})
        self.assertEqual(resp.status_code, 409)

        messages = self.client.get(f"/api/messages/{client_id}").json()["messages"]
        self.assertEqual([m["message_type"] for m in messages], ["automated", "assessment_request"])

        statuses = self.client.get(f"/api/clients/{client_id}/assessment-requests").json()
        self.assertEqual(statuses[0]["status"], "completed")

    def test_direct_report_generation(self) -> None:
        client_id = self.create_client()
        self.ai.replies.extend(["## Stress report", "## Sleep report"])

        for name, card_type, stage in (
            ("generate-stress-assessment", "stress_card", "stress_card_sent"),
            ("generate-sleep-assessment", "sleep_card", "sleep_card_sent"),
        ):
            with self.subTest(endpoint=name):
                body = self.call(name, {"client_id": client_id, "client_name": "Asha", "form_data": {}})
                self.assertTrue(body["success"])
                self.assertEqual(body["data"]["card_type"], card_type)
                card = self.client.get(f"/api/review/cards/{body['data']['card_id']}").json()
                self.assertEqual(card["workflow_stage"], stage)
                self.assertEqual(card["status"], "pending")

    def test_generation_failure_message(self) -> None:
        client_id = self.create_client()
        request_id = self.call(
            "request-assessment", {"client_id": client_id, "assessment_type": "health_assessment"}
        )["data"]["request"]["id"]

        # no scripted reply: the stub raises
        body = self.call(
            "submit-client-assessment",
            {
                "request_id": request_id,
                "assessment_type": "health_assessment",
                "client_id": client_id,
                "client_name": "Asha",
                "form_data": {},
            },
        )
        self.assertFalse(body["success"])
        self.assertTrue(body["error"].startswith("Assessment saved, but AI generation failed:"))
        self.assertEqual(body["message"], "Assessment saved, but AI generation failed. Please contact support.")


class TestResourceEndpoints(ApiTestCase):
    def test_missing_client_is_404(self) -> None:
        resp = self.client.get("/api/clients/missing")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Client not found: missing")

    def test_templates_and_automated_message(self) -> None:
        client_id = self.create_client()
        resp = self.client.put(
            "/api/templates",
            json={"name": "welcome", "template": "Welcome {name}! Call on {day}. Bye {name}.", "trigger_event": "signup"},
        )
        self.assertEqual(resp.status_code, 200)

        body = self.call(
            "send-automated-message",
            {"client_id": client_id, "template_name": "welcome", "variables": {"name": "Asha"}},
        )
        self.assertTrue(body["success"])
        message = body["data"]["message"]
        self.assertEqual(message["content"], "Welcome Asha! Call on {day}. Bye Asha.")
        self.assertEqual(message["message_type"], "manual")
        self.assertEqual(message["metadata"]["trigger_event"], "signup")

        body = self.call(
            "send-automated-message",
            {"client_id": client_id, "template_name": "missing", "variables": {}},
        )
        self.assertEqual(body["error"], "Template not found")

    def test_mark_message_read(self) -> None:
        client_id = self.create_client()
        self.client.put("/api/templates", json={"name": "hi", "template": "Hi"})
        message_id = self.call(
            "send-automated-message", {"client_id": client_id, "template_name": "hi"}
        )["data"]["message"]["id"]

        self.assertEqual(self.client.post(f"/api/messages/{message_id}/read").status_code, 200)
        self.assertTrue(self.client.get(f"/api/messages/{client_id}").json()["messages"][0]["is_read"])
        self.assertEqual(self.client.post("/api/messages/missing/read").status_code, 404)

    def test_push_notification(self) -> None:
        client_id = self.create_client()
        body = self.call("send-push-notification", {"client_id": client_id, "title": "Hi", "body": "There"})
        self.assertEqual(body["data"], {"sent": 0, "total": 0})

        resp = self.client.post(
            "/api/push/subscriptions",
            json={"client_id": client_id, "endpoint": "https://push.example/a", "p256dh": "k", "auth": "a"},
        )
        self.assertEqual(resp.status_code, 200)

        body = self.call("send-push-notification", {"client_id": client_id, "title": "Hi", "body": "There"})
        self.assertEqual(body["error"], "Push notifications not configured")

        from nutricoach.config import settings

        settings.vapid_public_key = "pub"
        settings.vapid_private_key = "priv"
        body = self.call("send-push-notification", {"client_id": client_id, "title": "Hi", "body": "There"})
        self.assertEqual(body["data"], {"sent": 1, "total": 1})


class TestWorkflowEndpoints(ApiTestCase):
    def test_state_trigger_and_retargeting(self) -> None:
        client_id = self.create_client("Ravi")
        last_sent = (datetime.now(timezone.utc) - timedelta(days=10)).isoformat()
        resp = self.client.put(
            f"/api/workflow/{client_id}",
            json={
                "service_type": "consultation",
                "workflow_stage": "consultation_complete",
                "retargeting_enabled": True,
                "retargeting_frequency": "weekly",
                "retargeting_last_sent": last_sent,
            },
        )
        self.assertEqual(resp.status_code, 200)

        body = self.call("send-retargeting-messages", {})
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["sent"], 1)
        self.assertEqual(body["data"]["results"][0]["status"], "success")

        state = self.client.get(f"/api/workflow/{client_id}").json()
        self.assertEqual(state["workflow_stage"], "soft_retargeting_active")

        body = self.call("send-retargeting-messages", {})
        self.assertEqual(body["data"]["sent"], 0)
        self.assertEqual(body["data"]["results"][0]["status"], "skipped")

        body = self.call("trigger-workflow-stage", {"client_id": client_id, "stage": "consultation_scheduled"})
        self.assertEqual(body["data"]["next_action"], "send_health_assessment")
        history = self.client.get(f"/api/workflow/{client_id}/history").json()
        self.assertEqual(history[0]["action"], "Manual trigger: consultation_scheduled")

    def test_workflow_automation_endpoint(self) -> None:
        client_id = self.create_client("Asha")
        self.client.put(
            f"/api/workflow/{client_id}",
            json={"service_type": "hundred_days", "workflow_stage": "consultation_scheduled"},
        )
        self.call("trigger-workflow-stage", {"client_id": client_id, "stage": "health_assessment_sent"})

        body = self.call("process-workflow-automation", {})
        self.assertTrue(body["success"])
        # next action is scheduled hours ahead
        self.assertEqual(body["data"], {"processed": 0, "results": []})

    def test_daily_motivation_endpoint(self) -> None:
        client_id = self.create_client("Asha")
        body = self.call("daily-motivation-sender", {})
        self.assertFalse(body["success"])
        self.assertEqual(body["error"], "No active templates for trigger event: daily_morning")

        self.client.put(
            "/api/templates",
            json={"name": "sunrise", "template": "Morning {name}!", "trigger_event": "daily_morning"},
        )
        body = self.call("daily-motivation-sender", {})
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["sent"], 1)
        messages = self.client.get(f"/api/messages/{client_id}", params={"message_type": "motivation"}).json()
        self.assertEqual(messages["messages"][0]["content"], "Morning Asha!")

    def test_unknown_stage_is_rejected(self) -> None:
        body = self.call("trigger-workflow-stage", {"client_id": "x", "stage": "done"})
        self.assertFalse(body["success"])
        self.assertIn("stage", body["error"])

    def test_unparseable_last_sent_is_rejected(self) -> None:
        client_id = self.create_client()
        resp = self.client.put(
            f"/api/workflow/{client_id}",
            json={
                "service_type": "consultation",
                "workflow_stage": "consultation_complete",
                "retargeting_last_sent": "last tuesday",
            },
        )
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(self.client.get(f"/api/workflow/{client_id}").status_code, 404)

    def test_missing_state_is_404(self) -> None:
        client_id = self.create_client()
        self.assertEqual(self.client.get(f"/api/workflow/{client_id}").status_code, 404)


if __name__ == "__main__":
    unittest.main()
