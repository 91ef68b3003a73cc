# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import unittest

from nutricoach.ai.client import MOCK_NOTICE, build_ai_client
from nutricoach.assessments.intake import map_form_data, submit_client_assessment
from nutricoach.assessments.models import AssessmentKind, AssessmentType, RequestStatus
from nutricoach.assessments.service import request_assessment
from nutricoach.assessments.storage import get_request, latest_assessment
from nutricoach.cards.health import generate_health_card
from nutricoach.cards.models import CardStatus, CardType
from nutricoach.cards.storage import get_card, list_active_cards
from nutricoach.clients.models import DailyLogRequest
from nutricoach.clients.storage import add_daily_log
from nutricoach.errors import (
    AIProviderError,
    ClientNotFound,
    GenerationFailed,
    RequestNotFound,
    UnknownAssessmentType,
)
from nutricoach.messaging.models import MessageType
from nutricoach.messaging.storage import list_messages
from nutricoach.workflow.models import WorkflowStage
from tests.support import DatabaseTestCase, ScriptedAI, factory_for


class TestFormMapping(unittest.TestCase):
    def test_sleep_keys(self) -> None:
        mapped = map_form_data(
            AssessmentType.sleep_assessment,
            {
                "actual_sleep_hours": 6,
                "bedtime_usual": "23:30",
                "wake_time_usual": "06:30",
                "overall_sleep_quality_rating": 4,
                "daytime_sleepiness_frequency": 7,
            },
        )
        self.assertEqual(mapped["sleepHours"], 6)
        self.assertEqual(mapped["sleepTime"], "23:30")
        self.assertEqual(mapped["wakeTime"], "06:30")
        self.assertEqual(mapped["sleepQuality"], 4)
        self.assertEqual(mapped["energyLevels"], 7)
        self.assertEqual(mapped["actual_sleep_hours"], 6)

    def test_stress_defaults(self) -> None:
        mapped = map_form_data(AssessmentType.stress_assessment, {"stress_level_general": 8})
        self.assertEqual(mapped["workStressLevel"], 8)
        self.assertEqual(mapped["sleepQuality"], 5)
        self.assertEqual(mapped["stressTriggers"], "Not specified")
        self.assertEqual(mapped["copingMechanisms"], "None")
        self.assertEqual(mapped["physicalSymptoms"], "None")

    def test_health_keys(self) -> None:
        mapped = map_form_data(
            AssessmentType.health_assessment,
            {"average_sleep_hours": 7, "daily_stress_level": 6, "consistent_sleep_schedule": "yes"},
        )
        self.assertEqual(mapped["sleep_hours"], 7)
        self.assertEqual(mapped["stress_level"], 6)
        self.assertEqual(mapped["medical_conditions"], "None")
        self.assertTrue(mapped["fixed_sleep_time"])

    def test_unknown_type(self) -> None:
        with self.assertRaises(UnknownAssessmentType):
            AssessmentType.parse("diet_assessment")
        self.assertEqual(AssessmentType.parse("sleep_assessment").kind, AssessmentKind.sleep)


class TestIntakeHandler(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client_id = self.make_client("Asha", age=34, gender="female", goals="Lose 5 kg")
        self.request = request_assessment(client_id=self.client_id, assessment_type="stress_assessment")

    def _submit(self, assessment_type: str, ai_factory, form_data=None, request_id=None):
        return submit_client_assessment(
            request_id=request_id or self.request.id,
            assessment_type=assessment_type,
            client_id=self.client_id,
            client_name="Asha",
            form_data=form_data or {"stress_level_work": 7},
            ai_factory=ai_factory,
        )

    def test_request_creates_message(self) -> None:
        self.assertEqual(self.request.status, RequestStatus.pending)
        self.assertEqual(self.request.assessment_type, AssessmentKind.stress)
        messages = list_messages(self.client_id, message_type=MessageType.assessment_request)
        self.assertEqual(len(messages), 1)
        self.assertIn("Stress Assessment Requested", messages[0].content)
        self.assertEqual(messages[0].metadata["request_id"], self.request.id)
        self.assertEqual(messages[0].metadata["assessment_type"], "stress_assessment")

    def test_request_for_unknown_client(self) -> None:
        with self.assertRaises(ClientNotFound):
            request_assessment(client_id="missing", assessment_type="health_assessment")

    def test_unknown_type_rejected_before_mutation(self) -> None:
        ai = ScriptedAI()
        with self.assertRaises(UnknownAssessmentType):
            self._submit("diet_assessment", factory_for(ai))
        self.assertEqual(get_request(self.request.id).status, RequestStatus.pending)
        self.assertEqual(ai.calls, [])
        self.assertEqual(list_active_cards(), [])

    def test_missing_request_fails_fast(self) -> None:
        ai = ScriptedAI(["report"])
        with self.assertRaises(RequestNotFound):
            self._submit("stress_assessment", factory_for(ai), request_id="nope")
        self.assertEqual(ai.calls, [])

    def test_stress_submission_creates_pending_card(self) -> None:
        ai = ScriptedAI(["## Stress report\nBreathe."])
        card = self._submit("stress_assessment", factory_for(ai))

        self.assertEqual(get_request(self.request.id).status, RequestStatus.completed)
        stored = get_card(card.card_id)
        self.assertEqual(stored.card_type, CardType.stress_card)
        self.assertEqual(stored.status, CardStatus.pending)
        self.assertEqual(stored.workflow_stage, WorkflowStage.stress_card_sent)
        self.assertEqual(stored.generated_content["assessment_text"], "## Stress report\nBreathe.")
        self.assertEqual(stored.generated_content["form_responses"]["workStressLevel"], 7)

        assessment = latest_assessment(self.client_id, AssessmentKind.stress)
        self.assertEqual(assessment.assessment_data, {"report": "## Stress report\nBreathe."})
        self.assertTrue(assessment.ai_generated)
        prompt = ai.calls[0]["messages"][-1]["content"]
        self.assertIn("Work Stress Level: 7/10", prompt)

    def test_mock_report_is_labelled(self) -> None:
        card = self._submit("sleep_assessment", build_ai_client, form_data={"actual_sleep_hours": 5})

        self.assertFalse(card.ai_generated)
        self.assertIs(card.content["ai_generated"], False)
        self.assertIn("(Mock)", card.content["assessment_text"])
        self.assertIn(MOCK_NOTICE, card.content["assessment_text"])
        self.assertFalse(latest_assessment(self.client_id, AssessmentKind.sleep).ai_generated)

    def test_generation_failure_keeps_request_completed(self) -> None:
        class FailingAI(ScriptedAI):
            def chat(self, messages, *, json_mode=False):
                raise AIProviderError("AI generation failed: 500", status_code=500)

        with self.assertRaises(GenerationFailed) as ctx:
            self._submit("stress_assessment", factory_for(FailingAI()))

        self.assertEqual(
            ctx.exception.message,
            "Assessment saved, but AI generation failed: AI generation failed: 500",
        )
        self.assertIn("Please contact support", ctx.exception.hint)
        self.assertEqual(get_request(self.request.id).status, RequestStatus.completed)
        self.assertEqual(list_active_cards(), [])

    def test_health_without_credentials_fails(self) -> None:
        with self.assertRaises(GenerationFailed) as ctx:
            self._submit("health_assessment", build_ai_client, form_data={"height": 165})
        self.assertIn("OPENAI_API_KEY not configured", ctx.exception.message)

    def test_health_card_uses_computed_metrics(self) -> None:
        reply = "```json\n" + json.dumps(
            {"key_findings": {"bmi": 99, "bmr": 1}, "summary": "Looks fine", "recommendations": ["walk"]}
        ) + "\n```"
        ai = ScriptedAI([reply])
        card = self._submit(
            "health_assessment",
            factory_for(ai),
            form_data={"height": 170, "weight": 70, "average_sleep_hours": 6},
        )

        findings = card.content["key_findings"]
        self.assertEqual(findings["bmi"], 24.2)
        # female, 34 y: 700 + 1062.5 - 170 - 161
        self.assertEqual(findings["bmr"], 1432)
        self.assertEqual(findings["ideal_weight"], 65.0)
        self.assertEqual(findings["protein_intake"], 91.0)
        self.assertEqual(card.content["summary"], "Looks fine")
        self.assertEqual(card.content["lifestyle_patterns"]["sleep_hours"], 6)
        self.assertTrue(ai.calls[0]["json_mode"])

        stored = get_card(card.card_id)
        self.assertEqual(stored.workflow_stage, WorkflowStage.health_assessment_generated)
        self.assertEqual(stored.client_name, "Asha")

    def test_health_card_keeps_unparseable_reply(self) -> None:
        ai = ScriptedAI(["Plain prose, no JSON at all."])
        card = self._submit("health_assessment", factory_for(ai), form_data={})
        self.assertEqual(card.content["ai_analysis"], "Plain prose, no JSON at all.")
        self.assertEqual(card.content["key_findings"]["height"], 170.0)


class TestHealthCardInputs(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client_id = self.make_client("Ravi", age=30)
        add_daily_log(self.client_id, DailyLogRequest(log_date="2026-03-01", weight_kg=70))

    def _generate(self, form_data):
        ai = ScriptedAI(['{"summary": "ok"}'])
        return generate_health_card(client_id=self.client_id, client_name="Ravi", form_data=form_data, ai=ai)

    def test_submitted_weight_beats_the_daily_log(self) -> None:
        card = self._generate({"height": 170, "weight": 90, "gender": "male"})
        findings = card.content["key_findings"]
        self.assertEqual(findings["weight"], 90.0)
        self.assertEqual(findings["bmi"], 31.1)
        # male, 30 y: 900 + 1062.5 - 150 + 5
        self.assertEqual(findings["bmr"], 1818)

    def test_daily_log_fills_a_missing_weight(self) -> None:
        card = self._generate({"height": 170, "gender": "male"})
        self.assertEqual(card.content["key_findings"]["weight"], 70.0)
        self.assertEqual(card.content["key_findings"]["bmr"], 1618)

    def test_form_gender_is_case_insensitive(self) -> None:
        card = self._generate({"height": 170, "weight": 70, "gender": " Male "})
        self.assertEqual(card.content["key_findings"]["bmr"], 1618)
        self.assertEqual(card.content["client_details"]["gender"], "male")


if __name__ == "__main__":
    unittest.main()
