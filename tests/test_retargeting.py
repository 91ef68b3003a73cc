# -*- coding: utf-8 -*-

from __future__ import annotations

import random
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

from pydantic import ValidationError

from nutricoach.app_db import db_conn

from nutricoach.messaging.models import MessageType, SenderType
from nutricoach.messaging.render import render_template
from nutricoach.messaging.storage import insert_message, list_messages
from nutricoach.workflow import retargeting
from nutricoach.workflow.models import (
    ClientWorkflowState,
    RetargetingFrequency,
    ServiceType,
    WorkflowStage,
    WorkflowStateUpsertRequest,
)
from nutricoach.workflow.retargeting import (
    EDUCATIONAL_TEMPLATES,
    days_since,
    is_due,
    run_retargeting_sweep,
    select_message,
)
from nutricoach.workflow.storage import get_state, upsert_state
from tests.support import DatabaseTestCase

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def _state(frequency, last_sent) -> ClientWorkflowState:
    return ClientWorkflowState(
        client_id="c1",
        service_type=ServiceType.consultation,
        workflow_stage=WorkflowStage.consultation_complete,
        retargeting_enabled=True,
        retargeting_frequency=frequency,
        retargeting_last_sent=last_sent,
        updated_at=NOW.isoformat(),
    )


class TestRetargetingRules(unittest.TestCase):
    def test_days_since_floors_whole_days(self) -> None:
        last = (NOW - timedelta(days=6, hours=23)).isoformat()
        self.assertEqual(days_since(last, NOW), 6)

    def test_never_sent_is_always_due(self) -> None:
        self.assertEqual(days_since(None, NOW), float("inf"))
        self.assertTrue(is_due(_state("monthly", None), NOW))

    def test_weekly_window(self) -> None:
        self.assertFalse(is_due(_state("weekly", (NOW - timedelta(days=3)).isoformat()), NOW))
        self.assertTrue(is_due(_state("weekly", (NOW - timedelta(days=8)).isoformat()), NOW))

    def test_unknown_frequency_means_monthly(self) -> None:
        self.assertEqual(RetargetingFrequency.parse("daily"), RetargetingFrequency.monthly)
        self.assertEqual(RetargetingFrequency.parse(None).gap_days, 30)
        self.assertEqual(RetargetingFrequency.parse("bi-weekly").gap_days, 14)
        self.assertFalse(is_due(_state("daily", (NOW - timedelta(days=20)).isoformat()), NOW))

    def test_selection_avoids_recent_texts(self) -> None:
        recent = [render_template(t, {"name": "Asha"}) for t in EDUCATIONAL_TEMPLATES[:5]]
        for seed in range(20):
            chosen = select_message("Asha", recent, random.Random(seed))
            self.assertNotIn(chosen, recent)
            self.assertTrue(chosen.startswith("Hi Asha!"))

    def test_selection_falls_back_to_first_shuffled(self) -> None:
        templates = EDUCATIONAL_TEMPLATES[:2]
        recent = [render_template(t, {"name": "Asha"}) for t in templates]
        shuffled = list(templates)
        random.Random(7).shuffle(shuffled)
        chosen = select_message("Asha", recent, random.Random(7), templates=templates)
        self.assertEqual(chosen, render_template(shuffled[0], {"name": "Asha"}))


class TestRetargetingSweep(DatabaseTestCase):
    def _lead(self, name: str, *, frequency: str = "weekly", days_ago=None, **overrides) -> str:
        client_id = self.make_client(name)
        last_sent = (NOW - timedelta(days=days_ago)).isoformat() if days_ago is not None else None
        fields = dict(
            service_type=ServiceType.consultation,
            workflow_stage=WorkflowStage.consultation_complete,
            retargeting_enabled=True,
            retargeting_frequency=frequency,
            retargeting_last_sent=last_sent,
        )
        fields.update(overrides)
        upsert_state(client_id, WorkflowStateUpsertRequest(**fields))
        return client_id

    def test_sweep_sends_to_due_clients_only(self) -> None:
        due = self._lead("Due", days_ago=8)
        recent = self._lead("Recent", days_ago=3)

        summary = run_retargeting_sweep(now=NOW, rng=random.Random(1))

        self.assertEqual(summary.eligible, 2)
        self.assertEqual(summary.sent, 1)
        statuses = {r.client_id: r.status for r in summary.results}
        self.assertEqual(statuses, {due: "success", recent: "skipped"})

        messages = list_messages(due, message_type=MessageType.retargeting)
        self.assertEqual(len(messages), 1)
        self.assertEqual(messages[0].sender_type, SenderType.system)
        self.assertTrue(messages[0].content.startswith("Hi Due!"))

        state = get_state(due)
        self.assertEqual(state.workflow_stage, WorkflowStage.soft_retargeting_active)
        self.assertEqual(state.retargeting_last_sent, NOW.isoformat())
        self.assertEqual(list_messages(recent), [])

    def test_ineligible_rows_are_ignored(self) -> None:
        self._lead("Disabled", retargeting_enabled=False)
        self._lead("Program", service_type=ServiceType.hundred_days)
        self._lead("Active", workflow_stage=WorkflowStage.program_active)

        summary = run_retargeting_sweep(now=NOW)

        self.assertEqual(summary.eligible, 0)
        self.assertEqual(summary.results, [])

    def test_sweep_does_not_repeat_recent_message(self) -> None:
        client_id = self._lead("Asha", days_ago=None)
        sent_before = render_template(EDUCATIONAL_TEMPLATES[0], {"name": "Asha"})
        insert_message(
            client_id=client_id,
            sender_type=SenderType.system,
            message_type=MessageType.retargeting,
            content=sent_before,
        )

        run_retargeting_sweep(now=NOW, rng=random.Random(3))

        latest = list_messages(client_id, message_type=MessageType.retargeting)[0]
        self.assertNotEqual(latest.content, sent_before)

    def test_failure_for_one_client_does_not_stop_the_sweep(self) -> None:
        first = self._lead("First")
        second = self._lead("Second")
        real_send = retargeting._send_one

        def flaky(state, name, now, rng):
            if state.client_id == first:
                raise RuntimeError("boom")
            return real_send(state, name, now, rng)

        with mock.patch.object(retargeting, "_send_one", side_effect=flaky):
            summary = run_retargeting_sweep(now=NOW)

        by_client = {r.client_id: r for r in summary.results}
        self.assertEqual(by_client[first].status, "error")
        self.assertEqual(by_client[first].error, "boom")
        self.assertEqual(by_client[second].status, "success")
        self.assertEqual(summary.sent, 1)

    def test_unreadable_last_sent_is_reported_per_client(self) -> None:
        broken = self._lead("Broken", days_ago=1)
        healthy = self._lead("Healthy")
        with db_conn() as conn:
            conn.execute(
                "UPDATE client_workflow_state SET retargeting_last_sent = ? WHERE client_id = ?",
                ("last tuesday", broken),
            )

        summary = run_retargeting_sweep(now=NOW)

        by_client = {r.client_id: r for r in summary.results}
        self.assertEqual(by_client[broken].status, "error")
        self.assertIn("last tuesday", by_client[broken].error)
        self.assertEqual(by_client[healthy].status, "success")
        self.assertEqual(summary.sent, 1)
        self.assertEqual(list_messages(broken), [])
        self.assertEqual(len(list_messages(healthy)), 1)

    def test_last_sent_must_be_a_timestamp(self) -> None:
        with self.assertRaises(ValidationError):
            WorkflowStateUpsertRequest(
                service_type=ServiceType.consultation,
                workflow_stage=WorkflowStage.consultation_complete,
                retargeting_last_sent="last tuesday",
            )


if __name__ == "__main__":
    unittest.main()
