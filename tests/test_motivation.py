# -*- coding: utf-8 -*-

from __future__ import annotations

import random
import unittest

from nutricoach.clients.models import ClientStatus
from nutricoach.errors import NoActiveTemplates
from nutricoach.messaging.models import MessageType, SenderType
from nutricoach.messaging.motivation import send_daily_motivation
from nutricoach.messaging.storage import list_messages, upsert_template
from tests.support import DatabaseTestCase


class TestDailyMotivation(DatabaseTestCase):
    def test_every_active_client_gets_one_message(self) -> None:
        upsert_template(name="sunrise", template="Good morning {name}!", trigger_event="daily_morning")
        upsert_template(name="coffee", template="Rise and shine, {name}.", trigger_event="daily_morning")
        upsert_template(name="evening", template="Good night {name}", trigger_event="daily_evening")
        upsert_template(name="retired", template="Old {name}", trigger_event="daily_morning", is_active=False)
        asha = self.make_client("Asha")
        ravi = self.make_client("Ravi")
        paused = self.make_client("Paused", status=ClientStatus.inactive)

        summary = send_daily_motivation(rng=random.Random(5))

        self.assertEqual(summary.sent, 2)
        self.assertEqual(summary.clients_reached, 2)
        self.assertEqual(summary.message, "Sent 2 morning motivation messages")
        self.assertEqual(list_messages(paused), [])
        for client_id, name in ((asha, "Asha"), (ravi, "Ravi")):
            messages = list_messages(client_id)
            self.assertEqual(len(messages), 1)
            message = messages[0]
            self.assertEqual(message.message_type, MessageType.motivation)
            self.assertEqual(message.sender_type, SenderType.system)
            self.assertIn(message.content, {f"Good morning {name}!", f"Rise and shine, {name}."})
            self.assertIn(message.metadata["template_name"], {"sunrise", "coffee"})

    def test_no_active_clients(self) -> None:
        upsert_template(name="sunrise", template="Good morning {name}!", trigger_event="daily_morning")
        summary = send_daily_motivation()
        self.assertEqual(summary.sent, 0)
        self.assertEqual(summary.message, "No active clients to send messages to")

    def test_missing_templates(self) -> None:
        client_id = self.make_client("Asha")
        with self.assertRaises(NoActiveTemplates):
            send_daily_motivation()
        self.assertEqual(list_messages(client_id), [])


if __name__ == "__main__":
    unittest.main()
