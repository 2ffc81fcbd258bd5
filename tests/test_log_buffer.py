from __future__ import annotations

import logging
import unittest

from pickem.log_buffer import BufferHandler, install_buffer_handler


class BufferHandlerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.handler = BufferHandler(maxlen=3)
        self.logger = logging.getLogger("pickem.tests.buffer")
        self.logger.addHandler(self.handler)
        self.logger.setLevel(logging.INFO)
        self.addCleanup(self.logger.removeHandler, self.handler)

    def test_keeps_most_recent_entries_newest_first(self) -> None:
        for index in range(5):
            self.logger.info("message %s", index)

        entries = self.handler.entries()

        self.assertEqual(["message 4", "message 3", "message 2"], [e["message"] for e in entries])
        self.assertEqual("pickem.tests.buffer", entries[0]["logger"])

    def test_level_filter_and_limit(self) -> None:
        self.logger.info("fine")
        self.logger.error("broken")

        self.assertEqual(["broken"], [e["message"] for e in self.handler.entries(level="error")])
        self.assertEqual(1, len(self.handler.entries(limit=1)))
        self.assertEqual([], self.handler.entries(limit=0))

    def test_install_attaches_once(self) -> None:
        handler = install_buffer_handler()
        install_buffer_handler()
        self.assertEqual(1, logging.getLogger("pickem.ingestion.sync").handlers.count(handler))


if __name__ == "__main__":
    unittest.main()
