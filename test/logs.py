"""
Logs module behavioral tests (structlog wiring, opt-in configuration).

Scope
- Validate that configure_logging() renders engine events (JSON lines).
- Validate level filtering and handler replacement.
- Validate argument checking.

Conventions
- Test method names follow CamelCase per project convention.
- Every test restores a muted configuration in tearDown.
"""

from __future__ import annotations

import io
import json
import logging
import unittest
from contextlib import redirect_stderr
from unittest import TestCase

from argot import parse
from argot.faults import MalformedValueError
from argot.logs import configure_logging, get_logger


def _events(buffer):
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]


class TestConfigureLogging(TestCase):
    """Behavioral tests for configure_logging() and get_logger()."""

    def tearDown(self):
        configure_logging("CRITICAL")

    def testParseFailureIsLogged(self):
        buffer = io.StringIO()
        with redirect_stderr(buffer):
            configure_logging("DEBUG", json=True)
            with self.assertRaises(MalformedValueError):
                parse({"name": "age", "args": [{"name": "value", "type": "int"}]}, "x")

        events = {event["event"]: event for event in _events(buffer)}
        self.assertIn("parse_started", events)
        failure = events["parse_failed"]
        self.assertEqual(failure["command"], "age")
        self.assertEqual(failure["code"], "MALFORMED_VALUE")
        self.assertEqual(failure["column"], 1)
        self.assertEqual(failure["level"], "debug")
        self.assertEqual(failure["logger"], "argot.parsing")
        self.assertIn("timestamp", failure)

    def testLevelFiltersEvents(self):
        buffer = io.StringIO()
        with redirect_stderr(buffer):
            configure_logging("warning", json=True)
            parse({"name": "ping"}, "")
            get_logger("argot.test").warning("disk_full", free=0)

        events = _events(buffer)
        self.assertEqual([event["event"] for event in events], ["disk_full"])
        self.assertEqual(events[0]["free"], 0)

    def testNumericLevel(self):
        configure_logging(logging.ERROR)
        self.assertEqual(logging.getLogger("argot").level, logging.ERROR)

    def testHandlerIsReplaced(self):
        configure_logging("INFO")
        configure_logging("DEBUG")
        streams = [handler for handler in logging.getLogger("argot").handlers if isinstance(handler, logging.StreamHandler)]
        self.assertEqual(len(streams), 1)
        self.assertFalse(logging.getLogger("argot").propagate)

    def testConsoleRenderer(self):
        buffer = io.StringIO()
        with redirect_stderr(buffer):
            configure_logging("INFO").info("ready", engine="argot")
        self.assertIn("ready", buffer.getvalue())
        self.assertIn("engine", buffer.getvalue())

    def testArgumentChecks(self):
        with self.assertRaises(TypeError):
            configure_logging(1.5)  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            get_logger(1)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
