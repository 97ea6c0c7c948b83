"""Tests for the structured JSON log formatter."""

import json
import logging
import sys
import unittest

from utils.logging import JSONFormatter


def _record(msg="hello", **extra):
    record = logging.LogRecord("test.logger", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter(unittest.TestCase):

    def test_basic_fields(self):
        data = json.loads(JSONFormatter(service="Identity API").format(_record()))

        self.assertEqual(data["message"], "hello")
        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["logger"], "test.logger")
        self.assertEqual(data["service"], "Identity API")
        self.assertTrue(data["timestamp"].endswith("Z"))

    def test_extra_fields_included(self):
        data = json.loads(JSONFormatter().format(_record(userId="u1", sessionId="s1")))
        self.assertEqual(data["userId"], "u1")
        self.assertEqual(data["sessionId"], "s1")

    def test_credentials_redacted(self):
        data = json.loads(JSONFormatter().format(_record(password="Valid1Pass!", refreshToken="r")))
        self.assertEqual(data["password"], "[redacted]")
        self.assertEqual(data["refreshToken"], "[redacted]")

    def test_exception_text(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("t", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))
        self.assertIn("RuntimeError: boom", data["exception"])
