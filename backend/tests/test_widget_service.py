from __future__ import annotations

import unittest

from pydantic import ValidationError

from backend.app.main import (
    TELEMETRY,
    build_widget_parse,
    build_widget_parse_streaming,
    get_telemetry,
    get_widget_types,
    post_widget_parse,
    post_widget_parse_streaming,
)
from backend.app.services.widget_service import WidgetService
from backend.app.telemetry import Telemetry
from backend.app.widget_models import WidgetParseRequest


class WidgetServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        TELEMETRY.enabled = True
        TELEMETRY.reset()

    def test_build_widget_parse_records_success(self) -> None:
        result = build_widget_parse(source_text='quiz math "Math Quiz"\nmcq q1 "Question?" 10 [A B] A')
        self.assertTrue(result.success)

        counters = TELEMETRY.snapshot()["counters"]
        self.assertEqual(counters["widget.parse.total"], 1)
        self.assertEqual(counters["widget.parse.success"], 1)
        self.assertEqual(counters["widget.type.quiz"], 1)
        self.assertNotIn("widget.parse.failure", counters)

    def test_build_widget_parse_records_failure(self) -> None:
        result = build_widget_parse(source_text="unknown-widget id")
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Unknown widget type: unknown-widget")

        counters = TELEMETRY.snapshot()["counters"]
        self.assertEqual(counters["widget.parse.failure"], 1)
        self.assertEqual(counters["widget.parse.ok"], 1)

    def test_build_widget_parse_streaming_outcomes(self) -> None:
        build_widget_parse_streaming(source_text="button-group env [dev staging")
        build_widget_parse_streaming(source_text="button-group env [dev staging]")
        build_widget_parse_streaming(source_text="bu")
        build_widget_parse_streaming(source_text="nonsense")

        counters = TELEMETRY.snapshot()["counters"]
        self.assertEqual(counters["widget.parse_streaming.total"], 4)
        self.assertEqual(counters["widget.parse_streaming.partial"], 1)
        self.assertEqual(counters["widget.parse_streaming.complete"], 1)
        self.assertEqual(counters["widget.parse_streaming.undetected"], 2)
        self.assertEqual(counters["widget.type.button-group"], 2)

    def test_post_endpoints_return_camel_case_payloads(self) -> None:
        payload = post_widget_parse(WidgetParseRequest(source_text='form deploy "Ship it"\n  text-input name'))
        self.assertTrue(payload["success"])
        self.assertEqual(payload["widget"]["submitLabel"], "Ship it")
        self.assertNotIn("error", payload)

        payload = post_widget_parse_streaming(WidgetParseRequest(source_text='quiz math "Math Quiz"'))
        self.assertFalse(payload["complete"])
        self.assertEqual(payload["detectedType"], "quiz")
        self.assertTrue(payload["widget"]["_streaming"])
        self.assertTrue(payload["pending"]["awaitingQuestions"])

    def test_request_rejects_empty_source(self) -> None:
        with self.assertRaises(ValidationError):
            WidgetParseRequest(source_text="")

    def test_widget_types_and_telemetry_routes(self) -> None:
        self.assertEqual(len(get_widget_types()), 13)
        self.assertIn("short-answer-question", get_widget_types())

        build_widget_parse(source_text="text-input a")
        snapshot = get_telemetry()
        self.assertIn("widget.parse", snapshot["avg_latency_ms"])

    def test_disabled_telemetry_counts_nothing(self) -> None:
        telemetry = Telemetry(enabled=False)
        service = WidgetService(telemetry)
        self.assertTrue(service.build_parse(source_text="text-input a").success)
        self.assertEqual(telemetry.snapshot(), {"counters": {}, "avg_latency_ms": {}})


if __name__ == "__main__":
    unittest.main()
