from __future__ import annotations

import logging

from ..telemetry import TELEMETRY, Telemetry
from ..widget_models import ParseResult, StreamingParseResult
from ..widget_parser import parse_widget
from ..widget_streaming import parse_widget_streaming

logger = logging.getLogger(__name__)


class WidgetService:
    def __init__(self, telemetry: Telemetry = TELEMETRY):
        self.telemetry = telemetry

    def build_parse(self, *, source_text: str) -> ParseResult:
        with self.telemetry.track("widget.parse"):
            result = parse_widget(source_text)

        if result.success:
            self.telemetry.record("widget.parse", "success")
            self.telemetry.record("widget.type", result.widget.type)
        else:
            self.telemetry.record("widget.parse", "failure")
            logger.info("Widget DSL parse failed: %s", result.error)
        return result

    def build_parse_streaming(self, *, source_text: str) -> StreamingParseResult:
        with self.telemetry.track("widget.parse_streaming"):
            result = parse_widget_streaming(source_text)

        if result.detected_type is None:
            self.telemetry.record("widget.parse_streaming", "undetected")
            if result.error:
                logger.info("Streaming widget DSL rejected: %s", result.error)
            return result

        self.telemetry.record("widget.type", result.detected_type)
        self.telemetry.record("widget.parse_streaming", "complete" if result.complete else "partial")
        return result
