from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .services.widget_service import WidgetService
from .telemetry import TELEMETRY
from .widget_catalog import WIDGET_TYPES
from .widget_models import ParseResult, StreamingParseResult, WidgetParseRequest, dump_payload

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent


def load_project_env(path: Path) -> None:
    if not path.exists():
        return

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
            value = value[1:-1]
        os.environ.setdefault(key, value)


def resolve_cors_origins() -> list[str]:
    raw = os.getenv("MDUI_CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


load_project_env(PROJECT_ROOT / ".env")
logging.basicConfig(level=os.getenv("MDUI_LOG_LEVEL", "INFO").upper())
TELEMETRY.enabled = os.getenv("MDUI_TELEMETRY_ENABLED", "1") == "1"

WIDGET_SERVICE = WidgetService(TELEMETRY)

app = FastAPI(title="Markdown UI Widget DSL API", version="0.3.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=resolve_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/widgets/types")
def get_widget_types() -> list[str]:
    return list(WIDGET_TYPES)


@app.get("/telemetry")
def get_telemetry() -> dict[str, object]:
    return TELEMETRY.snapshot()


def build_widget_parse(*, source_text: str) -> ParseResult:
    return WIDGET_SERVICE.build_parse(source_text=source_text)


def build_widget_parse_streaming(*, source_text: str) -> StreamingParseResult:
    return WIDGET_SERVICE.build_parse_streaming(source_text=source_text)


@app.post("/widgets/parse")
def post_widget_parse(request: WidgetParseRequest) -> dict[str, Any]:
    return dump_payload(build_widget_parse(source_text=request.source_text))


@app.post("/widgets/parse-streaming")
def post_widget_parse_streaming(request: WidgetParseRequest) -> dict[str, Any]:
    return dump_payload(build_widget_parse_streaming(source_text=request.source_text))
