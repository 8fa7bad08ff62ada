from __future__ import annotations

WIDGET_TYPES: tuple[str, ...] = (
    "text-input",
    "button-group",
    "select",
    "select-multi",
    "slider",
    "form",
    "chart-line",
    "chart-bar",
    "chart-pie",
    "chart-scatter",
    "multiple-choice-question",
    "short-answer-question",
    "quiz",
)

CHART_TYPES: tuple[str, ...] = ("chart-line", "chart-bar", "chart-pie", "chart-scatter")

QUESTION_TYPES: tuple[str, ...] = ("mcq", "short-answer")

CHART_CONFIG_KEYS = frozenset({"id", "title", "height"})

# Form children are written with exactly this prefix.
FORM_FIELD_INDENT = "  "

PENDING_ID = "pending"
PENDING_QUIZ_TITLE = "Loading..."
PENDING_QUESTION_TEXT = "Loading question..."
PENDING_STUB_QUESTION_TEXT = "Loading..."
