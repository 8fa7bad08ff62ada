from __future__ import annotations

import logging
import re

from .widget_catalog import (
    CHART_TYPES,
    FORM_FIELD_INDENT,
    PENDING_ID,
    PENDING_QUESTION_TEXT,
    PENDING_QUIZ_TITLE,
    PENDING_STUB_QUESTION_TEXT,
    QUESTION_TYPES,
    WIDGET_TYPES,
)
from .widget_models import (
    McqQuestion,
    PartialChart,
    PartialForm,
    PartialQuiz,
    PendingFlags,
    ShortAnswerQuizQuestion,
    StreamingParseResult,
    WidgetStub,
)
from .widget_parser import apply_quiz_config, parse_widget, split_config_line
from .widget_tokenizer import (
    auto_complete_arrays,
    detect_pending_state,
    parse_int_prefix,
    token_at,
    tokenize,
    try_parse_array,
)

logger = logging.getLogger(__name__)

WHITESPACE_RE = re.compile(r"\s")


def leading_word(source: str) -> str:
    return WHITESPACE_RE.split(source, maxsplit=1)[0]


def is_widget_type_prefix(word: str) -> bool:
    """True while `word` could still grow into a known keyword ("qu" -> "quiz")."""
    return bool(word) and any(
        widget_type.startswith(word) and len(word) < len(widget_type) for widget_type in WIDGET_TYPES
    )


def parse_widget_streaming(text: str) -> StreamingParseResult:
    """Best-effort parse of a DSL block that may still be arriving.

    Call it again with the longer text as more arrives; nothing is kept between calls.
    `error` is only set when the leading keyword can never become a widget type.
    """
    source = text.strip()
    if not source:
        return StreamingParseResult(complete=False, error="Empty input")

    pending = detect_pending_state(source)
    word = leading_word(source)
    if word not in WIDGET_TYPES:
        if is_widget_type_prefix(word):
            return StreamingParseResult(
                complete=False,
                pending=PendingFlags(unclosed_bracket=False, unclosed_quote=False),
            )
        return StreamingParseResult(complete=False, error=f"Unknown widget type: {word}")

    if not (pending.unclosed_bracket or pending.unclosed_quote):
        result = parse_widget(source)
        if result.success:
            return StreamingParseResult(complete=True, detected_type=word, widget=result.widget)
        logger.debug("Streaming %s block not complete yet: %s", word, result.error)

    return build_partial_widget(source, word, pending)


def build_partial_widget(source: str, detected_type: str, pending: PendingFlags) -> StreamingParseResult:
    if detected_type == "quiz":
        return _build_partial_quiz(source, pending)
    elif detected_type == "form":
        return _build_partial_form(source, pending)
    elif detected_type in CHART_TYPES:
        return _build_partial_chart(source, detected_type, pending)

    if pending.unclosed_bracket:
        result = parse_widget(auto_complete_arrays(source))
        if result.success:
            return StreamingParseResult(
                complete=False,
                detected_type=detected_type,
                widget=result.widget,
                pending=PendingFlags(unclosed_bracket=True),
            )

    header = tokenize(source.split("\n")[0])
    return StreamingParseResult(
        complete=False,
        detected_type=detected_type,
        widget=WidgetStub(type=detected_type, id=token_at(header, 1) or PENDING_ID),
        pending=pending,
    )


def parse_partial_question(line: str, line_index: int) -> McqQuestion | ShortAnswerQuizQuestion | None:
    """One quiz question line with missing trailing fields defaulted; None for non-question lines."""
    tokens = tokenize(auto_complete_arrays(line))
    if not tokens or tokens[0] not in QUESTION_TYPES:
        return None

    question_type = tokens[0]
    question_id = token_at(tokens, 1) or f"q{line_index}"
    question_text = token_at(tokens, 2) or PENDING_QUESTION_TEXT
    points = parse_int_prefix(tokens[3]) if len(tokens) > 3 else None

    if question_type == "mcq":
        choices = try_parse_array(tokens[4]) if len(tokens) > 4 else []
        if choices is None:
            # Choices token is not an array yet: keep a placeholder question for the line.
            return McqQuestion(
                id=token_at(line.split(), 1) or f"q{line_index}",
                question=PENDING_STUB_QUESTION_TEXT,
                points=0,
                streaming=True,
            )
        return McqQuestion(
            id=question_id,
            question=question_text,
            points=points or 0,
            choices=choices,
            correct_answer=token_at(tokens, 5),
            streaming=len(tokens) < 5,
        )

    question = ShortAnswerQuizQuestion(
        id=question_id,
        question=question_text,
        points=points or 0,
        placeholder=token_at(tokens, 4),
        streaming=len(tokens) < 4,
    )
    if len(tokens) > 5:
        if tokens[5].startswith("["):
            question.correct_answers = try_parse_array(tokens[5])
        else:
            question.correct_answers = [tokens[5]]
    return question


def _build_partial_quiz(source: str, pending: PendingFlags) -> StreamingParseResult:
    lines = source.split("\n")
    header = tokenize(lines[0])
    widget = PartialQuiz(
        id=token_at(header, 1) or PENDING_ID,
        title=token_at(header, 2) or PENDING_QUIZ_TITLE,
        show_score=True,
        show_progress=True,
    )
    start = apply_quiz_config(widget, lines)

    for index in range(start, len(lines)):
        line = lines[index].strip()
        if not line:
            continue
        question = parse_partial_question(line, index)
        if question is not None:
            widget.questions.append(question)

    return StreamingParseResult(
        complete=False,
        detected_type="quiz",
        widget=widget,
        pending=pending.model_copy(update={"awaiting_questions": not widget.questions}),
    )


def _build_partial_form(source: str, pending: PendingFlags) -> StreamingParseResult:
    lines = source.split("\n")
    header = tokenize(lines[0])
    widget = PartialForm(id=token_at(header, 1) or PENDING_ID, submit_label=token_at(header, 2))

    for line in lines[1:]:
        if not line.startswith(FORM_FIELD_INDENT):
            continue
        result = parse_widget(auto_complete_arrays(line[len(FORM_FIELD_INDENT):]))
        if result.success:
            widget.fields.append(result.widget)

    # Further indented lines may still arrive.
    return StreamingParseResult(
        complete=False,
        detected_type="form",
        widget=widget,
        pending=pending.model_copy(update={"awaiting_fields": True}),
    )


def _build_partial_chart(source: str, detected_type: str, pending: PendingFlags) -> StreamingParseResult:
    lines = source.split("\n")
    header = tokenize(lines[0])
    widget = PartialChart(type=detected_type, id=token_at(header, 1) or PENDING_ID, title=token_at(header, 2))

    for raw_line in lines[1:]:
        line = raw_line.strip()
        if not line:
            continue
        config = split_config_line(line)
        if config is not None:
            key, value = config
            if key == "title":
                widget.title = value
            elif key == "id":
                widget.id = value
        elif "," in line:
            break

    return StreamingParseResult(
        complete=False,
        detected_type=detected_type,
        widget=widget,
        pending=pending.model_copy(update={"awaiting_data": True}),
    )
