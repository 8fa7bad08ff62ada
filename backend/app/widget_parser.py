from __future__ import annotations

import logging

from .widget_catalog import CHART_CONFIG_KEYS, CHART_TYPES, FORM_FIELD_INDENT
from .widget_models import (
    ButtonGroupWidget,
    ChartDataset,
    ChartWidget,
    FormWidget,
    McqQuestion,
    MultipleChoiceQuestionWidget,
    ParseResult,
    PartialQuiz,
    QuizWidget,
    SelectMultiWidget,
    SelectWidget,
    ShortAnswerQuestionWidget,
    ShortAnswerQuizQuestion,
    SliderWidget,
    TextInputWidget,
    Widget,
)
from .widget_tokenizer import (
    ArraySyntaxError,
    parse_array,
    parse_int_prefix,
    parse_number_prefix,
    token_at,
    tokenize,
)

logger = logging.getLogger(__name__)


class WidgetParseError(ValueError):
    pass


def _choices(token: str, prefix: str = "Invalid choices array") -> list[str]:
    try:
        return parse_array(token)
    except ArraySyntaxError as error:
        raise WidgetParseError(f"{prefix}: {error}") from error


def split_config_line(line: str) -> tuple[str, str] | None:
    """`key: value` -> (lowercased key, value); None when the line has no colon."""
    if ":" not in line:
        return None
    key, _, value = line.partition(":")
    return key.strip().lower(), value.strip()


def parse_text_input(tokens: list[str]) -> TextInputWidget:
    if len(tokens) < 2:
        raise WidgetParseError("text-input requires at least an id")
    return TextInputWidget(
        id=tokens[1],
        label=token_at(tokens, 2),
        placeholder=token_at(tokens, 3),
        default=token_at(tokens, 4),
    )


def parse_button_group(tokens: list[str]) -> ButtonGroupWidget:
    if len(tokens) < 3:
        raise WidgetParseError("button-group requires id and choices array")
    return ButtonGroupWidget(id=tokens[1], choices=_choices(tokens[2]), default=token_at(tokens, 3))


def parse_select(tokens: list[str]) -> SelectWidget:
    if len(tokens) < 3:
        raise WidgetParseError("select requires id and choices array")
    return SelectWidget(id=tokens[1], choices=_choices(tokens[2]), default=token_at(tokens, 3))


def parse_select_multi(tokens: list[str]) -> SelectMultiWidget:
    if len(tokens) < 3:
        raise WidgetParseError("select-multi requires id and choices array")
    widget = SelectMultiWidget(id=tokens[1], choices=_choices(tokens[2], "Invalid format"))
    if len(tokens) > 3:
        if tokens[3].startswith("["):
            widget.default = _choices(tokens[3], "Invalid format")
        else:
            widget.default = tokens[3]
    return widget


def parse_slider(tokens: list[str]) -> SliderWidget:
    if len(tokens) < 5:
        raise WidgetParseError("slider requires id, min, max, step")
    bounds = [parse_number_prefix(token) for token in tokens[2:5]]
    if any(value is None for value in bounds):
        raise WidgetParseError("min, max, and step must be numbers")
    minimum, maximum, step = bounds
    # A non-numeric default is dropped rather than rejected.
    default = parse_number_prefix(tokens[5]) if len(tokens) > 5 else None
    return SliderWidget(id=tokens[1], min=minimum, max=maximum, step=step, default=default)


def parse_form(text: str) -> FormWidget:
    lines = text.split("\n")
    header = tokenize(lines[0])
    if len(header) < 2:
        raise WidgetParseError("form requires at least an id")

    widget = FormWidget(id=header[1], submit_label=token_at(header, 2))
    for line in lines[1:]:
        if not line.startswith(FORM_FIELD_INDENT):
            continue
        result = parse_widget(line[len(FORM_FIELD_INDENT):])
        if result.success:
            widget.fields.append(result.widget)
    return widget


def _parse_chart_csv(widget: ChartWidget, csv_lines: list[str]) -> None:
    if not csv_lines:
        raise WidgetParseError("No CSV data provided")

    header_line = csv_lines[0].strip()
    if not header_line:
        raise WidgetParseError("Empty CSV header")
    headers = [cell.strip() for cell in header_line.split(",")]
    if len(headers) < 2:
        raise WidgetParseError("CSV must have at least 2 columns")

    widget.datasets = [ChartDataset(label=name) for name in headers[1:]]

    row_number = 1
    for raw_line in csv_lines[1:]:
        data_line = raw_line.strip()
        if not data_line:
            continue
        row_number += 1
        values = [cell.strip() for cell in data_line.split(",")]
        if len(values) != len(headers):
            raise WidgetParseError(f"Row {row_number} has {len(values)} columns, expected {len(headers)}")

        widget.labels.append(values[0])
        for column, raw_value in enumerate(values[1:], start=1):
            number = parse_number_prefix(raw_value)
            if number is None:
                raise WidgetParseError(f'Invalid number "{raw_value}" in row {row_number}, column {column + 1}')
            widget.datasets[column - 1].data.append(number)


def parse_chart(text: str, chart_type: str) -> ChartWidget:
    lines = text.split("\n")
    if len(lines) < 2:
        raise WidgetParseError("chart requires CSV data")

    widget = ChartWidget(type=chart_type)
    header = tokenize(lines[0])
    csv_start = 1

    if len(header) > 1:
        # Legacy header: chart-line <id> "<title>"
        widget.id = header[1]
        widget.title = token_at(header, 2)
    else:
        for index in range(1, len(lines)):
            line = lines[index].strip()
            if not line:
                continue
            config = split_config_line(line)
            if config is None or config[0] not in CHART_CONFIG_KEYS:
                csv_start = index
                break
            key, value = config
            if key == "id":
                widget.id = value
            elif key == "title":
                widget.title = value
            elif key == "height":
                widget.height = parse_int_prefix(value)
            csv_start = index + 1

    _parse_chart_csv(widget, lines[csv_start:])
    return widget


def parse_multiple_choice_question(tokens: list[str]) -> MultipleChoiceQuestionWidget:
    if len(tokens) < 4:
        raise WidgetParseError("multiple-choice-question requires id, question, and choices array")
    widget = MultipleChoiceQuestionWidget(
        id=tokens[1],
        question=tokens[2],
        choices=_choices(tokens[3]),
        correct_answer=token_at(tokens, 4),
    )
    if len(tokens) > 5:
        widget.show_feedback = tokens[5].lower() == "true"
    return widget


def parse_short_answer_question(tokens: list[str]) -> ShortAnswerQuestionWidget:
    if len(tokens) < 3:
        raise WidgetParseError("short-answer-question requires id and question")
    widget = ShortAnswerQuestionWidget(id=tokens[1], question=tokens[2], placeholder=token_at(tokens, 3))
    if len(tokens) > 4:
        if tokens[4].startswith("["):
            widget.correct_answers = _choices(tokens[4], "Invalid answers value")
        else:
            widget.correct_answer = tokens[4]
    if len(tokens) > 5:
        widget.show_feedback = tokens[5].lower() == "true"
    return widget


def apply_quiz_config(widget: QuizWidget | PartialQuiz, lines: list[str]) -> int:
    """Consume the `key: value` lines after the quiz header; return the first question line index."""
    index = 1
    while index < len(lines):
        line = lines[index].strip()
        if not line:
            index += 1
            continue
        config = split_config_line(line)
        if config is None:
            break
        key, value = config
        if key == "showscore":
            widget.show_score = value.lower() == "true"
        elif key == "showprogress":
            widget.show_progress = value.lower() == "true"
        elif key == "passingscore":
            score = parse_int_prefix(value)
            if score is not None:
                widget.passing_score = score
        index += 1
    return index


def _points(tokens: list[str], line_number: int) -> int:
    points = parse_int_prefix(tokens[3])
    if points is None:
        raise WidgetParseError(f'Invalid points value "{tokens[3]}" on line {line_number}')
    return points


def parse_quiz_question(tokens: list[str], line_number: int) -> McqQuestion | ShortAnswerQuizQuestion:
    question_type = tokens[0]

    if question_type == "mcq":
        if len(tokens) < 5:
            raise WidgetParseError(f"MCQ question on line {line_number} requires: id, question, points, and choices")
        points = _points(tokens, line_number)
        return McqQuestion(
            id=tokens[1],
            question=tokens[2],
            points=points,
            choices=_choices(tokens[4], f"Invalid choices array on line {line_number}"),
            correct_answer=token_at(tokens, 5),
        )

    if question_type == "short-answer":
        if len(tokens) < 4:
            raise WidgetParseError(f"Short answer question on line {line_number} requires: id, question, and points")
        question = ShortAnswerQuizQuestion(
            id=tokens[1],
            question=tokens[2],
            points=_points(tokens, line_number),
            placeholder=token_at(tokens, 4),
        )
        if len(tokens) > 5:
            if tokens[5].startswith("["):
                question.correct_answers = _choices(tokens[5], f"Invalid answers value on line {line_number}")
            else:
                question.correct_answers = [tokens[5]]
        return question

    raise WidgetParseError(f'Unknown question type "{question_type}" on line {line_number}')


def parse_quiz(text: str) -> QuizWidget:
    lines = text.split("\n")
    header = tokenize(lines[0])
    if len(header) < 3:
        raise WidgetParseError("quiz requires id and title")

    widget = QuizWidget(id=header[1], title=header[2])
    start = apply_quiz_config(widget, lines)

    for index in range(start, len(lines)):
        tokens = tokenize(lines[index].strip())
        # Lines such as `""` or a lone `[` carry no tokens.
        if not tokens:
            continue
        widget.questions.append(parse_quiz_question(tokens, index + 1))

    if not widget.questions:
        raise WidgetParseError("Quiz must contain at least one question")
    return widget


def _dispatch(tokens: list[str], text: str) -> Widget:
    widget_type = tokens[0]
    if widget_type == "text-input":
        return parse_text_input(tokens)
    elif widget_type == "button-group":
        return parse_button_group(tokens)
    elif widget_type == "select":
        return parse_select(tokens)
    elif widget_type == "select-multi":
        return parse_select_multi(tokens)
    elif widget_type == "slider":
        return parse_slider(tokens)
    elif widget_type == "form":
        return parse_form(text)
    elif widget_type in CHART_TYPES:
        return parse_chart(text, widget_type)
    elif widget_type == "multiple-choice-question":
        return parse_multiple_choice_question(tokens)
    elif widget_type == "short-answer-question":
        return parse_short_answer_question(tokens)
    elif widget_type == "quiz":
        return parse_quiz(text)
    raise WidgetParseError(f"Unknown widget type: {widget_type}")


def parse_widget(text: str) -> ParseResult:
    """Parse one complete DSL block. Never raises; failures come back as `ParseResult.error`."""
    source = text.strip()
    tokens = tokenize(source)
    if not tokens:
        return ParseResult.fail("Empty input")

    try:
        widget = _dispatch(tokens, source)
    except WidgetParseError as error:
        logger.debug("Widget DSL rejected: %s", error)
        return ParseResult.fail(str(error))
    except Exception as error:  # noqa: BLE001
        logger.exception("Unexpected failure while parsing %s widget", tokens[0])
        return ParseResult.fail(f"Failed to parse widget: {type(error).__name__}")
    return ParseResult.ok(widget)
