from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


ChartType = Literal["chart-line", "chart-bar", "chart-pie", "chart-scatter"]


class WidgetModel(BaseModel):
    """Base for every descriptor; dumps with the camelCase keys consumers expect."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TextInputWidget(WidgetModel):
    type: Literal["text-input"] = "text-input"
    id: str | None = None
    label: str | None = None
    placeholder: str | None = None
    default: str | None = None


class ButtonGroupWidget(WidgetModel):
    type: Literal["button-group"] = "button-group"
    id: str | None = None
    label: str | None = None
    choices: list[str] = Field(default_factory=list)
    default: str | None = None


class SelectWidget(WidgetModel):
    type: Literal["select"] = "select"
    id: str | None = None
    label: str | None = None
    choices: list[str] = Field(default_factory=list)
    default: str | None = None


class SelectMultiWidget(WidgetModel):
    type: Literal["select-multi"] = "select-multi"
    id: str | None = None
    label: str | None = None
    choices: list[str] = Field(default_factory=list)
    default: str | list[str] | None = None


class SliderWidget(WidgetModel):
    type: Literal["slider"] = "slider"
    id: str | None = None
    label: str | None = None
    min: int | float
    max: int | float
    step: int | float
    default: int | float | None = None


class ChartDataset(WidgetModel):
    label: str
    data: list[int | float] = Field(default_factory=list)


class ChartWidget(WidgetModel):
    type: ChartType
    id: str | None = None
    title: str | None = None
    height: int | None = None
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)
    options: dict[str, Any] | None = None


class MultipleChoiceQuestionWidget(WidgetModel):
    type: Literal["multiple-choice-question"] = "multiple-choice-question"
    id: str | None = None
    question: str
    choices: list[str] = Field(default_factory=list)
    correct_answer: str | None = None
    show_feedback: bool | None = None


class ShortAnswerQuestionWidget(WidgetModel):
    type: Literal["short-answer-question"] = "short-answer-question"
    id: str | None = None
    question: str
    placeholder: str | None = None
    correct_answer: str | None = None
    correct_answers: list[str] | None = None
    show_feedback: bool | None = None


class McqQuestion(WidgetModel):
    type: Literal["mcq"] = "mcq"
    id: str
    question: str
    points: int = 0
    choices: list[str] = Field(default_factory=list)
    correct_answer: str | None = None
    streaming: bool | None = Field(default=None, alias="_streaming")


class ShortAnswerQuizQuestion(WidgetModel):
    type: Literal["short-answer"] = "short-answer"
    id: str
    question: str
    points: int = 0
    placeholder: str | None = None
    correct_answers: list[str] | None = None
    streaming: bool | None = Field(default=None, alias="_streaming")


QuizQuestion = Annotated[Union[McqQuestion, ShortAnswerQuizQuestion], Field(discriminator="type")]


class QuizWidget(WidgetModel):
    type: Literal["quiz"] = "quiz"
    id: str | None = None
    title: str
    questions: list[QuizQuestion] = Field(default_factory=list)
    show_score: bool = True
    show_progress: bool = True
    passing_score: int | None = None


class FormWidget(WidgetModel):
    type: Literal["form"] = "form"
    id: str | None = None
    submit_label: str | None = None
    fields: list[Widget] = Field(default_factory=list)


Widget = Annotated[
    Union[
        TextInputWidget,
        ButtonGroupWidget,
        SelectWidget,
        SelectMultiWidget,
        SliderWidget,
        FormWidget,
        ChartWidget,
        MultipleChoiceQuestionWidget,
        ShortAnswerQuestionWidget,
        QuizWidget,
    ],
    Field(discriminator="type"),
]

FormWidget.model_rebuild()


class PartialQuiz(WidgetModel):
    type: Literal["quiz"] = "quiz"
    id: str | None = None
    title: str | None = None
    questions: list[QuizQuestion] = Field(default_factory=list)
    show_score: bool | None = None
    show_progress: bool | None = None
    passing_score: int | None = None
    streaming: bool | None = Field(default=True, alias="_streaming")


class PartialForm(WidgetModel):
    type: Literal["form"] = "form"
    id: str | None = None
    submit_label: str | None = None
    fields: list[Widget] = Field(default_factory=list)
    streaming: bool | None = Field(default=True, alias="_streaming")


class PartialChart(WidgetModel):
    type: ChartType
    id: str | None = None
    title: str | None = None
    height: int | None = None
    labels: list[str] = Field(default_factory=list)
    datasets: list[ChartDataset] = Field(default_factory=list)
    streaming: bool | None = Field(default=True, alias="_streaming")


class WidgetStub(WidgetModel):
    type: str
    id: str | None = None


PartialWidget = Union[PartialQuiz, PartialForm, PartialChart, WidgetStub]


class ParseResult(WidgetModel):
    success: bool
    widget: Widget | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _check_outcome(self) -> ParseResult:
        if self.success and self.widget is None:
            raise ValueError("successful ParseResult requires a widget")
        if not self.success and not self.error:
            raise ValueError("failed ParseResult requires an error message")
        return self

    @classmethod
    def ok(cls, widget: Any) -> ParseResult:
        return cls(success=True, widget=widget)

    @classmethod
    def fail(cls, error: str) -> ParseResult:
        return cls(success=False, error=error)


class PendingFlags(WidgetModel):
    unclosed_bracket: bool | None = None
    unclosed_quote: bool | None = None
    awaiting_questions: bool | None = None
    awaiting_fields: bool | None = None
    awaiting_data: bool | None = None


class StreamingParseResult(WidgetModel):
    complete: bool
    detected_type: str | None = None
    widget: Union[Widget, PartialQuiz, PartialForm, PartialChart, WidgetStub, None] = None
    pending: PendingFlags | None = None
    error: str | None = None


class WidgetParseRequest(BaseModel):
    source_text: str = Field(min_length=1, max_length=100_000)


def dump_payload(model: BaseModel) -> dict[str, Any]:
    """JSON-ready dict with camelCase keys and unset optionals dropped."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
