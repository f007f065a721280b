"""
Response Aggregator: per-question summaries of collected responses.

This module turns a Survey and its Responses into:
    - Numeric summaries (average, count) for rating and number questions
    - Option counts for single-choice, dropdown and multi-choice questions
    - Answer counts for every other question type
    - A SurveyReport bundling all of the above

IMPORTANT: This is a read-only layer. It never modifies the survey, the
responses or the store. Empty input produces zero-valued summaries, never
errors.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from surveykit.answers import MultiSelection, answer_value, is_missing
from surveykit.model import Question, QuestionType, Response, Survey


@dataclass
class NumericSummary:
    """Mean (one decimal place) and count of numeric answers."""
    average: float = 0.0
    count: int = 0


@dataclass
class ChoiceSummary:
    """Observed option -> number of times it was selected."""
    counts: Dict[Any, int] = field(default_factory=dict)

    def share(self, option: Any, total: int) -> float:
        """Fraction of `total` responses that selected `option`."""
        if total <= 0:
            return 0.0
        return self.counts.get(option, 0) / total


@dataclass
class CountSummary:
    """Number of non-missing answers, no content summary."""
    total_responses: int = 0


Summary = Union[NumericSummary, ChoiceSummary, CountSummary]


def _to_number(value: Any) -> Optional[float]:
    """Coerce an answer to a finite float, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _answers_for(question: Question, responses: Iterable[Response]) -> List[Any]:
    """Non-missing answers to `question`, in submission order."""
    found = []
    for response in responses:
        answer = response.answers.get(question.id)
        if not is_missing(answer):
            found.append(answer)
    return found


def _round_half_up(number: float) -> float:
    """Round to one decimal place, ties away from zero."""
    return float(Decimal(number).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _numeric_summary(answers: List[Any]) -> NumericSummary:
    numbers = [n for n in (_to_number(answer_value(a)) for a in answers) if n is not None]
    if not numbers:
        return NumericSummary(average=0.0, count=0)
    return NumericSummary(average=_round_half_up(sum(numbers) / len(numbers)), count=len(numbers))


def _single_choice_summary(answers: List[Any]) -> ChoiceSummary:
    summary = ChoiceSummary()
    for answer in answers:
        if isinstance(answer, MultiSelection):
            continue
        option = answer_value(answer)
        summary.counts[option] = summary.counts.get(option, 0) + 1
    return summary


def _multi_choice_summary(answers: List[Any]) -> ChoiceSummary:
    summary = ChoiceSummary()
    for answer in answers:
        selected = answer_value(answer)
        if not isinstance(selected, (list, tuple)):
            continue
        for option in selected:
            summary.counts[option] = summary.counts.get(option, 0) + 1
    return summary


def summarize_question(question: Question, responses: Iterable[Response]) -> Summary:
    """
    Summarize all answers to one question.

    Returns:
        NumericSummary for rating and number questions,
        ChoiceSummary for single-choice, dropdown and multi-choice,
        CountSummary for everything else
    """
    answers = _answers_for(question, responses)

    if question.type.is_numeric:
        return _numeric_summary(answers)
    if question.type == QuestionType.MULTI_CHOICE:
        return _multi_choice_summary(answers)
    if question.type.has_options:
        return _single_choice_summary(answers)
    return CountSummary(total_responses=len(answers))


@dataclass
class QuestionSummary:
    """Summary of one question, numbered from 1 in survey order."""
    question_id: str
    title: str
    number: int
    type: QuestionType
    summary: Summary


@dataclass
class SurveyReport:
    """Aggregated view of every response to a survey."""

    survey_id: str
    survey_title: str
    total_responses: int = 0
    total_questions: int = 0

    # Every stored response is a complete submission, so this is either
    # 100.0 or 0.0.
    completion_rate: float = 0.0

    questions: List[QuestionSummary] = field(default_factory=list)

    def get(self, question_id: str) -> Optional[QuestionSummary]:
        for entry in self.questions:
            if entry.question_id == question_id:
                return entry
        return None


def summarize_survey(survey: Survey, responses: Iterable[Response]) -> SurveyReport:
    """Build a SurveyReport for `survey` from its responses."""
    responses = list(responses)
    report = SurveyReport(survey_id=survey.id, survey_title=survey.title)

    report.total_responses = len(responses)
    report.total_questions = len(survey.questions)
    report.completion_rate = 100.0 if responses else 0.0

    for number, question in enumerate(survey.questions, start=1):
        report.questions.append(QuestionSummary(
            question_id=question.id,
            title=question.title,
            number=number,
            type=question.type,
            summary=summarize_question(question, responses),
        ))

    return report
