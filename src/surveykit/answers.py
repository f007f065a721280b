"""
Answer Shapes

Every answer a respondent gives is one of three shapes:

    - ScalarAnswer      free text, numbers, e-mails, dates, ratings
    - SingleSelection   one option of a single-choice or dropdown question
    - MultiSelection    any number of options of a multi-choice question

The shape is decided by the question type (see QuestionType.answer_kind),
so consumers such as the aggregator can branch on the variant instead of
inspecting raw values at runtime.

ARCHITECTURAL RULE:
    Answers are structure only. Coercion to numbers, counting and
    formatting belong to the aggregation and export layers.
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class AnswerKind(Enum):
    """Wire tag of each answer variant."""

    SCALAR = "scalar"
    SINGLE = "single"
    MULTI = "multi"


class Answer(ABC):
    """
    Base class for all answer variants.

    Intentionally minimal: it only exists so the variants share a type.
    """

    kind: AnswerKind


@dataclass
class ScalarAnswer(Answer):
    value: Any = None
    kind = AnswerKind.SCALAR


@dataclass
class SingleSelection(Answer):
    option: Any = None
    kind = AnswerKind.SINGLE


@dataclass
class MultiSelection(Answer):
    options: List[Any] = field(default_factory=list)
    kind = AnswerKind.MULTI


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def make_answer(raw: Any, kind: Optional[AnswerKind] = None) -> Answer:
    """
    Wrap a raw answer value into its variant.

    Args:
        raw: Value as collected from the respondent, or an Answer
        kind: Expected shape, usually QuestionType.answer_kind.
              When omitted the shape is inferred: sequences become
              MultiSelection, anything else ScalarAnswer.

    Returns:
        Answer instance. Existing Answer instances are returned unchanged.

    A raw value whose shape does not match `kind` is wrapped by shape
    instead, so no answer is ever dropped here. A lone value for a
    multi-selection becomes a one-element selection.
    """
    if isinstance(raw, Answer):
        return raw

    if kind == AnswerKind.MULTI:
        if _is_sequence(raw):
            return MultiSelection(list(raw))
        return MultiSelection([] if is_missing(raw) else [raw])

    if _is_sequence(raw):
        return MultiSelection(list(raw))

    if kind == AnswerKind.SINGLE:
        return SingleSelection(raw)

    return ScalarAnswer(raw)


def answer_value(answer: Any) -> Any:
    """Unwrap an Answer to its raw value. Raw values pass through."""
    if isinstance(answer, ScalarAnswer):
        return answer.value
    if isinstance(answer, SingleSelection):
        return answer.option
    if isinstance(answer, MultiSelection):
        return list(answer.options)
    return answer


def is_missing(value: Any) -> bool:
    """
    True when a value counts as "not answered".

    None, the empty string and empty sequences are missing, whether raw or
    wrapped in an Answer. Zero, False and whitespace-only text are real
    answers.
    """
    value = answer_value(value)
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if _is_sequence(value):
        return len(value) == 0
    return False
