"""
Core Survey Model Objects

Defines the fundamental data structures of the survey engine.

These are plain data classes representing:
    - Questions (typed prompts, optionally with a fixed option set)
    - Surveys (ordered question containers plus metadata)
    - Responses (one respondent's submitted answers)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about rendering, routing or storage media
        - Are treated as immutable by the store (changes produce copies)
        - Are fully serializable
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from .answers import Answer, AnswerKind


DEFAULT_SURVEY_TITLE = "Untitled Survey"
DEFAULT_QUESTION_TITLE = "New Question"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuestionType(Enum):
    """
    Answer types a question can ask for.

    The value is the stable wire name used in the persisted blob.
    """

    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    DROPDOWN = "dropdown"
    RATING = "rating"
    NUMBER = "number"
    EMAIL = "email"
    DATE = "date"

    @property
    def has_options(self) -> bool:
        return self in OPTION_TYPES

    @property
    def answer_kind(self) -> AnswerKind:
        if self == QuestionType.MULTI_CHOICE:
            return AnswerKind.MULTI
        if self in OPTION_TYPES:
            return AnswerKind.SINGLE
        return AnswerKind.SCALAR

    @property
    def is_numeric(self) -> bool:
        return self in (QuestionType.RATING, QuestionType.NUMBER)

    @classmethod
    def parse(cls, value) -> "QuestionType":
        """
        Resolve a question type from its wire name.

        Accepts enum members, current wire names and the legacy names
        written by older front-ends ("text", "textarea", "radio",
        "checkbox", "select").

        Raises:
            ValueError: If the name is not a known question type
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip()
        if name in LEGACY_TYPE_NAMES:
            return LEGACY_TYPE_NAMES[name]
        return cls(name)


OPTION_TYPES = frozenset(
    {QuestionType.SINGLE_CHOICE, QuestionType.MULTI_CHOICE, QuestionType.DROPDOWN}
)

LEGACY_TYPE_NAMES: Dict[str, QuestionType] = {
    "text": QuestionType.SHORT_TEXT,
    "textarea": QuestionType.LONG_TEXT,
    "radio": QuestionType.SINGLE_CHOICE,
    "checkbox": QuestionType.MULTI_CHOICE,
    "select": QuestionType.DROPDOWN,
}


@dataclass(frozen=True)
class QuestionTypeInfo:
    """Display metadata for a question type."""

    type: QuestionType
    label: str
    description: str


QUESTION_TYPES: List[QuestionTypeInfo] = [
    QuestionTypeInfo(QuestionType.SHORT_TEXT, "Short Text", "Single line text input"),
    QuestionTypeInfo(QuestionType.LONG_TEXT, "Long Text", "Multi-line text area"),
    QuestionTypeInfo(QuestionType.SINGLE_CHOICE, "Multiple Choice", "Select one option"),
    QuestionTypeInfo(QuestionType.MULTI_CHOICE, "Checkboxes", "Select multiple options"),
    QuestionTypeInfo(QuestionType.DROPDOWN, "Dropdown", "Dropdown selection"),
    QuestionTypeInfo(QuestionType.RATING, "Rating Scale", "Rate from 1 to 5"),
    QuestionTypeInfo(QuestionType.NUMBER, "Number", "Numeric input"),
    QuestionTypeInfo(QuestionType.EMAIL, "Email", "Email address input"),
    QuestionTypeInfo(QuestionType.DATE, "Date", "Date picker"),
]


def question_type_info(question_type: QuestionType) -> QuestionTypeInfo:
    for info in QUESTION_TYPES:
        if info.type == question_type:
            return info
    raise KeyError(question_type)


class SurveyStatus(Enum):
    """
    Lifecycle status of a survey.

    Only DRAFT is produced today; the other values are reserved.
    """

    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


@dataclass
class Question:
    """
    A single prompt of a specific answer type.

    Properties:
        id:
            Identifier, unique within the parent survey

        type:
            QuestionType of the expected answer

        title:
            Prompt text shown to the respondent

        required:
            Whether submission is blocked while this is unanswered

        options:
            Ordered choices, used only by single-choice, multi-choice
            and dropdown questions. Ignored for every other type.
    """

    id: str
    type: QuestionType
    title: str = DEFAULT_QUESTION_TITLE
    required: bool = False
    options: List[str] = field(default_factory=list)


@dataclass
class Survey:
    """
    Root container for one survey definition.

    Properties:
        id:
            Opaque identifier, assigned at creation, never changes

        title, description:
            Free text, mutable

        questions:
            Ordered questions. Order drives numbering and export columns.

        status:
            SurveyStatus, currently always DRAFT

        created_at:
            Creation timestamp (UTC), immutable

        updated_at:
            Refreshed on every change to the survey or its questions

    INVARIANTS:
        - Question ids are pairwise unique within `questions`
        - Option-bearing questions hold no blank options
    """

    id: str
    title: str = DEFAULT_SURVEY_TITLE
    description: str = ""
    questions: List[Question] = field(default_factory=list)
    status: SurveyStatus = SurveyStatus.DRAFT
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def get_question(self, question_id: str) -> Optional[Question]:
        """
        Retrieve a question by ID.

        Args:
            question_id: Question identifier

        Returns:
            Question object or None if not found
        """
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]


@dataclass
class Response:
    """
    One respondent's submitted answers to a survey.

    `survey_id` is a weak reference: deleting the survey leaves the
    response in the index, unreachable through normal queries.
    """

    id: str
    survey_id: str
    answers: Dict[str, Answer] = field(default_factory=dict)
    submitted_at: datetime = field(default_factory=utc_now)


def clean_options(options) -> List[str]:
    """Drop blank entries, keep order and duplicates."""
    return [str(o) for o in options or [] if str(o).strip()]


# Option editing helpers. Each returns a new Question; the caller hands
# the result to the store with an UpdateQuestion command.

def add_option(question: Question, text: Optional[str] = None) -> Question:
    label = text if text is not None else f"Option {len(question.options) + 1}"
    return replace(question, options=question.options + [label])


def remove_option(question: Question, index: int) -> Question:
    if not 0 <= index < len(question.options):
        raise IndexError(f"Option index out of range: {index}")
    return replace(
        question,
        options=[o for i, o in enumerate(question.options) if i != index],
    )


def rename_option(question: Question, index: int, text: str) -> Question:
    if not 0 <= index < len(question.options):
        raise IndexError(f"Option index out of range: {index}")
    options = list(question.options)
    options[index] = text
    return replace(question, options=options)
