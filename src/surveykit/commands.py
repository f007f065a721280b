"""
Store Commands and State Transitions

The survey store is driven by a closed set of commands. Each command is a
plain data object; `apply_command` turns (state, command) into the next
state without touching the input.

Commands:
    CreateSurvey, UpdateSurvey, DeleteSurvey, SetCurrentSurvey,
    AddQuestion, UpdateQuestion, DeleteQuestion, RecordResponse,
    ReplaceState

ARCHITECTURAL RULE:
    - No I/O here. Persistence is the dispatcher's job (see store.py).
    - Transitions are deterministic given `clock` and `new_id`.
    - A command aimed at something that does not exist is a no-op and
      returns the input state object itself.
    - The current survey is stored as an id only and resolved by lookup,
      so the selected view and the collection can never diverge.
"""

from __future__ import annotations

import uuid
from abc import ABC
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from surveykit.answers import make_answer
from surveykit.model import (
    DEFAULT_QUESTION_TITLE,
    DEFAULT_SURVEY_TITLE,
    Question,
    QuestionType,
    Response,
    Survey,
    SurveyStatus,
    clean_options,
    utc_now,
)


SURVEY_FIELDS = frozenset({"title", "description", "status", "questions"})
QUESTION_FIELDS = frozenset({"type", "title", "required", "options"})

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def new_identifier() -> str:
    return uuid.uuid4().hex


@dataclass
class StoreState:
    """
    Full state owned by the survey store.

    Properties:
        surveys:
            Ordered survey collection

        current_survey_id:
            Id of the survey being edited or previewed, or None

        responses:
            Survey id -> responses in submission order. Entries for
            deleted surveys are kept (orphaned).
    """

    surveys: List[Survey] = field(default_factory=list)
    current_survey_id: Optional[str] = None
    responses: Dict[str, List[Response]] = field(default_factory=dict)

    def get_survey(self, survey_id: Optional[str]) -> Optional[Survey]:
        for survey in self.surveys:
            if survey.id == survey_id:
                return survey
        return None

    @property
    def current_survey(self) -> Optional[Survey]:
        if self.current_survey_id is None:
            return None
        return self.get_survey(self.current_survey_id)


class Command(ABC):
    """Base class for store commands. Structure only."""
    pass


@dataclass
class CreateSurvey(Command):
    title: Optional[str] = None
    description: Optional[str] = None
    survey_id: Optional[str] = None


@dataclass
class UpdateSurvey(Command):
    survey_id: str
    changes: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        unknown = set(self.changes) - SURVEY_FIELDS
        if unknown:
            raise ValueError(f"Cannot update survey fields: {sorted(unknown)}")
        changes = dict(self.changes)
        if "status" in changes:
            changes["status"] = SurveyStatus(
                changes["status"].value
                if isinstance(changes["status"], SurveyStatus)
                else changes["status"]
            )
        if "questions" in changes:
            questions = list(changes["questions"])
            ids = [q.id for q in questions]
            if len(ids) != len(set(ids)):
                raise ValueError("Question ids must be unique within a survey")
            changes["questions"] = [_normalize_question(q) for q in questions]
        self.changes = changes


@dataclass
class DeleteSurvey(Command):
    survey_id: str


@dataclass
class SetCurrentSurvey(Command):
    survey_id: Optional[str] = None


@dataclass
class AddQuestion(Command):
    type: QuestionType
    title: Optional[str] = None
    options: Optional[List[str]] = None
    question_id: Optional[str] = None

    def __post_init__(self):
        self.type = QuestionType.parse(self.type)


@dataclass
class UpdateQuestion(Command):
    question_id: str
    changes: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        unknown = set(self.changes) - QUESTION_FIELDS
        if unknown:
            raise ValueError(f"Cannot update question fields: {sorted(unknown)}")
        changes = dict(self.changes)
        if "type" in changes:
            changes["type"] = QuestionType.parse(changes["type"])
        if "required" in changes:
            changes["required"] = bool(changes["required"])
        if "options" in changes:
            changes["options"] = list(changes["options"] or [])
        self.changes = changes


@dataclass
class DeleteQuestion(Command):
    question_id: str


@dataclass
class RecordResponse(Command):
    survey_id: str
    answers: Dict[str, Any] = field(default_factory=dict)
    response_id: Optional[str] = None


@dataclass
class ReplaceState(Command):
    state: StoreState


def _normalize_question(question: Question) -> Question:
    if question.type.has_options:
        return replace(question, options=clean_options(question.options))
    return replace(question, options=list(question.options))


def _replace_survey(state: StoreState, updated: Survey) -> StoreState:
    surveys = [updated if s.id == updated.id else s for s in state.surveys]
    return replace(state, surveys=surveys)


def _create_survey(state: StoreState, cmd: CreateSurvey, clock: Clock, new_id: IdFactory) -> StoreState:
    now = clock()
    survey = Survey(
        id=cmd.survey_id or new_id(),
        title=cmd.title or DEFAULT_SURVEY_TITLE,
        description=cmd.description or "",
        questions=[],
        status=SurveyStatus.DRAFT,
        created_at=now,
        updated_at=now,
    )
    return replace(state, surveys=state.surveys + [survey], current_survey_id=survey.id)


def _update_survey(state: StoreState, cmd: UpdateSurvey, clock: Clock) -> StoreState:
    survey = state.get_survey(cmd.survey_id)
    if survey is None:
        return state
    return _replace_survey(state, replace(survey, **cmd.changes, updated_at=clock()))


def _delete_survey(state: StoreState, cmd: DeleteSurvey) -> StoreState:
    if state.get_survey(cmd.survey_id) is None:
        return state
    current = None if state.current_survey_id == cmd.survey_id else state.current_survey_id
    return replace(
        state,
        surveys=[s for s in state.surveys if s.id != cmd.survey_id],
        current_survey_id=current,
    )


def _add_question(state: StoreState, cmd: AddQuestion, clock: Clock, new_id: IdFactory) -> StoreState:
    survey = state.current_survey
    if survey is None:
        return state
    question = _normalize_question(Question(
        id=cmd.question_id or new_id(),
        type=cmd.type,
        title=cmd.title or DEFAULT_QUESTION_TITLE,
        required=False,
        options=list(cmd.options or []),
    ))
    if survey.get_question(question.id) is not None:
        raise ValueError(f"Duplicate question id: {question.id}")
    updated = replace(survey, questions=survey.questions + [question], updated_at=clock())
    return _replace_survey(state, updated)


def _update_question(state: StoreState, cmd: UpdateQuestion, clock: Clock) -> StoreState:
    survey = state.current_survey
    if survey is None or survey.get_question(cmd.question_id) is None:
        return state
    questions = [
        _normalize_question(replace(q, **cmd.changes)) if q.id == cmd.question_id else q
        for q in survey.questions
    ]
    return _replace_survey(state, replace(survey, questions=questions, updated_at=clock()))


def _delete_question(state: StoreState, cmd: DeleteQuestion, clock: Clock) -> StoreState:
    survey = state.current_survey
    if survey is None or survey.get_question(cmd.question_id) is None:
        return state
    questions = [q for q in survey.questions if q.id != cmd.question_id]
    return _replace_survey(state, replace(survey, questions=questions, updated_at=clock()))


def _record_response(state: StoreState, cmd: RecordResponse, clock: Clock, new_id: IdFactory) -> StoreState:
    survey = state.get_survey(cmd.survey_id)
    answers = {}
    for question_id, raw in cmd.answers.items():
        question = survey.get_question(question_id) if survey else None
        answers[question_id] = make_answer(raw, question.type.answer_kind if question else None)
    response = Response(
        id=cmd.response_id or new_id(),
        survey_id=cmd.survey_id,
        answers=answers,
        submitted_at=clock(),
    )
    responses = dict(state.responses)
    responses[cmd.survey_id] = responses.get(cmd.survey_id, []) + [response]
    return replace(state, responses=responses)


def apply_command(
    state: StoreState,
    command: Command,
    clock: Clock = utc_now,
    new_id: IdFactory = new_identifier,
) -> StoreState:
    """
    Compute the state that follows `command`.

    Args:
        state: Current state (never mutated)
        command: One of the Command dataclasses in this module
        clock: Source of timestamps
        new_id: Source of fresh identifiers, used when the command
                does not carry its own

    Returns:
        The next StoreState, or `state` itself when the command is a no-op

    Raises:
        TypeError: If `command` is not a known command
    """
    if isinstance(command, CreateSurvey):
        return _create_survey(state, command, clock, new_id)
    if isinstance(command, UpdateSurvey):
        return _update_survey(state, command, clock)
    if isinstance(command, DeleteSurvey):
        return _delete_survey(state, command)
    if isinstance(command, SetCurrentSurvey):
        return replace(state, current_survey_id=command.survey_id)
    if isinstance(command, AddQuestion):
        return _add_question(state, command, clock, new_id)
    if isinstance(command, UpdateQuestion):
        return _update_question(state, command, clock)
    if isinstance(command, DeleteQuestion):
        return _delete_question(state, command, clock)
    if isinstance(command, RecordResponse):
        return _record_response(state, command, clock, new_id)
    if isinstance(command, ReplaceState):
        return command.state
    raise TypeError(f"Unsupported command type: {type(command)}")
