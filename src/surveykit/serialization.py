"""
Serialization helpers for surveykit objects (Survey, Question, Response, StoreState).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
This module intentionally keeps serialization structure stable and explicit.

Decoding failures of any kind surface as StateFormatError so callers have
a single exception to recover from.

Blobs saved by the earlier browser front-end are also readable: camelCase
timestamps (createdAt, updatedAt, submittedAt), answers stored under
"responses", no survey id inside a response, and bare answer values.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import yaml

from surveykit.answers import (
    Answer,
    AnswerKind,
    MultiSelection,
    ScalarAnswer,
    SingleSelection,
    make_answer,
)
from surveykit.commands import StoreState
from surveykit.errors import StateFormatError
from surveykit.model import Question, QuestionType, Response, Survey, SurveyStatus


STATE_VERSION = 1

# Errors raised while rebuilding objects from a decoded document.
_DECODE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


def timestamp_to_str(ts: datetime) -> str:
    return ts.isoformat()


def timestamp_from_str(s: str) -> datetime:
    # Browser-written timestamps end in "Z", which fromisoformat rejects before 3.11.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    ts = datetime.fromisoformat(s)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _field(d: Dict[str, Any], name: str, legacy_name: str) -> Any:
    """Value of `name`, falling back to the camelCase key of older blobs."""
    if name in d:
        return d[name]
    return d[legacy_name]


def answer_to_dict(a: Answer) -> Dict[str, Any]:
    if isinstance(a, ScalarAnswer):
        return {"kind": AnswerKind.SCALAR.value, "value": a.value}
    if isinstance(a, SingleSelection):
        return {"kind": AnswerKind.SINGLE.value, "value": a.option}
    if isinstance(a, MultiSelection):
        return {"kind": AnswerKind.MULTI.value, "value": list(a.options)}
    raise TypeError(f"Unsupported Answer type: {type(a)}")


def answer_from_dict(d: Any, kind: Optional[AnswerKind] = None) -> Answer:
    if not isinstance(d, dict):
        # Bare values from older blobs; shape comes from `kind` or is inferred.
        return make_answer(d, kind)
    kind = AnswerKind(d.get("kind"))
    if kind == AnswerKind.SCALAR:
        return ScalarAnswer(d.get("value"))
    if kind == AnswerKind.SINGLE:
        return SingleSelection(d.get("value"))
    return MultiSelection(list(d.get("value") or []))


def question_to_dict(q: Question) -> Dict[str, Any]:
    return {
        "id": q.id,
        "type": q.type.value,
        "title": q.title,
        "required": q.required,
        "options": list(q.options),
    }


def question_from_dict(d: Dict[str, Any]) -> Question:
    return Question(
        id=str(d["id"]),
        type=QuestionType.parse(d["type"]),
        title=d.get("title", ""),
        required=bool(d.get("required", False)),
        options=list(d.get("options") or []),
    )


def survey_to_dict(s: Survey) -> Dict[str, Any]:
    return {
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "questions": [question_to_dict(q) for q in s.questions],
        "status": s.status.value,
        "created_at": timestamp_to_str(s.created_at),
        "updated_at": timestamp_to_str(s.updated_at),
    }


def survey_from_dict(d: Dict[str, Any]) -> Survey:
    """
    Rebuild a Survey from its dict form.

    Raises:
        ValueError: If two questions share an id
    """
    questions = [question_from_dict(q) for q in d.get("questions") or []]
    ids = [q.id for q in questions]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Survey {d.get('id')!r} has duplicate question ids")
    return Survey(
        id=str(d["id"]),
        title=d.get("title", ""),
        description=d.get("description", ""),
        questions=questions,
        status=SurveyStatus(d.get("status", SurveyStatus.DRAFT.value)),
        created_at=timestamp_from_str(_field(d, "created_at", "createdAt")),
        updated_at=timestamp_from_str(_field(d, "updated_at", "updatedAt")),
    )


def response_to_dict(r: Response) -> Dict[str, Any]:
    return {
        "id": r.id,
        "survey_id": r.survey_id,
        "answers": {qid: answer_to_dict(a) for qid, a in r.answers.items()},
        "submitted_at": timestamp_to_str(r.submitted_at),
    }


def response_from_dict(
    d: Dict[str, Any],
    survey_id: Optional[str] = None,
    kinds: Optional[Dict[str, AnswerKind]] = None,
) -> Response:
    """
    Rebuild a Response from its dict form.

    Args:
        d: Response dict
        survey_id: Index key the response was stored under, used when the
                   dict carries no survey id of its own
        kinds: Question id -> answer kind, used to wrap bare answer values
    """
    kinds = kinds or {}
    owner = d.get("survey_id", survey_id)
    if owner is None:
        raise KeyError("survey_id")
    raw_answers = d["answers"] if "answers" in d else d.get("responses")
    return Response(
        id=str(d["id"]),
        survey_id=str(owner),
        answers={
            str(qid): answer_from_dict(a, kinds.get(str(qid)))
            for qid, a in (raw_answers or {}).items()
        },
        submitted_at=timestamp_from_str(_field(d, "submitted_at", "submittedAt")),
    )


def state_to_dict(state: StoreState) -> Dict[str, Any]:
    return {
        "version": STATE_VERSION,
        "surveys": [survey_to_dict(s) for s in state.surveys],
        "current_survey_id": state.current_survey_id,
        "responses": {
            sid: [response_to_dict(r) for r in rs] for sid, rs in state.responses.items()
        },
    }


def state_from_dict(d: Any) -> StoreState:
    """
    Rebuild a StoreState from its dict form.

    Raises:
        StateFormatError: If the structure, enum values or timestamps
                          are not what state_to_dict produces, or a
                          survey repeats a question id
    """
    if not isinstance(d, dict):
        raise StateFormatError(f"State must be a mapping, got {type(d).__name__}")
    try:
        surveys = [survey_from_dict(s) for s in d.get("surveys") or []]
        kinds = {
            s.id: {q.id: q.type.answer_kind for q in s.questions} for s in surveys
        }
        responses = {
            str(sid): [response_from_dict(r, str(sid), kinds.get(str(sid))) for r in rs]
            for sid, rs in (d.get("responses") or {}).items()
        }
    except _DECODE_ERRORS as e:
        raise StateFormatError(f"Malformed state: {e}") from e
    return StoreState(
        surveys=surveys,
        current_survey_id=d.get("current_survey_id"),
        responses=responses,
    )


def _survey_from_document(d: Any) -> Survey:
    if not isinstance(d, dict):
        raise StateFormatError(f"Survey must be a mapping, got {type(d).__name__}")
    try:
        return survey_from_dict(d)
    except _DECODE_ERRORS as e:
        raise StateFormatError(f"Malformed survey: {e}") from e


def state_to_json(state: StoreState) -> str:
    return json.dumps(state_to_dict(state), sort_keys=True)


def state_from_json(s: str) -> StoreState:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise StateFormatError(f"Invalid JSON: {e}") from e
    return state_from_dict(d)


def state_to_yaml(state: StoreState) -> str:
    return yaml.safe_dump(state_to_dict(state))


def state_from_yaml(s: str) -> StoreState:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise StateFormatError(f"Invalid YAML: {e}") from e
    return state_from_dict(d)


def survey_to_json(s: Survey) -> str:
    return json.dumps(survey_to_dict(s), sort_keys=True)


def survey_from_json(s: str) -> Survey:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise StateFormatError(f"Invalid JSON: {e}") from e
    return _survey_from_document(d)


def survey_to_yaml(s: Survey) -> str:
    return yaml.safe_dump(survey_to_dict(s))


def survey_from_yaml(s: str) -> Survey:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise StateFormatError(f"Invalid YAML: {e}") from e
    return _survey_from_document(d)


FORMATS = {
    "json": (state_to_json, state_from_json),
    "yaml": (state_to_yaml, state_from_yaml),
}


def dump_state(state: StoreState, fmt: str = "json") -> str:
    try:
        encode, _ = FORMATS[fmt]
    except KeyError:
        raise ValueError(f"Unknown state format: {fmt}")
    return encode(state)


def load_state(blob: str, fmt: str = "json") -> StoreState:
    try:
        _, decode = FORMATS[fmt]
    except KeyError:
        raise ValueError(f"Unknown state format: {fmt}")
    return decode(blob)
