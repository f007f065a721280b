"""
Tests for the SurveyStore dispatcher.

These tests verify:
    - Every command is persisted
    - Loading falls back to an empty state on absent or malformed blobs
    - Save/reload reproduces the same state
    - Submission runs validation first
    - Orphaned responses are unreachable
"""

import logging
from datetime import datetime, timezone

import pytest
from surveykit.answers import MultiSelection, ScalarAnswer, SingleSelection
from surveykit.backends import FileBackend, MemoryBackend
from surveykit.commands import StoreState
from surveykit.config import StoreConfig
from surveykit.errors import ResponseValidationError, StorageError, UnknownSurveyError
from surveykit.model import QuestionType
from surveykit.serialization import state_from_json
from surveykit.store import SurveyStore

from conftest import SequentialIds, TickingClock


def build_store(store):
    survey = store.create_survey("Feedback")
    name = store.add_question(QuestionType.SHORT_TEXT, "Name")
    score = store.add_question(QuestionType.RATING, "Score")
    store.update_question(name, required=True)
    return survey, name, score


class TestPersistence:

    def test_every_command_saves(self, store, backend):
        build_store(store)
        assert backend.save_count == 4

    def test_saved_blob_matches_state(self, store, backend):
        build_store(store)
        saved = state_from_json(backend.data["survey_creator_data"])
        assert saved == store.state

    def test_noop_commands_still_save(self, store, backend):
        store.update_survey("ghost", title="X")
        assert backend.save_count == 1
        assert store.surveys == []

    def test_roundtrip(self, store, backend):
        survey, name, score = build_store(store)
        store.submit_response(survey.id, {name: "Ann", score: 4})
        store.record_response("elsewhere", {"q": ["A"]})

        reopened = SurveyStore.open(backend)
        assert reopened.state == store.state
        assert reopened.current_survey == store.current_survey

    def test_yaml_roundtrip(self, clock, ids):
        backend = MemoryBackend()
        config = StoreConfig(state_format="yaml")
        store = SurveyStore(backend, config, clock=clock, new_id=ids)
        survey, name, score = build_store(store)
        store.submit_response(survey.id, {name: "Ann", score: "5"})

        reopened = SurveyStore.open(backend, config)
        assert reopened.state == store.state

    def test_file_backend_roundtrip(self, tmp_path, clock, ids):
        backend = FileBackend(tmp_path)
        store = SurveyStore(backend, clock=clock, new_id=ids)
        build_store(store)
        assert SurveyStore.open(FileBackend(tmp_path)).state == store.state

    def test_replace_state_installs_and_saves(self, store, backend):
        build_store(store)
        imported = SurveyStore(MemoryBackend())
        imported.create_survey("Imported")
        saves = backend.save_count

        store.replace_state(imported.state)
        assert [s.title for s in store.surveys] == ["Imported"]
        assert backend.save_count == saves + 1
        assert SurveyStore.open(backend).state == imported.state

        store.replace_state(StoreState())
        assert store.surveys == []
        assert store.current_survey is None

    def test_save_failure_propagates(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = SurveyStore(FileBackend(blocker))
        with pytest.raises(StorageError):
            store.create_survey()
        # The transition itself was applied
        assert len(store.surveys) == 1


class TestLoading:

    def test_absent_blob(self):
        store = SurveyStore.open(MemoryBackend())
        assert store.surveys == []
        assert store.current_survey is None

    @pytest.mark.parametrize("blob", [
        "{not json",
        "[1, 2, 3]",
        '{"surveys": [{"title": "no id"}]}',
        '{"surveys": [{"id": "s", "status": "archived", "created_at": "2024-01-01T00:00:00", "updated_at": "2024-01-01T00:00:00"}]}',
        '{"surveys": [{"id": "s", "created_at": "yesterday", "updated_at": "today"}]}',
        '{"responses": {"s": [{"id": "r", "survey_id": "s", "answers": {"q": {"kind": "weird"}}, "submitted_at": "2024-01-01T00:00:00"}]}}',
    ])
    def test_malformed_blob_falls_back(self, blob, caplog):
        backend = MemoryBackend({"survey_creator_data": blob})
        with caplog.at_level(logging.WARNING, logger="surveykit.store"):
            store = SurveyStore.open(backend)
        assert store.surveys == []
        assert store.state.responses == {}
        assert "malformed" in caplog.text

    def test_unreadable_file_falls_back(self, tmp_path, caplog):
        (tmp_path / "survey_creator_data.json").mkdir()
        with caplog.at_level(logging.WARNING, logger="surveykit.store"):
            store = SurveyStore.open(FileBackend(tmp_path))
        assert store.surveys == []
        assert "Could not load" in caplog.text

    def test_legacy_question_types(self):
        blob = (
            '{"surveys": [{"id": "s", "title": "Old", "questions": '
            '[{"id": "q", "type": "radio", "title": "Pick", "options": ["A"]}], '
            '"created_at": "2024-01-01T00:00:00+00:00", "updated_at": "2024-01-01T00:00:00+00:00"}]}'
        )
        store = SurveyStore.open(MemoryBackend({"survey_creator_data": blob}))
        assert store.get_survey("s").questions[0].type == QuestionType.SINGLE_CHOICE

    def test_browser_era_blob(self):
        blob = (
            '{"surveys": [{"id": "1704099600000", "title": "Old", "description": "", "status": "draft", '
            '"createdAt": "2024-01-01T09:00:00.000Z", "updatedAt": "2024-01-01T09:05:00.000Z", '
            '"questions": ['
            '{"id": "1704099601000", "type": "radio", "title": "Pick", "required": true, "options": ["A", "B"]}, '
            '{"id": "1704099602000", "type": "checkbox", "title": "Tick", "required": false, "options": ["X", "Y"]}, '
            '{"id": "1704099603000", "type": "text", "title": "Name", "required": false, "options": []}]}], '
            '"responses": {"1704099600000": [{"id": "1704099700000", '
            '"responses": {"1704099601000": "B", "1704099602000": ["X", "Y"], "1704099603000": "Ann"}, '
            '"submittedAt": "2024-01-01T09:10:00.000Z"}]}}'
        )
        store = SurveyStore.open(MemoryBackend({"survey_creator_data": blob}))
        survey = store.get_survey("1704099600000")
        assert [q.type for q in survey.questions] == [
            QuestionType.SINGLE_CHOICE, QuestionType.MULTI_CHOICE, QuestionType.SHORT_TEXT,
        ]
        assert survey.created_at == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        [response] = store.responses_for("1704099600000")
        assert response.survey_id == "1704099600000"
        assert response.submitted_at == datetime(2024, 1, 1, 9, 10, tzinfo=timezone.utc)
        assert response.answers == {
            "1704099601000": SingleSelection("B"),
            "1704099602000": MultiSelection(["X", "Y"]),
            "1704099603000": ScalarAnswer("Ann"),
        }

    def test_loading_does_not_save(self):
        backend = MemoryBackend()
        SurveyStore(backend).create_survey("A")
        saves = backend.save_count
        SurveyStore.open(backend)
        assert backend.save_count == saves

    def test_custom_key(self):
        backend = MemoryBackend()
        config = StoreConfig(state_key="team-a")
        SurveyStore(backend, config).create_survey("A")
        assert SurveyStore.open(backend, config).surveys[0].title == "A"
        assert SurveyStore.open(backend).surveys == []


class TestCommands:

    def test_create_survey_returns_survey(self, store):
        survey = store.create_survey("Feedback", "About us")
        assert survey.id == "id-1"
        assert store.current_survey is store.get_survey("id-1")

    def test_set_current_survey_accepts_survey_or_id(self, store):
        first = store.create_survey("A")
        store.create_survey("B")
        store.set_current_survey(first)
        assert store.current_survey.title == "A"
        store.set_current_survey(None)
        assert store.current_survey is None
        store.set_current_survey(first.id)
        assert store.current_survey.title == "A"

    def test_add_question_returns_id(self, store):
        store.create_survey()
        question_id = store.add_question("email", "Contact")
        assert store.current_survey.get_question(question_id).type == QuestionType.EMAIL

    def test_add_question_without_current_returns_none(self, store):
        assert store.add_question(QuestionType.DATE) is None

    def test_add_then_delete_restores(self, store):
        build_store(store)
        before = list(store.current_survey.questions)
        question_id = store.add_question(QuestionType.NUMBER)
        store.delete_question(question_id)
        assert store.current_survey.questions == before

    def test_update_survey(self, store):
        survey = store.create_survey("Old")
        store.update_survey(survey.id, title="New")
        assert store.current_survey.title == "New"
        assert store.get_survey(survey.id).title == "New"

    def test_delete_survey_orphans_responses(self, store):
        survey, name, _ = build_store(store)
        store.submit_response(survey.id, {name: "Ann"})
        store.delete_survey(survey.id)
        assert store.responses_for(survey.id) == []
        assert store.response_count(survey.id) == 0
        assert store.orphaned_survey_ids() == [survey.id]
        assert len(store.state.responses[survey.id]) == 1


class TestSubmission:

    def test_missing_required_rejected(self, store, backend):
        survey, name, score = build_store(store)
        saves = backend.save_count
        with pytest.raises(ResponseValidationError) as excinfo:
            store.submit_response(survey.id, {score: 3})
        assert excinfo.value.missing == [name]
        assert store.responses_for(survey.id) == []
        assert backend.save_count == saves

    def test_reports_every_missing_question(self, store):
        survey, name, score = build_store(store)
        store.update_question(score, required=True)
        with pytest.raises(ResponseValidationError) as excinfo:
            store.submit_response(survey.id, {name: ""})
        assert excinfo.value.missing == [name, score]

    def test_valid_submission_recorded(self, store):
        survey, name, score = build_store(store)
        response = store.submit_response(survey.id, {name: "Ann", score: 5})
        assert response.answers == {name: ScalarAnswer("Ann"), score: ScalarAnswer(5)}
        assert store.responses_for(survey.id) == [response]
        assert store.response_count(survey.id) == 1

    def test_unknown_survey(self, store):
        with pytest.raises(UnknownSurveyError):
            store.submit_response("ghost", {})

    def test_record_response_skips_validation(self, store):
        survey, _, _ = build_store(store)
        response = store.record_response(survey.id, {})
        assert store.responses_for(survey.id) == [response]

    def test_multi_choice_answers_wrapped(self, store):
        survey = store.create_survey()
        q = store.add_question(QuestionType.MULTI_CHOICE, "Pick", ["A", "B"])
        response = store.submit_response(survey.id, {q: ["A", "B"]})
        assert response.answers[q] == MultiSelection(["A", "B"])


def test_independent_stores_do_not_share_state():
    a = SurveyStore(MemoryBackend(), clock=TickingClock(), new_id=SequentialIds("a-"))
    b = SurveyStore(MemoryBackend(), clock=TickingClock(), new_id=SequentialIds("b-"))
    a.create_survey("A")
    assert b.surveys == []
