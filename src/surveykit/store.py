"""
Survey Store: the single owner of surveys, responses and the selection.

The store applies commands one at a time through `apply_command`, swaps in
the resulting state with a single assignment and then hands the full state
blob to its storage backend. Readers therefore only ever observe complete
post-command states.

Loading never fails: a missing blob starts from an empty state, and an
unreadable or malformed one is logged and discarded.
"""

import logging
import threading
from typing import Any, List, Mapping, Optional, Union

from surveykit.backends import StorageBackend
from surveykit.commands import (
    AddQuestion,
    Clock,
    Command,
    CreateSurvey,
    DeleteQuestion,
    DeleteSurvey,
    IdFactory,
    RecordResponse,
    ReplaceState,
    SetCurrentSurvey,
    StoreState,
    UpdateQuestion,
    UpdateSurvey,
    apply_command,
    new_identifier,
)
from surveykit.config import StoreConfig
from surveykit.errors import ResponseValidationError, StateFormatError, StorageError, UnknownSurveyError
from surveykit.model import QuestionType, Response, Survey, utc_now
from surveykit.serialization import dump_state, load_state
from surveykit.validation import validate_answers


logger = logging.getLogger(__name__)


class SurveyStore:
    """
    Command dispatcher and persistence boundary for survey state.

    Args:
        backend: Key-value storage collaborator
        config: StoreConfig (key and blob format)
        clock: Timestamp source, defaults to UTC now
        new_id: Identifier source, defaults to random UUID hex
        state: Initial state; use `SurveyStore.open` to load it instead
    """

    def __init__(
        self,
        backend: StorageBackend,
        config: Optional[StoreConfig] = None,
        clock: Clock = utc_now,
        new_id: IdFactory = new_identifier,
        state: Optional[StoreState] = None,
    ):
        self.backend = backend
        self.config = config or StoreConfig()
        self.clock = clock
        self.new_id = new_id
        self._state = state or StoreState()
        self._lock = threading.RLock()

    @classmethod
    def open(cls, backend: StorageBackend, config: Optional[StoreConfig] = None, **kwargs) -> "SurveyStore":
        """Create a store initialised from whatever the backend holds."""
        store = cls(backend, config, **kwargs)
        loaded = ReplaceState(store._load())
        with store._lock:
            # Installed without saving: loading never writes the blob back.
            store._state = apply_command(store._state, loaded, store.clock, store.new_id)
        return store

    def _load(self) -> StoreState:
        key = self.config.state_key
        try:
            blob = self.backend.load(key)
        except StorageError as e:
            logger.warning("Could not load state %r, starting empty: %s", key, e)
            return StoreState()
        if blob is None:
            logger.info("No saved state under %r, starting empty", key)
            return StoreState()
        try:
            state = load_state(blob, self.config.state_format)
        except StateFormatError as e:
            logger.warning("Discarding malformed state %r: %s", key, e)
            return StoreState()
        logger.info(
            "Loaded %d survey(s) and responses for %d survey(s) from %r",
            len(state.surveys), len(state.responses), key,
        )
        return state

    def save(self) -> None:
        """Write the full current state to the backend."""
        with self._lock:
            blob = dump_state(self._state, self.config.state_format)
            self.backend.save(self.config.state_key, blob)

    def dispatch(self, command: Command) -> StoreState:
        """
        Apply one command and persist the result.

        Returns:
            The new state

        Raises:
            StorageError: If the backend fails to save. The in-memory
                          state has already moved on at that point.
        """
        with self._lock:
            self._state = apply_command(self._state, command, self.clock, self.new_id)
            logger.debug("Applied %s", type(command).__name__)
            self.save()
            return self._state

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def surveys(self) -> List[Survey]:
        return list(self._state.surveys)

    @property
    def current_survey(self) -> Optional[Survey]:
        return self._state.current_survey

    def get_survey(self, survey_id: str) -> Optional[Survey]:
        return self._state.get_survey(survey_id)

    def responses_for(self, survey_id: str) -> List[Response]:
        """Responses of an existing survey; empty for unknown or deleted ones."""
        state = self._state
        if state.get_survey(survey_id) is None:
            return []
        return list(state.responses.get(survey_id, []))

    def response_count(self, survey_id: str) -> int:
        return len(self.responses_for(survey_id))

    def orphaned_survey_ids(self) -> List[str]:
        """Ids in the response index whose survey no longer exists."""
        state = self._state
        return [sid for sid in state.responses if state.get_survey(sid) is None]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_survey(self, title: Optional[str] = None, description: Optional[str] = None) -> Survey:
        survey_id = self.new_id()
        state = self.dispatch(CreateSurvey(title=title, description=description, survey_id=survey_id))
        return state.get_survey(survey_id)

    def update_survey(self, survey_id: str, **changes: Any) -> None:
        self.dispatch(UpdateSurvey(survey_id, changes))

    def delete_survey(self, survey_id: str) -> None:
        self.dispatch(DeleteSurvey(survey_id))

    def set_current_survey(self, survey: Union[Survey, str, None]) -> None:
        survey_id = survey.id if isinstance(survey, Survey) else survey
        self.dispatch(SetCurrentSurvey(survey_id))

    def add_question(
        self,
        type: Union[QuestionType, str],
        title: Optional[str] = None,
        options: Optional[List[str]] = None,
    ) -> Optional[str]:
        """
        Append a question to the current survey.

        Returns:
            The new question id, or None when there is no current survey
        """
        question_id = self.new_id()
        state = self.dispatch(AddQuestion(type, title=title, options=options, question_id=question_id))
        survey = state.current_survey
        if survey is None or survey.get_question(question_id) is None:
            return None
        return question_id

    def update_question(self, question_id: str, **changes: Any) -> None:
        self.dispatch(UpdateQuestion(question_id, changes))

    def delete_question(self, question_id: str) -> None:
        self.dispatch(DeleteQuestion(question_id))

    def record_response(self, survey_id: str, answers: Mapping[str, Any]) -> Response:
        """Append a response without validation. See `submit_response`."""
        response_id = self.new_id()
        state = self.dispatch(RecordResponse(survey_id, dict(answers), response_id=response_id))
        return state.responses[survey_id][-1]

    def submit_response(self, survey_id: str, answers: Mapping[str, Any]) -> Response:
        """
        Validate `answers` against the survey and record them.

        Raises:
            UnknownSurveyError: If no survey has `survey_id`
            ResponseValidationError: If required answers are missing;
                                     nothing is recorded in that case
        """
        with self._lock:
            survey = self.get_survey(survey_id)
            if survey is None:
                raise UnknownSurveyError(survey_id)
            result = validate_answers(survey, answers)
            if not result.ok:
                raise ResponseValidationError(result.missing)
            return self.record_response(survey_id, answers)

    def replace_state(self, state: StoreState) -> None:
        """Install `state` wholesale (e.g. an imported blob) and save it."""
        self.dispatch(ReplaceState(state))

