"""
Example survey builder used by the demo and the tests.

Builds a short customer feedback survey covering every aggregation path
(numeric, single choice, multi choice, free text) and optionally fills it
with a handful of responses.
"""
from typing import Optional

from surveykit.backends import MemoryBackend
from surveykit.model import QuestionType
from surveykit.store import SurveyStore


SAMPLE_ANSWERS = [
    {"rating": 5, "channel": "Email", "features": ["Export", "Reports"], "comments": "Great tool"},
    {"rating": 4, "channel": "Web", "features": ["Export"], "comments": ""},
    {"rating": 3, "channel": "Email", "features": [], "comments": "Needs dark mode"},
]


def build_example_feedback_survey(store: Optional[SurveyStore] = None, with_responses: bool = True) -> SurveyStore:
    """
    Create the feedback survey in `store` (a fresh in-memory store by default).

    The survey is left as the current survey. Question ids are returned
    by the store, so the sample answers are re-keyed onto them.
    """
    if store is None:
        store = SurveyStore(MemoryBackend())

    survey = store.create_survey("Customer Feedback", "Tell us how we are doing")

    ids = {
        "rating": store.add_question(QuestionType.RATING, "How satisfied are you?"),
        "channel": store.add_question(
            QuestionType.SINGLE_CHOICE, "How did you hear about us?", ["Email", "Web", "Friend"]
        ),
        "features": store.add_question(
            QuestionType.MULTI_CHOICE, "Which features do you use?", ["Export", "Reports", "Sharing"]
        ),
        "comments": store.add_question(QuestionType.LONG_TEXT, "Anything else?"),
    }
    store.update_question(ids["rating"], required=True)

    if with_responses:
        for sample in SAMPLE_ANSWERS:
            store.submit_response(survey.id, {ids[k]: v for k, v in sample.items()})

    return store
