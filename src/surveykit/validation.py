"""
Pre-submission validation.

A response may only be recorded once every required question has a
non-missing answer. Validation reports all offending questions at once so
a form can flag every invalid field in one pass.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping

from surveykit.answers import is_missing
from surveykit.model import Survey


@dataclass
class ValidationResult:
    """Outcome of validating a candidate answer mapping."""

    missing: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing


def validate_answers(survey: Survey, answers: Mapping[str, Any]) -> ValidationResult:
    """
    Check a candidate answer mapping against a survey's required questions.

    Args:
        survey: Survey being answered
        answers: Question id -> raw value or Answer

    Returns:
        ValidationResult listing every required question id whose answer
        is absent, blank or an empty selection, in survey question order
    """
    result = ValidationResult()
    for question in survey.questions:
        if question.required and is_missing(answers.get(question.id)):
            result.missing.append(question.id)
    return result
