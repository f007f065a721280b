"""Exceptions raised by surveykit."""

from typing import List


class SurveyKitError(Exception):
    """Base class for all surveykit errors."""
    pass


class ResponseValidationError(SurveyKitError):
    """Raised when a submission is missing required answers."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required answers: {', '.join(self.missing)}")


class UnknownSurveyError(SurveyKitError):
    """Raised when a submission targets a survey that does not exist."""

    def __init__(self, survey_id: str):
        self.survey_id = survey_id
        super().__init__(f"Unknown survey: {survey_id}")


class StorageError(SurveyKitError):
    """Raised when a storage backend fails to read or write."""
    pass


class StateFormatError(SurveyKitError):
    """Raised when a persisted state blob cannot be decoded."""
    pass
