"""Exception hierarchy for Social Insights.

The extractor itself never raises; these errors belong to the layers around
it (configuration loading, data loading and the workflow client).
"""

from typing import Optional


class InsightsError(Exception):
    """Base class for all Social Insights errors."""

    retryable: bool = False

    def __init__(self, message: str, *, retryable: Optional[bool] = None):
        super().__init__(message)
        if retryable is not None:
            self.retryable = retryable


class VocabularyError(InsightsError):
    """A heading/label vocabulary file could not be read or validated."""


class DataLoadError(InsightsError):
    """Post data could not be loaded from disk."""


class LangflowError(InsightsError):
    """The remote workflow call failed.

    Network failures and 5xx responses are retryable, 4xx responses are not.
    """

    retryable: bool = True

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        retryable: Optional[bool] = None,
    ):
        super().__init__(message, retryable=retryable)
        self.status_code = status_code
