from typing import Optional


class WorkflowError(Exception):
    """Base class for every failure surfaced to the user as a notification."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(WorkflowError):
    """A precondition that failed locally. No request was sent."""


class ServiceError(WorkflowError):
    """
    The remote service could not be reached or reported an error.

    `message` holds the structured `error` field of the response body when the
    service sent one, otherwise the transport-level description.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
