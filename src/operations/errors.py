from typing import List, Optional

class RepoOperationError(Exception):
    """Base error for move/delete/list operations. Carries the HTTP status to report."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or []

class InvalidDestinationError(RepoOperationError):
    """Destination would move a folder into itself or one of its descendants."""

    status_code = 400

class UpstreamError(RepoOperationError):
    """A GitHub call failed. ``message`` names the step that failed."""

    @classmethod
    def from_api_error(cls, message: str, error) -> "UpstreamError":
        status = error.status_code if error.status_code >= 400 else 500
        return cls(message, status_code=status, details=[error.message])

class MoveAbortedError(RepoOperationError):
    """A batch move stopped part way through; earlier moves were not undone."""

    def __init__(self, cause: RepoOperationError, result):
        completed = [f"{d.src} -> {d.dest}: {d.status}" for d in result.details]
        super().__init__(cause.message, status_code=cause.status_code, details=completed)
        self.cause = cause
        self.result = result
