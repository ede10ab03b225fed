from __future__ import annotations
from typing import Optional


class SolveMeError(Exception):
    pass


class InvalidInput(SolveMeError):
    """Submission input is missing or malformed; raised before any network call."""


class SubmissionError(SolveMeError):
    """The submit call failed or returned no request id. Never retried."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PollFailed(SolveMeError):
    """The service rejected the job, or stayed unreachable for too long."""


class PollTimeout(SolveMeError):
    """The configured attempt or duration bound was reached without a result."""


class WorkflowBusy(SolveMeError):
    pass


class WorkflowCancelled(SolveMeError):
    pass
