from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AnswerLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LARGE = "large"


class RunStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self in (RunStatus.SUBMITTING, RunStatus.POLLING)


@dataclass(frozen=True)
class Preferences:
    language: str
    answer_length: str


@dataclass(frozen=True)
class PendingFile:
    name: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class SubmissionRequest:
    file: PendingFile
    language: str
    size: AnswerLength
    content_type: str


@dataclass(frozen=True)
class JobHandle:
    request_id: str


@dataclass(frozen=True)
class WorkflowState:
    """Immutable snapshot of a controller's run.

    Only the fields relevant to ``status`` are set: ``handle``/``attempts`` while
    polling, ``result``/``rendered`` on success, ``error`` on failure or timeout.
    """
    status: RunStatus = RunStatus.IDLE
    handle: Optional[JobHandle] = None
    attempts: int = 0
    result: Optional[str] = None
    rendered: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def idle(cls) -> "WorkflowState":
        return cls()

    @classmethod
    def submitting(cls) -> "WorkflowState":
        return cls(status=RunStatus.SUBMITTING)

    @classmethod
    def polling(cls, handle: JobHandle, attempts: int = 0) -> "WorkflowState":
        return cls(status=RunStatus.POLLING, handle=handle, attempts=attempts)

    @classmethod
    def succeeded(cls, result: str, rendered: str, handle: Optional[JobHandle] = None,
                  attempts: int = 0) -> "WorkflowState":
        return cls(status=RunStatus.SUCCEEDED, handle=handle, attempts=attempts,
                   result=result, rendered=rendered)

    @classmethod
    def failed(cls, reason: str, handle: Optional[JobHandle] = None) -> "WorkflowState":
        return cls(status=RunStatus.FAILED, handle=handle, error=reason)

    @classmethod
    def timed_out(cls, reason: str, handle: Optional[JobHandle] = None) -> "WorkflowState":
        return cls(status=RunStatus.TIMED_OUT, handle=handle, error=reason)

    @classmethod
    def cancelled(cls, handle: Optional[JobHandle] = None) -> "WorkflowState":
        return cls(status=RunStatus.CANCELLED, handle=handle)
