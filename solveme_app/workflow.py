from __future__ import annotations
import asyncio
import logging
from typing import Callable, List, Optional
import httpx
from solveme_app.config import Settings
from solveme_app.errors import PollFailed, PollTimeout, SubmissionError, WorkflowBusy, WorkflowCancelled
from solveme_app.models import JobHandle, PendingFile, SubmissionRequest, WorkflowState
from solveme_app.services.markdown_renderer import render_result
from solveme_app.services.poller import PollOutcome, ResultPoller
from solveme_app.services.request_builder import build_request
from solveme_app.services.submitter import JobSubmitter

logger = logging.getLogger(__name__)

StateListener = Callable[[WorkflowState], None]


class WorkflowController:
    """Build -> submit -> poll as one cancellable run, exposed as a state machine.

    One controller serves one UI session. At most one run is active at a time;
    every run gets a generation number and only the current generation may
    commit state, so a cancelled run can never overwrite a newer one.
    """

    def __init__(self, submitter: JobSubmitter, poller: ResultPoller, *,
                 builder=build_request, renderer: Callable[[str], str] = render_result):
        self._submitter = submitter
        self._poller = poller
        self._builder = builder
        self._renderer = renderer
        self._state = WorkflowState.idle()
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._cancelled: Optional[asyncio.Event] = None
        self._listeners: List[StateListener] = []

    @classmethod
    def from_settings(cls, settings: Settings,
                      transport: Optional[httpx.AsyncBaseTransport] = None) -> "WorkflowController":
        return cls(JobSubmitter.from_settings(settings, transport=transport),
                   ResultPoller.from_settings(settings, transport=transport))

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state.status.is_active

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _commit(self, generation: int, state: WorkflowState) -> bool:
        if generation != self._generation:
            logger.debug("Dropping %s from superseded run %d", state.status.value, generation)
            return False
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener %r failed", listener)
        return True

    def start(self, file: Optional[PendingFile], language: str, size) -> asyncio.Task:
        """Validate input and launch a run as a task on the running loop.

        Raises InvalidInput (before any state change or network call) and
        WorkflowBusy while another run is submitting or polling.
        """
        request = self._builder(file, language, size)
        if self.is_busy:
            raise WorkflowBusy("a request is already in progress")

        self._generation += 1
        generation = self._generation
        cancelled = asyncio.Event()
        task = asyncio.create_task(self._run(generation, request, cancelled),
                                   name=f"solveme-run-{generation}")
        self._task, self._cancelled = task, cancelled
        self._commit(generation, WorkflowState.submitting())
        return task

    async def submit(self, file: Optional[PendingFile], language: str, size) -> WorkflowState:
        return await self.start(file, language, size)

    def cancel(self) -> bool:
        if not self.is_busy:
            return False
        logger.info("Cancelling run %d", self._generation)
        if self._cancelled is not None:
            self._cancelled.set()
        if self._task is not None:
            self._task.cancel()
        self._commit(self._generation, WorkflowState.cancelled(self._state.handle))
        self._generation += 1
        self._task, self._cancelled = None, None
        return True

    async def _run(self, generation: int, request: SubmissionRequest,
                   cancelled: asyncio.Event) -> WorkflowState:
        handle: Optional[JobHandle] = None
        misses = 0

        def on_not_ready(attempt: int, _outcome: PollOutcome) -> None:
            nonlocal misses
            misses = attempt
            self._commit(generation, WorkflowState.polling(handle, attempts=attempt))

        try:
            handle = await self._submitter.submit(request)
            self._commit(generation, WorkflowState.polling(handle))
            raw = await self._poller.wait_for_result(handle, cancelled=cancelled, on_not_ready=on_not_ready)
            final = WorkflowState.succeeded(raw, self._renderer(raw), handle=handle, attempts=misses + 1)
        except SubmissionError as e:
            logger.warning("Submission failed: %s", e)
            final = WorkflowState.failed(f"Failed to submit request: {e}")
        except PollFailed as e:
            final = WorkflowState.failed(str(e), handle)
        except PollTimeout as e:
            logger.warning("%s", e)
            final = WorkflowState.timed_out(str(e), handle)
        except WorkflowCancelled:
            final = WorkflowState.cancelled(handle)
        except asyncio.CancelledError:
            self._commit(generation, WorkflowState.cancelled(handle))
            raise
        except Exception as e:
            logger.exception("Run %d crashed", generation)
            final = WorkflowState.failed(f"Unexpected error: {e}", handle)
        finally:
            if generation == self._generation:
                self._task, self._cancelled = None, None

        if self._commit(generation, final):
            logger.info("Run %d finished: %s", generation, final.status.value)
        return final
