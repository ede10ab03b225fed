from __future__ import annotations
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional
from urllib.parse import quote
import httpx
from tenacity import AsyncRetrying, RetryError, retry_if_exception_type, stop_any, stop_after_attempt, stop_never, wait_fixed
from solveme_app.config import RESULT_PATH, Settings
from solveme_app.errors import PollFailed, PollTimeout, WorkflowCancelled
from solveme_app.models import JobHandle

logger = logging.getLogger(__name__)

# always worth another try, whatever the hard-failure set says
TRANSIENT_STATUSES = frozenset({408, 425, 429})
PENDING_STATUSES = frozenset({202, 204})


class PollKind(str, Enum):
    READY = "ready"
    NOT_READY = "not_ready"
    HARD_FAILURE = "hard_failure"


@dataclass(frozen=True)
class PollOutcome:
    kind: PollKind
    result: Optional[str] = None
    reason: Optional[str] = None
    transient: bool = False

    @classmethod
    def ready(cls, result: str) -> "PollOutcome":
        return cls(PollKind.READY, result=result)

    @classmethod
    def not_ready(cls, reason: str, transient: bool = False) -> "PollOutcome":
        return cls(PollKind.NOT_READY, reason=reason, transient=transient)

    @classmethod
    def hard_failure(cls, reason: str) -> "PollOutcome":
        return cls(PollKind.HARD_FAILURE, reason=reason)


class _NotReady(Exception):
    pass


def _extract_result(resp: httpx.Response) -> Optional[str]:
    """Body text of a 2xx poll, or None when it carries no answer yet."""
    text = resp.text
    if "json" in resp.headers.get("content-type", ""):
        try:
            decoded = json.loads(text)
        except ValueError:
            return text
        if isinstance(decoded, str):
            return decoded
        # null, false, 0, [] and {} all mean "not yet"
        if not decoded:
            return None
    return text


class ResultPoller:
    def __init__(self, base_url: str, *, interval: float = 2.0, timeout: float = 60.0,
                 max_attempts: Optional[int] = None, max_duration: Optional[float] = None,
                 max_transient_errors: Optional[int] = 30,
                 hard_failure_statuses: Iterable[int] = (400, 401, 403, 404, 410, 422),
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.base_url = base_url.rstrip("/")
        self.interval = interval
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.max_duration = max_duration
        self.max_transient_errors = max_transient_errors
        self.hard_failure_statuses = frozenset(hard_failure_statuses) - TRANSIENT_STATUSES
        self._transport = transport
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "ResultPoller":
        return cls(
            settings.api_base_url,
            interval=settings.poll_interval_seconds,
            timeout=settings.request_timeout_seconds,
            max_attempts=settings.poll_max_attempts,
            max_duration=settings.poll_max_duration_seconds,
            max_transient_errors=settings.poll_max_transient_errors,
            hard_failure_statuses=settings.poll_hard_failure_statuses,
            **kwargs,
        )

    def classify(self, resp: httpx.Response) -> PollOutcome:
        status = resp.status_code
        if resp.is_success:
            if status in PENDING_STATUSES:
                return PollOutcome.not_ready(f"{status} still processing")
            result = _extract_result(resp)
            if result is None or not result.strip():
                return PollOutcome.not_ready(f"{status} empty result")
            return PollOutcome.ready(result)
        if status in TRANSIENT_STATUSES or resp.is_server_error:
            return PollOutcome.not_ready(f"{status} {resp.text[:200]}", transient=True)
        if status in self.hard_failure_statuses:
            return PollOutcome.hard_failure(f"{status} {resp.text[:200]}")
        return PollOutcome.not_ready(f"{status} {resp.text[:200]}")

    async def poll(self, handle: JobHandle) -> PollOutcome:
        url = self.base_url + RESULT_PATH.format(request_id=quote(handle.request_id, safe=""))
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport,
                                         follow_redirects=True) as client:
                resp = await client.get(url)
        except httpx.HTTPError as e:
            return PollOutcome.not_ready(f"{type(e).__name__}: {e}", transient=True)
        return self.classify(resp)

    def _stop_condition(self, started: float):
        stops = []
        if self.max_attempts is not None:
            stops.append(stop_after_attempt(self.max_attempts))
        if self.max_duration is not None:
            stops.append(lambda _state: self._clock() - started >= self.max_duration)
        return stop_any(*stops) if stops else stop_never

    async def wait_for_result(self, handle: JobHandle, cancelled: Optional[asyncio.Event] = None,
                              on_not_ready: Optional[Callable[[int, PollOutcome], None]] = None) -> str:
        """Poll until the service returns a result.

        Every poll, the first included, is preceded by a fixed ``interval`` pause.
        ``cancelled`` is checked before each pause and before each poll.
        ``on_not_ready`` receives the attempt number and outcome of each miss.

        Raises PollFailed on a hard failure or when more than
        ``max_transient_errors`` consecutive transient errors occur, PollTimeout
        when an attempt/duration bound is hit, WorkflowCancelled when cancelled.
        """
        def check_cancelled() -> None:
            if cancelled is not None and cancelled.is_set():
                raise WorkflowCancelled(f"polling for {handle.request_id} cancelled")

        async def pause(seconds: float) -> None:
            check_cancelled()
            await self._sleep(seconds)

        started = self._clock()
        transient_errors = 0
        result: Optional[str] = None

        await pause(self.interval)
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(_NotReady),
                stop=self._stop_condition(started),
                wait=wait_fixed(self.interval),
                sleep=pause,
            ):
                with attempt:
                    check_cancelled()
                    number = attempt.retry_state.attempt_number
                    outcome = await self.poll(handle)

                    if outcome.kind is PollKind.READY:
                        result = outcome.result
                    elif outcome.kind is PollKind.HARD_FAILURE:
                        logger.warning("Request %s rejected by service: %s", handle.request_id, outcome.reason)
                        raise PollFailed(f"request {handle.request_id} failed: {outcome.reason}")
                    else:
                        transient_errors = transient_errors + 1 if outcome.transient else 0
                        if self.max_transient_errors is not None and transient_errors > self.max_transient_errors:
                            raise PollFailed(f"service unreachable after {transient_errors} attempts: {outcome.reason}")
                        logger.info("Result for %s not ready (attempt %d): %s, retrying...",
                                    handle.request_id, number, outcome.reason)
                        if on_not_ready is not None:
                            on_not_ready(number, outcome)
                        raise _NotReady(outcome.reason)
        except RetryError as e:
            attempts = e.last_attempt.attempt_number
            raise PollTimeout(f"no result for {handle.request_id} after {attempts} attempts") from e

        logger.info("Result for %s received (%d chars)", handle.request_id, len(result or ""))
        return result
