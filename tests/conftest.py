"""Shared fixtures: a scripted analysis service behind httpx.MockTransport and a fake clock."""

from __future__ import annotations

import asyncio
import io
from typing import Callable, List, Optional

import httpx
import pytest
from PIL import Image

from solveme_app.models import PendingFile
from solveme_app.services.poller import ResultPoller
from solveme_app.services.submitter import JobSubmitter
from solveme_app.workflow import WorkflowController

BASE_URL = "http://solver.test"

Responder = Callable[[httpx.Request], httpx.Response]


def respond(status: int = 200, **kwargs) -> Responder:
    """Build a fresh response per request (httpx responses are single-use)."""
    return lambda request: httpx.Response(status, **kwargs)


def fail_with(exc_type=httpx.ConnectError, message: str = "connection refused") -> Responder:
    def _raise(request: httpx.Request) -> httpx.Response:
        raise exc_type(message, request=request)
    return _raise


class FakeClock:
    """Monotonic clock that only advances when the code under test sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # still yield so cancellation can land
        await asyncio.sleep(0)


class FakeService:
    """Scripted /OcrChat endpoints; the last poll responder repeats forever."""

    def __init__(self, clock: FakeClock, submit: Optional[Responder], polls: List[Responder]) -> None:
        self.clock = clock
        self.submit_responder = submit or respond(200, json={"requestId": "abc123"})
        self.poll_responders = list(polls) or [respond(202)]
        self.submits: List[httpx.Request] = []
        self.polls: List[tuple] = []
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path == "/OcrChat/Submit":
            self.submits.append(request)
            return self.submit_responder(request)
        if request.method == "GET" and request.url.path.startswith("/OcrChat/Result/"):
            self.polls.append((self.clock.now, request.url.raw_path.decode("ascii")))
            responder = self.poll_responders.pop(0) if len(self.poll_responders) > 1 else self.poll_responders[0]
            return responder(request)
        return httpx.Response(404, text="no route")

    def submitter(self) -> JobSubmitter:
        return JobSubmitter(BASE_URL, transport=self.transport)

    def poller(self, **kwargs) -> ResultPoller:
        kwargs.setdefault("sleep", self.clock.sleep)
        kwargs.setdefault("clock", self.clock)
        return ResultPoller(BASE_URL, transport=self.transport, **kwargs)

    def controller(self, **kwargs) -> WorkflowController:
        renderer = kwargs.pop("renderer", None)
        extra = {"renderer": renderer} if renderer else {}
        return WorkflowController(self.submitter(), self.poller(**kwargs), **extra)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(clock):
    def _make(submit: Optional[Responder] = None, polls: Optional[List[Responder]] = None) -> FakeService:
        return FakeService(clock, submit, polls or [])
    return _make


@pytest.fixture
def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), "white").save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def photo(png_bytes) -> PendingFile:
    return PendingFile(name="photo.png", data=png_bytes, content_type="image/png")
