from __future__ import annotations

import httpx
import pytest

from conftest import fail_with, respond
from solveme_app.errors import SubmissionError
from solveme_app.models import AnswerLength, SubmissionRequest
from solveme_app.services.submitter import JobSubmitter


@pytest.fixture
def request_for(photo):
    return SubmissionRequest(file=photo, language="ru", size=AnswerLength.LARGE, content_type="image/png")


@pytest.mark.anyio
async def test_submit_sends_multipart_and_returns_handle(service, request_for, png_bytes):
    svc = service(submit=respond(200, json={"requestId": "abc123"}))

    handle = await svc.submitter().submit(request_for)

    assert handle.request_id == "abc123"
    sent = svc.submits[0]
    assert sent.headers["content-type"].startswith("multipart/form-data")
    body = sent.content
    assert b'name="language"\r\n\r\nru' in body
    assert b'name="size"\r\n\r\nlarge' in body
    assert b'name="file"; filename="photo.png"' in body
    assert b"Content-Type: image/png" in body
    assert png_bytes in body


@pytest.mark.anyio
async def test_extra_response_fields_are_ignored(service, request_for):
    svc = service(submit=respond(201, json={"requestId": "r-1", "queued": True}))
    handle = await svc.submitter().submit(request_for)
    assert handle.request_id == "r-1"


@pytest.mark.anyio
@pytest.mark.parametrize("status", [400, 413, 500, 503])
async def test_non_success_status_fails(service, request_for, status):
    svc = service(submit=respond(status, text="nope"))
    with pytest.raises(SubmissionError) as exc_info:
        await svc.submitter().submit(request_for)
    assert exc_info.value.status_code == status
    assert str(status) in str(exc_info.value)


@pytest.mark.anyio
@pytest.mark.parametrize(
    "responder",
    [
        respond(200, json={"id": "abc"}),
        respond(200, json={"requestId": ""}),
        respond(200, text="not json"),
    ],
)
async def test_missing_request_id_fails(service, request_for, responder):
    svc = service(submit=responder)
    with pytest.raises(SubmissionError, match="malformed"):
        await svc.submitter().submit(request_for)


@pytest.mark.anyio
async def test_transport_error_fails_without_retry(service, request_for):
    svc = service(submit=fail_with(httpx.ConnectError))
    with pytest.raises(SubmissionError) as exc_info:
        await svc.submitter().submit(request_for)
    assert exc_info.value.status_code is None
    assert len(svc.submits) == 1


@pytest.mark.anyio
async def test_base_url_trailing_slash(service, request_for):
    svc = service()
    submitter = JobSubmitter("http://solver.test/", transport=svc.transport)
    await submitter.submit(request_for)
    assert str(svc.submits[0].url) == "http://solver.test/OcrChat/Submit"


@pytest.mark.anyio
async def test_submit_follows_redirect_to_another_host(request_for, png_bytes):
    received = []

    def handler(request):
        if request.url.host == "solver.test":
            return httpx.Response(308, headers={"location": "http://mirror.test/OcrChat/Submit"})
        received.append(request)
        return httpx.Response(200, json={"requestId": "abc123"})

    submitter = JobSubmitter("http://solver.test", transport=httpx.MockTransport(handler))
    handle = await submitter.submit(request_for)

    assert handle.request_id == "abc123"
    assert len(received) == 1
    assert received[0].method == "POST"
    assert b'name="language"\r\n\r\nru' in received[0].content
    assert png_bytes in received[0].content
