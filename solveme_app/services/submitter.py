from __future__ import annotations
import logging
from typing import Optional
import httpx
from pydantic import ValidationError
from solveme_app.config import SUBMIT_PATH, Settings
from solveme_app.errors import SubmissionError
from solveme_app.models import JobHandle, SubmissionRequest
from solveme_app.schemas import SubmitAccepted

logger = logging.getLogger(__name__)


class JobSubmitter:
    """Single POST that hands the image to the service and returns its request id.

    Not retried: a repeated submit could create a duplicate job server-side.
    """

    def __init__(self, base_url: str, timeout: float = 60.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "JobSubmitter":
        return cls(settings.api_base_url, timeout=settings.request_timeout_seconds, **kwargs)

    async def submit(self, request: SubmissionRequest) -> JobHandle:
        data = {"language": request.language, "size": request.size.value}
        files = {"file": (request.file.name, request.file.data, request.content_type)}
        url = self.base_url + SUBMIT_PATH

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport,
                                         follow_redirects=True) as client:
                resp = await client.post(url, data=data, files=files)
        except httpx.HTTPError as e:
            raise SubmissionError(f"submit request failed: {e}") from e

        if not resp.is_success:
            raise SubmissionError(f"{resp.status_code} {resp.text[:200]}", status_code=resp.status_code)

        try:
            accepted = SubmitAccepted.model_validate_json(resp.content)
        except ValidationError as e:
            raise SubmissionError(f"malformed submit response: {resp.text[:200]}",
                                  status_code=resp.status_code) from e

        logger.info("Submitted %s (%s, %s) as request %s",
                    request.file.name, request.language, request.size.value, accepted.request_id)
        return JobHandle(request_id=accepted.request_id)
