from __future__ import annotations
import asyncio
import logging
import threading
from typing import Optional
from solveme_app.models import PendingFile
from solveme_app.workflow import WorkflowController

logger = logging.getLogger(__name__)

START_TIMEOUT_SECONDS = 5.0


class BackgroundLoop:
    """An asyncio loop on a daemon thread; Streamlit reruns hand runs to it.

    Controllers stay per-session; only the loop is shared.
    """

    def __init__(self, name: str = "solveme-loop"):
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        logger.info("Background event loop started")
        self._loop.run_forever()

    def start_run(self, controller: WorkflowController, file: Optional[PendingFile],
                  language: str, size: str) -> None:
        """Start a run and wait only until it is Submitting.

        InvalidInput and WorkflowBusy are re-raised in the calling thread.
        """
        async def _start() -> None:
            controller.start(file, language, size)

        asyncio.run_coroutine_threadsafe(_start(), self._loop).result(timeout=START_TIMEOUT_SECONDS)

    def cancel(self, controller: WorkflowController) -> None:
        self._loop.call_soon_threadsafe(controller.cancel)

    def stop(self) -> None:
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=START_TIMEOUT_SECONDS)
