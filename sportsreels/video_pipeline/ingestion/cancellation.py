import asyncio
from typing import Awaitable, Optional, TypeVar

from loguru import logger

from sportsreels.exceptions import UploadCancelledException

T = TypeVar("T")


class CancellationToken:
    """
    Cooperative cancellation signal shared by the caller and one pipeline run.

    ``run`` races a collaborator call against the signal, so a cancel aborts
    in-flight network calls instead of waiting for them to finish.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Upload cancelled by caller"):
        if not self._event.is_set():
            self.reason = reason
            self._event.set()
            logger.info(f"Cancellation requested: {reason}")

    def raise_if_cancelled(self, stage: Optional[str] = None):
        if self._event.is_set():
            raise UploadCancelledException(self.reason or "Upload cancelled", stage=stage)

    async def run(self, awaitable: Awaitable[T], stage: Optional[str] = None) -> T:
        """Await ``awaitable`` unless cancellation fires first."""
        if self.cancelled and asyncio.iscoroutine(awaitable):
            awaitable.close()
        self.raise_if_cancelled(stage)
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task.done():
            return task.result()

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        raise UploadCancelledException(self.reason or "Upload cancelled", stage=stage)
