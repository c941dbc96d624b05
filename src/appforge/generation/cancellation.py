import asyncio

from appforge.errors import GenerationCancelled


class CancellationToken:
    """Liveness flag shared between a run and whoever may tear it down."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise GenerationCancelled()

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds``; raise GenerationCancelled as soon as cancelled."""
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except TimeoutError:
            return
        raise GenerationCancelled()
