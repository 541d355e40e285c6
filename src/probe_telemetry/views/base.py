"""Shared lifecycle for views driven by a RefreshScheduler."""

from typing import Callable, Optional

from ..refresh_scheduler import RefreshScheduler


class ScheduledView:
    """Base class: ``start`` polls ``refresh`` on the scheduler's interval until ``stop``."""

    def __init__(
        self,
        name: str,
        scheduler: Optional[RefreshScheduler] = None,
        on_update: Optional[Callable[["ScheduledView"], None]] = None,
    ):
        self.scheduler = scheduler or RefreshScheduler(name=name)
        self._on_update = on_update

    async def refresh(self) -> None:
        raise NotImplementedError

    async def _refresh_and_notify(self) -> None:
        await self.refresh()
        if self._on_update is not None:
            self._on_update(self)

    def start(self) -> None:
        self.scheduler.start(self._refresh_and_notify)

    def stop(self) -> None:
        """Tear down polling; results of fetches still in flight are dropped."""
        self.scheduler.stop()

    async def close(self) -> None:
        await self.scheduler.stop_and_wait()
