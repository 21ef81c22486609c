"""Navigation signals and the delayed navigation after a confirmed order."""

import asyncio
from collections.abc import Callable
from urllib.parse import urlencode

import structlog
from pydantic import BaseModel, ConfigDict

logger = structlog.get_logger(__name__)


class Navigation(BaseModel):
    """A request for the presentation layer to change location."""

    model_config = ConfigDict(frozen=True)

    path: str
    redirect: str | None = None

    @property
    def url(self) -> str:
        if self.redirect:
            return f"{self.path}?{urlencode({'redirect': self.redirect})}"
        return self.path


Navigator = Callable[[Navigation], None]


class ScheduledNavigation:
    """A navigation that fires after a delay unless cancelled first.

    Lives on the running event loop; scheduling never blocks the caller.
    """

    def __init__(self, navigator: Navigator, navigation: Navigation) -> None:
        self.navigator = navigator
        self.navigation = navigation
        self.fired = False
        self.cancelled = False
        self._handle: asyncio.TimerHandle | None = None

    @classmethod
    def schedule(cls, delay: float, navigator: Navigator, navigation: Navigation) -> "ScheduledNavigation":
        scheduled = cls(navigator, navigation)
        loop = asyncio.get_running_loop()
        scheduled._handle = loop.call_later(delay, scheduled._fire)
        return scheduled

    @property
    def pending(self) -> bool:
        return not (self.fired or self.cancelled)

    def cancel(self) -> None:
        if not self.pending:
            return
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
        logger.debug("Scheduled navigation cancelled", path=self.navigation.path)

    def _fire(self) -> None:
        if self.cancelled:
            return
        self.fired = True
        self.navigator(self.navigation)
