"""
Sync Poller

Client-side loop for the sync endpoint. Every interval it asks whether the
server copy changed since the last one seen, and hands a changed profile
to a callback that must overwrite local state wholesale.
"""

import asyncio
import inspect
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, Union

import httpx

from pictocat.config import settings
from pictocat.models.user import UserProfile

logger = logging.getLogger(__name__)

ProfileCallback = Callable[[UserProfile], Union[None, Awaitable[None]]]

SYNC_PATH = "/api/user/me/sync"


class SyncPoller:
    """Cancelable background poller, one per signed-in session."""

    def __init__(
        self,
        base_url: str,
        token_provider: Callable[[], str],
        on_change: ProfileCallback,
        last_modified: datetime,
        interval: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.on_change = on_change
        self.last_modified = last_modified
        self.interval = interval if interval is not None else settings.sync_poll_interval_seconds
        self._client = client
        self._owns_client = client is None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> Optional[UserProfile]:
        """One sync round trip. Returns the new profile, or None when unchanged."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=10.0)

        response = await self._client.get(
            f"{self.base_url}{SYNC_PATH}",
            params={"since": self.last_modified.isoformat()},
            headers={"Authorization": f"Bearer {self.token_provider()}"},
        )
        if response.status_code == httpx.codes.NOT_MODIFIED:
            return None
        response.raise_for_status()

        profile = UserProfile.model_validate(response.json())
        self.last_modified = profile.last_modified
        result = self.on_change(profile)
        if inspect.isawaitable(result):
            await result
        return profile

    async def run(self) -> None:
        """Poll until stopped. Transient HTTP failures are logged and retried next tick."""
        try:
            while True:
                try:
                    await self.poll_once()
                except httpx.HTTPStatusError as e:
                    if e.response.status_code == httpx.codes.UNAUTHORIZED:
                        logger.warning("Sync poll unauthorized, stopping")
                        return
                    logger.warning(f"Sync poll failed: {e}")
                except httpx.HTTPError as e:
                    logger.warning(f"Sync poll failed: {e}")
                await asyncio.sleep(self.interval)
        finally:
            if self._owns_client and self._client is not None:
                await self._client.aclose()
                self._client = None

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the loop (session ended) and wait for it to unwind."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
