"""Client-side polling that keeps a local view of a project fresh.

While a revision or the initial generation runs on the server, intermediate
conversation turns become visible only by re-fetching the project. The
loop here polls on a fixed interval and hands each snapshot to a callback.
The revision response itself stays authoritative: polling only refreshes
the view, and stops as soon as that response arrives.
"""

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from .api_client import SiteCraftAPIError, SiteCraftClient

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10.0  # seconds

ProjectCallback = Callable[[dict[str, Any]], None]


class ProjectSyncLoop:
    """Poll ``GET /api/projects/{id}`` while a long-running request is in flight.

    Args:
        client: API client used for every request.
        interval: Seconds between polls.
        on_update: Called with every fetched project snapshot.
    """

    def __init__(
        self,
        client: SiteCraftClient,
        interval: float = DEFAULT_POLL_INTERVAL,
        on_update: Optional[ProjectCallback] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.client = client
        self.interval = interval
        self.on_update = on_update

    def _notify(self, project: dict[str, Any]) -> None:
        if self.on_update is None:
            return
        try:
            self.on_update(project)
        except Exception:
            logger.exception("on_update callback failed for project %s", project.get("id"))

    async def watch(
        self,
        project_id: str,
        until: Optional[Awaitable[Any]] = None,
        max_polls: Optional[int] = None,
    ) -> Optional[dict[str, Any]]:
        """Poll until *until* completes, or until code appears when *until* is None.

        Without *until* the loop is watching an initial generation and stops
        on the first snapshot with non-empty ``current_code``. Poll failures
        are logged and the loop keeps going.

        A bare coroutine passed as *until* is wrapped in a task owned by this
        call and cancelled if the watch ends first. A future or task passed
        by the caller is never cancelled.

        Returns:
            The last snapshot fetched, or None if no poll succeeded.
        """
        owns_signal = until is not None and not asyncio.isfuture(until)
        done_signal = asyncio.ensure_future(until) if until is not None else None
        try:
            return await self._poll(project_id, done_signal, max_polls)
        finally:
            if owns_signal:
                await self._release(done_signal)

    async def _poll(
        self,
        project_id: str,
        done_signal: Optional["asyncio.Future[Any]"],
        max_polls: Optional[int],
    ) -> Optional[dict[str, Any]]:
        last: Optional[dict[str, Any]] = None
        polls = 0

        while True:
            if done_signal is not None and done_signal.done():
                return last
            if max_polls is not None and polls >= max_polls:
                return last

            polls += 1
            try:
                project = await self.client.get_project(project_id)
            except (SiteCraftAPIError, httpx.HTTPError) as e:
                logger.warning("Polling project %s failed: %s", project_id, e)
            else:
                last = project
                self._notify(project)
                if done_signal is None and project.get("current_code"):
                    return project

            if done_signal is None:
                await asyncio.sleep(self.interval)
            else:
                await asyncio.wait({done_signal}, timeout=self.interval)

    @staticmethod
    async def _release(task: "asyncio.Future[Any]") -> None:
        """Cancel an owned task still running, or surface its failure in the log."""
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            return
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Watched request failed: %s", task.exception())

    async def revise(self, project_id: str, message: str) -> str:
        """Request a revision and poll alongside it until the response arrives.

        Returns:
            The server's acknowledgement message.

        Raises:
            SiteCraftAPIError: the revision request failed. The error from the
                server is final even if a poll showed progress.
        """
        request = asyncio.ensure_future(self.client.revise(project_id, message))
        await self.watch(project_id, until=request)
        try:
            return await request
        finally:
            await self._refresh(project_id)

    async def create(
        self,
        prompt: str,
        name: Optional[str] = None,
        max_polls: Optional[int] = None,
    ) -> dict[str, Any]:
        """Create a project and poll until its first version has been generated."""
        project = await self.client.create_project(prompt, name)
        self._notify(project)
        latest = await self.watch(project["id"], max_polls=max_polls)
        return latest or project

    async def _refresh(self, project_id: str) -> None:
        """One last fetch so the view reflects the final state."""
        try:
            self._notify(await self.client.get_project(project_id))
        except (SiteCraftAPIError, httpx.HTTPError) as e:
            logger.warning("Final refresh of project %s failed: %s", project_id, e)
