"""
Selah Backend — Playback Position Tracker
==========================================

What:  Keeps a livestream's last_view_position in step with a player.
How:   Polls the player once per `interval`. Each time playback sits on a
       whole 30-second mark (30, 60, 90 ...) that differs from the last one
       sent, it is saved with PATCH .../position. A mark reached again after
       a seek back is saved again.
       On start, a stored position > 0 is restored with a single seek.

Fire-and-forget:
    A failed save is logged at DEBUG and dropped. There is no retry; the
    next mark overwrites the server value anyway (last write wins).

Lifecycle:
    tracker = PositionTracker(client, livestream_id, player)
    task = asyncio.create_task(tracker.run())
    ...
    tracker.stop(); await task
"""

import asyncio
import logging
from typing import Optional, Protocol

from app.companion.client import CompanionClient

logger = logging.getLogger(__name__)

SAVE_EVERY_SECONDS = 30


class Player(Protocol):
    """Anything that reports and sets a playback time in seconds."""

    def get_current_time(self) -> float: ...

    def seek(self, seconds: float) -> None: ...


class PositionTracker:
    def __init__(
        self,
        client: CompanionClient,
        livestream_id: int,
        player: Player,
        interval: float = 1.0,
    ):
        self.client = client
        self.livestream_id = livestream_id
        self.player = player
        self.interval = interval
        self._restored = False
        self._last_mark: Optional[int] = None
        self._stopped = asyncio.Event()

    async def restore(self) -> Optional[int]:
        """
        Seek the player to the stored position, at most once per tracker.

        Returns the position sought to, or None when nothing was restored.
        """
        if self._restored:
            return None
        self._restored = True

        try:
            livestream = await self.client.get_livestream(self.livestream_id)
        except Exception as e:
            logger.debug("Could not load stored position for %d: %s", self.livestream_id, e)
            return None

        position = int(livestream.get("lastViewPosition") or 0)
        if position <= 0:
            return None
        self.player.seek(position)
        return position

    def due_mark(self, current_time: float) -> Optional[int]:
        """The 30-second mark to persist at `current_time`, if one is due."""
        second = int(current_time)
        if second <= 0 or second % SAVE_EVERY_SECONDS != 0:
            return None
        if second == self._last_mark:
            return None
        return second

    async def tick(self) -> Optional[int]:
        """One poll. Returns the mark that was sent (or attempted)."""
        mark = self.due_mark(self.player.get_current_time())
        if mark is None:
            return None
        # Recorded before the call: a failed save is not repeated
        self._last_mark = mark
        try:
            await self.client.update_position(self.livestream_id, mark)
        except Exception as e:
            logger.debug("Position save for %d at %ds dropped: %s", self.livestream_id, mark, e)
        return mark

    async def run(self) -> None:
        await self.restore()
        while not self._stopped.is_set():
            await self.tick()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

    def stop(self) -> None:
        self._stopped.set()
