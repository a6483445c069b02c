"""State persistence with a store fallback chain.

This module loads and saves the single ``appState`` document. Reads walk
the chain (sync store -> local store -> in-memory store) until one store
answers; writes go to the first store and, when it fails, are mirrored to
the next one. Saved documents carry a ``savedAt`` stamp so a read prefers
a mirrored copy over an older one left in a primary that cannot be written.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Any

from .exceptions import PersistenceFailure
from .models import STATE_KEY
from .stores import KeyValueStore

logger = logging.getLogger(__name__)

# Wall-clock time of the write, added to every saved document.
SAVED_AT_KEY = "savedAt"


def _saved_at(document: Any) -> float | None:
    if not isinstance(document, dict):
        return None
    stamp = document.get(SAVED_AT_KEY)
    if isinstance(stamp, bool) or not isinstance(stamp, (int, float)):
        return None
    return float(stamp)


class StatePersister:
    """Loads and saves the application state document."""

    def __init__(
        self,
        stores: Sequence[KeyValueStore],
        mirror_failed_writes: bool = True,
        key: str = STATE_KEY,
    ):
        """Initialize state persister.

        Args:
            stores: Stores in fallback order; the first is the primary
            mirror_failed_writes: Write to the next store when a write fails
            key: Document key inside each store
        """
        if not stores:
            raise ValueError("StatePersister needs at least one store")
        self.stores = list(stores)
        self.mirror_failed_writes = mirror_failed_writes
        self.key = key
        self._generation = 0
        self._written_generation = 0
        self._pending: set[asyncio.Task[bool]] = set()
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    async def load(self) -> Any | None:
        """Read the stored document, preferring the first store that answers.

        A later store only wins when it holds a copy with a newer save
        stamp, which happens after writes were mirrored past a primary that
        can still be read.

        Returns:
            The raw stored document without its save stamp, or None on
            first run or when every store failed
        """
        chosen: Any | None = None
        chosen_stamp: float | None = None
        chosen_name: str | None = None
        for store in self.stores:
            try:
                document = await store.get(self.key)
            except (PersistenceFailure, OSError) as err:
                logger.warning(f"Failed to load state from {store.name} store: {err}")
                continue
            stamp = _saved_at(document)
            if chosen_name is None:
                chosen, chosen_stamp, chosen_name = document, stamp, store.name
            elif stamp is not None and (chosen_stamp is None or stamp > chosen_stamp):
                logger.warning(
                    f"Using newer state from {store.name} store over {chosen_name} store"
                )
                chosen, chosen_stamp, chosen_name = document, stamp, store.name

        if chosen_name is None:
            logger.error("All stores failed to load; starting from default state")
            return None
        if chosen is None:
            logger.info(f"No saved state in {chosen_name} store")
            return None
        logger.info(f"Loaded state from {chosen_name} store")
        if isinstance(chosen, dict):
            chosen = {k: v for k, v in chosen.items() if k != SAVED_AT_KEY}
        return chosen

    def _get_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def save(self, document: dict[str, Any], generation: int | None = None) -> bool:
        """Write the document; failures are logged, never raised.

        Args:
            document: Canonical state document
            generation: Save order stamp; older stamps than the last written
                one are skipped

        Returns:
            True if some store accepted the document
        """
        if generation is None:
            self._generation += 1
            generation = self._generation

        async with self._get_lock():
            if generation < self._written_generation:
                logger.debug(f"Skipping stale save (generation {generation})")
                return False

            stamped = {**document, SAVED_AT_KEY: time.time()}
            targets = self.stores if self.mirror_failed_writes else self.stores[:1]
            for store in targets:
                try:
                    await store.set(self.key, stamped)
                except (PersistenceFailure, OSError) as err:
                    logger.error(f"Failed to save state to {store.name} store: {err}")
                    continue
                self._written_generation = generation
                return True
            return False

    def schedule_save(self, document: dict[str, Any]) -> None:
        """Request a save without waiting for it.

        On a running event loop the save becomes a background task; without
        one it runs to completion before returning.
        """
        self._generation += 1
        generation = self._generation
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.save(document, generation))
            return
        task = loop.create_task(self.save(document, generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    async def flush(self) -> None:
        """Wait for all scheduled saves to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
