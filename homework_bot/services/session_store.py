from __future__ import annotations
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, Tuple
from homework_bot.domain.session import Session, WizardState

log = logging.getLogger(__name__)

class _ParticipantLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0

class SessionStore:
    """
    Per-participant wizard state, in memory only.

    Idle sessions are never stored. Entries untouched for longer than
    ``idle_timeout`` seconds are dropped (0 disables expiry).
    """
    def __init__(self, idle_timeout: int = 3600, clock: Callable[[], float] = time.monotonic):
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._entries: Dict[int, Tuple[WizardState, float]] = {}
        self._locks: Dict[int, _ParticipantLock] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, touched: float) -> bool:
        return self.idle_timeout > 0 and self._clock() - touched > self.idle_timeout

    def get(self, participant_id: int) -> Session:
        entry = self._entries.get(participant_id)
        if entry is None:
            return Session()
        state, touched = entry
        if self._expired(touched):
            log.info("Session expired: participant=%s state=%s", participant_id, type(state).__name__)
            self._entries.pop(participant_id, None)
            return Session()
        return Session(state)

    def commit(self, participant_id: int, session: Session) -> None:
        if session.is_idle:
            self._entries.pop(participant_id, None)
        else:
            self._entries[participant_id] = (session.state, self._clock())

    def evict(self, participant_id: int) -> None:
        self._entries.pop(participant_id, None)

    @asynccontextmanager
    async def hold(self, participant_id: int) -> AsyncIterator[None]:
        """Serialize one participant's events. The lock lives only while someone holds or awaits it."""
        slot = self._locks.get(participant_id)
        if slot is None:
            slot = self._locks[participant_id] = _ParticipantLock()
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if slot.users == 0:
                self._locks.pop(participant_id, None)

    def sweep(self) -> int:
        expired = [pid for pid, (_, touched) in self._entries.items() if self._expired(touched)]
        for pid in expired:
            self._entries.pop(pid, None)
        if expired:
            log.info("Session sweep: dropped %d idle session(s)", len(expired))
        return len(expired)

async def run_sweeper(store: SessionStore, interval: int) -> None:
    while True:
        await asyncio.sleep(interval)
        store.sweep()
