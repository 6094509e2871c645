"""Per-conversation turn locks."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from threading import Lock

from app.core.exceptions import TurnInProgressError


@dataclass
class _Slot:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class ConversationLockRegistry:
    """Hands out one ``asyncio.Lock`` per conversation id.

    Turns for the same conversation queue behind each other, or fail fast with
    ``TurnInProgressError`` when ``reject_concurrent`` is set. Entries are
    dropped once no caller holds or waits on them.
    """

    def __init__(self, reject_concurrent: bool = False) -> None:
        self.reject_concurrent = reject_concurrent
        self._slots: dict[str, _Slot] = {}
        self._guard = Lock()

    @asynccontextmanager
    async def hold(self, conversation_id: str) -> AsyncIterator[None]:
        with self._guard:
            slot = self._slots.get(conversation_id)
            if slot is None:
                slot = _Slot()
                self._slots[conversation_id] = slot
            if self.reject_concurrent and slot.lock.locked():
                raise TurnInProgressError(f"Conversation {conversation_id} already has a turn in progress")
            slot.holders += 1
        try:
            async with slot.lock:
                yield
        finally:
            with self._guard:
                slot.holders -= 1
                if slot.holders == 0 and self._slots.get(conversation_id) is slot:
                    del self._slots[conversation_id]

    def in_flight(self, conversation_id: str) -> bool:
        with self._guard:
            slot = self._slots.get(conversation_id)
            return slot is not None and slot.lock.locked()

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)
