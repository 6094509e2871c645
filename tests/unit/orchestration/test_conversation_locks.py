from __future__ import annotations

import asyncio

import pytest

from app.core.exceptions import TurnInProgressError
from app.orchestration.locks import ConversationLockRegistry


def test_turns_for_one_conversation_do_not_overlap():
    registry = ConversationLockRegistry()
    trace: list[str] = []

    async def turn(name: str) -> None:
        async with registry.hold("conv-1"):
            trace.append(f"{name}:start")
            await asyncio.sleep(0.01)
            trace.append(f"{name}:end")

    async def main() -> None:
        await asyncio.gather(turn("a"), turn("b"))

    asyncio.run(main())
    assert trace == ["a:start", "a:end", "b:start", "b:end"]
    assert len(registry) == 0


def test_different_conversations_run_concurrently():
    registry = ConversationLockRegistry()
    trace: list[str] = []

    async def turn(conversation_id: str) -> None:
        async with registry.hold(conversation_id):
            trace.append(f"{conversation_id}:start")
            await asyncio.sleep(0.01)
            trace.append(f"{conversation_id}:end")

    async def main() -> None:
        await asyncio.gather(turn("a"), turn("b"))

    asyncio.run(main())
    assert trace[:2] == ["a:start", "b:start"]


def test_reject_concurrent_fails_fast():
    registry = ConversationLockRegistry(reject_concurrent=True)

    async def main() -> None:
        async with registry.hold("conv-1"):
            assert registry.in_flight("conv-1") is True
            with pytest.raises(TurnInProgressError):
                async with registry.hold("conv-1"):
                    pass
        assert registry.in_flight("conv-1") is False

    asyncio.run(main())
    assert len(registry) == 0
