"""Canonical state transition helpers for negotiation conversations."""

from __future__ import annotations

from app.core.enums import ConversationStatus


class InvalidTransitionError(ValueError):
    """Raised when a disallowed state transition is attempted."""


class StateMachine:
    """Table-driven state machine; unknown states have no outgoing transitions."""

    def __init__(self, transitions: dict[str, set[str]]) -> None:
        self._transitions = transitions

    def can_transition(self, current: str, target: str) -> bool:
        return target in self._transitions.get(current, set())

    def assert_transition(self, current: str, target: str) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(f"Transition not allowed: {_label(current)} -> {_label(target)}")

    def is_terminal(self, state: str) -> bool:
        return not self._transitions.get(state)


def _label(state: str) -> str:
    return getattr(state, "value", state)


_CLOSING = {ConversationStatus.AGREED, ConversationStatus.REJECTED, ConversationStatus.ABANDONED}

CONVERSATION_TRANSITIONS: dict[str, set[str]] = {
    ConversationStatus.ACTIVE: {ConversationStatus.NEGOTIATING, ConversationStatus.ESCALATED, *_CLOSING},
    ConversationStatus.NEGOTIATING: {ConversationStatus.ESCALATED, *_CLOSING},
    ConversationStatus.ESCALATED: set(_CLOSING),
    ConversationStatus.AGREED: set(),
    ConversationStatus.REJECTED: set(),
    ConversationStatus.ABANDONED: set(),
}

conversation_state_machine = StateMachine(CONVERSATION_TRANSITIONS)
