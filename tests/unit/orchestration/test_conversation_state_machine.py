from __future__ import annotations

import pytest

from app.core.enums import ConversationStatus
from app.orchestration.state_machine import InvalidTransitionError, StateMachine, conversation_state_machine


def test_state_machine_allows_valid_transition():
    sm = StateMachine({"new": {"running"}, "running": {"completed"}})
    assert sm.can_transition("new", "running") is True
    sm.assert_transition("new", "running")


def test_state_machine_rejects_invalid_transition():
    sm = StateMachine({"new": {"running"}})
    with pytest.raises(InvalidTransitionError):
        sm.assert_transition("new", "completed")


def test_active_conversation_can_negotiate_escalate_or_close():
    for target in (
        ConversationStatus.NEGOTIATING,
        ConversationStatus.ESCALATED,
        ConversationStatus.AGREED,
        ConversationStatus.REJECTED,
        ConversationStatus.ABANDONED,
    ):
        assert conversation_state_machine.can_transition(ConversationStatus.ACTIVE, target)


def test_negotiating_never_returns_to_active():
    assert not conversation_state_machine.can_transition(ConversationStatus.NEGOTIATING, ConversationStatus.ACTIVE)


def test_escalated_can_only_close():
    assert not conversation_state_machine.can_transition(ConversationStatus.ESCALATED, ConversationStatus.NEGOTIATING)
    assert conversation_state_machine.can_transition(ConversationStatus.ESCALATED, ConversationStatus.AGREED)


def test_terminal_states_have_no_exits():
    for state in (ConversationStatus.AGREED, ConversationStatus.REJECTED, ConversationStatus.ABANDONED):
        assert conversation_state_machine.is_terminal(state)
        with pytest.raises(InvalidTransitionError, match=f"{state.value} -> negotiating"):
            conversation_state_machine.assert_transition(state, ConversationStatus.NEGOTIATING)
    assert not conversation_state_machine.is_terminal(ConversationStatus.ESCALATED)
