from __future__ import annotations

import pytest
from conftest import open_conversation
from sqlalchemy.exc import OperationalError

from app.core.enums import ConversationStatus, SenderType
from app.core.exceptions import NotFoundError, PersistenceError
from app.database.store import MAX_MESSAGE_LENGTH, NegotiationStore
from app.models import Debtor


def test_messages_get_consecutive_sequence_numbers(store, seed):
    conversation = open_conversation(store, seed)

    first, _ = store.append_message(conversation.id, SenderType.DEBTOR, "Hola")
    second, updated = store.append_message(
        conversation.id, SenderType.AI_ASSISTANT, "Hola María", metadata={"response_type": "general_response"}
    )

    assert (first.sequence, second.sequence) == (1, 2)
    assert updated.message_count == 2
    messages = store.list_messages(conversation.id)
    assert [m.content for m in messages] == ["Hola", "Hola María"]
    assert messages[1].metadata == {"response_type": "general_response"}
    assert store.latest_message(conversation.id).id == second.id


def test_message_content_is_sanitized(store, seed):
    conversation = open_conversation(store, seed)
    message, _ = store.append_message(conversation.id, SenderType.DEBTOR, "  a\x00b" + "x" * (MAX_MESSAGE_LENGTH * 2))
    assert message.content.startswith("abx")
    assert len(message.content) == MAX_MESSAGE_LENGTH


def test_terminal_status_sets_closed_at(store, seed):
    conversation = open_conversation(store, seed)

    _, escalated = store.append_message(
        conversation.id, SenderType.AI_ASSISTANT, "Te derivo", status=ConversationStatus.ESCALATED, ai_enabled=False
    )
    assert escalated.status == ConversationStatus.ESCALATED
    assert escalated.ai_enabled is False
    assert escalated.closed_at is None

    closed = store.update_conversation(conversation.id, status=ConversationStatus.AGREED, summary="Acuerdo")
    assert closed.closed_at is not None
    assert closed.summary == "Acuerdo"


def test_append_to_unknown_conversation(store):
    with pytest.raises(NotFoundError):
        store.append_message("missing", SenderType.DEBTOR, "Hola")
    assert store.get_conversation("missing") is None


def test_debtor_source_without_debt_is_none(store, seed, session_factory):
    session = session_factory()
    try:
        debtor = Debtor(full_name="Sin Deuda", rut="9.999.999-9")
        session.add(debtor)
        session.commit()
        debtor_id = debtor.id
    finally:
        session.close()

    assert store.fetch_debtor_source(debtor_id) is None
    assert store.fetch_debtor_source("missing") is None
    assert store.fetch_debtor_source(seed.debtor_id, "other-client") is None


def test_debtor_source_includes_negotiation_history(store, seed):
    conversation = open_conversation(store, seed)
    store.append_message(conversation.id, SenderType.DEBTOR, "Quiero pagar")

    source = store.fetch_debtor_source(seed.debtor_id, seed.corporate_client_id)

    assert source.personal_info.name == "María González"
    assert source.debt_info.total_debt == 1_200_000
    assert source.corporate_context.corporate_client_name == "Banco Andino"
    assert source.negotiation_history[0].messages == ("Quiero pagar",)


def test_active_conversations_exclude_closed_and_silenced(store, seed):
    active = open_conversation(store, seed)
    silenced = open_conversation(store, seed, ai_enabled=False)
    closed = open_conversation(store, seed)
    store.update_conversation(closed.id, status=ConversationStatus.ABANDONED)

    ids = [c.id for c in store.list_active_conversations(seed.company_id)]

    assert ids == [active.id]
    assert silenced.id not in ids


def test_corporate_source_lists_only_active_knowledge(store, seed):
    policy = store.add_policy(seed.corporate_client_id, "Plazos", "Hasta 24 meses")
    store.set_policy_active(policy.id, False)

    source = store.fetch_corporate_source(seed.corporate_client_id)

    assert [p.title for p in source.policies] == ["Descuentos"]
    assert source.ai_config["max_negotiation_discount"] == 25
    assert store.fetch_corporate_source("missing") is None


def test_upsert_ai_config_keeps_unspecified_fields(store, seed):
    config = store.upsert_ai_config(seed.corporate_client_id, max_negotiation_discount=5, max_negotiation_term=None)
    assert config["max_negotiation_discount"] == 5
    assert config["max_negotiation_term"] == 24
    with pytest.raises(NotFoundError):
        store.upsert_ai_config("missing", max_negotiation_discount=5)


def test_database_errors_become_persistence_errors(seed):
    class BrokenSession:
        def get(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        def rollback(self):
            pass

        def close(self):
            pass

    store = NegotiationStore(BrokenSession)
    with pytest.raises(PersistenceError) as excinfo:
        store.get_proposal(seed.proposal_id)
    assert excinfo.value.retryable is True
