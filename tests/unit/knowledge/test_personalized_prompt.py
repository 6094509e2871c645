from __future__ import annotations

import asyncio

from app.knowledge.prompts import format_amount, prompt_hash


def test_format_amount_uses_dot_thousands():
    assert format_amount(1_234_567.8) == "1.234.568"
    assert format_amount(200_000) == "200.000"
    assert format_amount(0) == "0"
    assert format_amount(None) == "N/A"


def test_prompt_contains_every_section(resolver, seed):
    corporate = asyncio.run(resolver.resolve_corporate_knowledge(seed.corporate_client_id))
    debtor = asyncio.run(resolver.resolve_debtor_knowledge(seed.debtor_id, seed.corporate_client_id))

    prompt = resolver.generate_personalized_prompt(debtor, corporate, "¿Me pueden rebajar la deuda?")

    assert prompt.startswith("Eres un asistente de negociación especializado para Banco Andino.")
    for heading in (
        "INFORMACIÓN DEL CLIENTE CORPORATIVO:",
        "INFORMACIÓN DEL DEUDOR:",
        "PERFIL DE COMPORTAMIENTO:",
        "HISTORIAL RECIENTE:",
        "POLÍTICAS DE NEGOCIACIÓN:",
        "RESPUESTAS PERSONALIZADAS DISPONIBLES:",
        "MENSAJE ACTUAL DEL DEUDOR:",
        "INSTRUCCIONES ESPECÍFICAS:",
    ):
        assert heading in prompt
    assert "- Nombre: María González" in prompt
    assert "- Deuda total: $1.200.000" in prompt
    assert "- Descuento máximo: 25%" in prompt
    assert "- Plazo máximo: 24 meses" in prompt
    assert "- horario: Lunes a viernes" in prompt
    assert "- Sin negociaciones previas" in prompt
    assert '"¿Me pueden rebajar la deuda?"' in prompt
    assert "8. Siempre incluye llamada a la acción clara" in prompt


def test_prompt_hash_is_stable():
    assert prompt_hash("abc") == prompt_hash("abc")
    assert prompt_hash("abc") != prompt_hash("abd")
    assert len(prompt_hash("abc")) == 64
