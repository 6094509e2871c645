"""Personalized prompt composition.

The engine itself answers with deterministic templates; the prompt is rendered
anyway so that a model can be placed behind the same contract, and its hash is
kept with each personalized reply for audit.
"""

from __future__ import annotations

import hashlib
import json

from app.knowledge.records import CorporateKnowledge, DebtorKnowledge

HISTORY_ENTRIES = 2


def format_amount(value: float | int | None) -> str:
    """Render an amount the es-CL way: ``1234567.8`` -> ``1.234.568``."""
    if value is None:
        return "N/A"
    return f"{round(value):,}".replace(",", ".")


def _format_date(value) -> str:
    if value is None:
        return "N/A"
    return value.strftime("%d-%m-%Y")


def generate_personalized_prompt(debtor: DebtorKnowledge, corporate: CorporateKnowledge, message: str) -> str:
    profile = corporate.profile
    personal = debtor.personal_info
    debt = debtor.debt_info
    personalization = debtor.personalization
    behavior = debtor.behavior_profile
    limits = corporate.negotiation_limits

    history = "\n".join(
        f"- {_format_date(n.created_at)}: {n.status} - {n.summary or 'Sin resumen'}"
        for n in debtor.negotiation_history[:HISTORY_ENTRIES]
    ) or "- Sin negociaciones previas"
    custom = "\n".join(f"- {r.trigger}: {r.response}" for r in corporate.custom_responses) or "- Ninguna"

    return f"""Eres un asistente de negociación especializado para {profile.name}.

INFORMACIÓN DEL CLIENTE CORPORATIVO:
- Empresa: {profile.name}
- RUT: {profile.rut}
- Industria: {profile.industry}
- Categoría: {profile.category or 'General'}

INFORMACIÓN DEL DEUDOR:
- Nombre: {personal.name}
- RUT: {personal.rut}
- Cliente desde: {_format_date(personal.customer_since)}
- Deuda total: ${format_amount(debt.total_debt)}
- Días de mora: {debt.days_overdue}
- Tipo de deuda: {debt.debt_type or 'N/A'}

PERFIL DE COMPORTAMIENTO:
- Tendencia de negociación: {behavior.negotiation_tendency.value}
- Patrón de pagos: {behavior.payment_pattern.value}
- Estilo de comunicación: {personalization.communication_style.value}
- Método de contacto preferido: {personalization.preferred_contact_method.value}
- Nivel de riesgo: {personalization.risk_level.value}

HISTORIAL RECIENTE:
{history}

POLÍTICAS DE NEGOCIACIÓN:
- Descuento máximo: {limits.max_discount_percent}%
- Plazo máximo: {limits.max_term_months} meses
- Umbrales de escalada: {json.dumps(limits.escalation_thresholds.to_dict(), sort_keys=True)}

RESPUESTAS PERSONALIZADAS DISPONIBLES:
{custom}

MENSAJE ACTUAL DEL DEUDOR:
"{message}"

INSTRUCCIONES ESPECÍFICAS:
1. Usa el nombre del deudor ({personal.name}) para personalizar
2. Menciona que es cliente de {profile.name}
3. Adapta tu tono al estilo de comunicación detectado ({personalization.communication_style.value})
4. Considera el nivel de riesgo ({personalization.risk_level.value}) en tu enfoque
5. Usa las políticas específicas de {profile.name}
6. Si hay historial previo, haz referencia a él si es relevante
7. Mantén un tono profesional pero empático
8. Siempre incluye llamada a la acción clara

Responde de manera personalizada, considerando toda la información proporcionada.
"""


def prompt_hash(prompt: str) -> str:
    return hashlib.sha256(prompt.encode("utf-8")).hexdigest()
