"""Response generator and human handoff messages.

Two paths produce replies: a knowledge-personalized path when both debtor and
(non-default) corporate knowledge are known, and intent templates otherwise.
``ResponseGenerator.generate`` never raises; internal failures turn into the
technical-error reply that also forces an escalation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.core.enums import (
    CommunicationStyle,
    EscalationReason,
    Intent,
    PersonalizationLevel,
    ResponseType,
    RiskLevel,
)
from app.knowledge.prompts import format_amount, generate_personalized_prompt, prompt_hash
from app.knowledge.records import CorporateKnowledge, DebtorKnowledge, NegotiationLimits
from app.negotiation.records import Analysis, GeneratedResponse

logger = logging.getLogger(__name__)

DEFAULT_DEBTOR_NAME = "Cliente"
DEFAULT_COMPANY_NAME = "nuestra empresa"

TECHNICAL_ERROR_CONTENT = "Lo siento, he tenido un problema técnico. Un representante humano te atenderá en breve."

CONFIDENCE = {
    ResponseType.DISCOUNT_OFFER: 0.9,
    ResponseType.INSTALLMENT_OPTIONS: 0.95,
    ResponseType.TIME_EXTENSION: 0.85,
    ResponseType.AGREEMENT_CONFIRMATION: 1.0,
    ResponseType.GENERAL_INQUIRY: 0.7,
    ResponseType.PERSONALIZED_RESPONSE: 0.95,
    ResponseType.TECHNICAL_ERROR: 0.1,
}

HANDOFF_TEMPLATES: dict[EscalationReason, str] = {
    EscalationReason.USER_REQUESTED_HUMAN: (
        "{debtor}, entiendo que prefieres hablar con una persona. Te transferiré inmediatamente con uno de "
        "nuestros representantes especializados de {company}."
    ),
    EscalationReason.MESSAGE_LIMIT_EXCEEDED: (
        "{debtor}, para asegurar la mejor atención como cliente de {company}, voy a transferirte con uno de "
        "nuestros representantes humanos que podrá ayudarte mejor."
    ),
    EscalationReason.NEGATIVE_SENTIMENT: (
        "{debtor}, noté que estás teniendo dificultades. Permíteme conectarte con un representante humano de "
        "{company} que podrá ofrecerte una asistencia más personalizada."
    ),
    EscalationReason.HIGH_DISCOUNT_REQUEST: (
        "{debtor}, el descuento que solicitas requiere aprobación especial. Te conectaré con un representante "
        "de {company} que pueda evaluar tu caso."
    ),
    EscalationReason.EXTENDED_TIME_REQUEST: (
        "{debtor}, el plazo que solicitas necesita revisión adicional. Un representante humano de {company} te "
        "ayudará a encontrar la mejor solución."
    ),
    EscalationReason.TECHNICAL_ERROR: (
        "{debtor}, lo siento, he tenido un problema técnico. Un representante humano de {company} te atenderá "
        "en breve."
    ),
}


def _debtor_name(debtor: DebtorKnowledge | None) -> str:
    return (debtor.name if debtor else None) or DEFAULT_DEBTOR_NAME


def _company_name(debtor: DebtorKnowledge | None, corporate: CorporateKnowledge | None = None) -> str:
    if debtor is not None and debtor.corporate_context.corporate_client_name:
        return debtor.corporate_context.corporate_client_name
    if corporate is not None and not corporate.is_default:
        return corporate.profile.name
    return DEFAULT_COMPANY_NAME


def _style(debtor: DebtorKnowledge | None) -> CommunicationStyle:
    return debtor.personalization.communication_style if debtor else CommunicationStyle.PROFESSIONAL


def _risk(debtor: DebtorKnowledge | None) -> RiskLevel:
    return debtor.personalization.risk_level if debtor else RiskLevel.MEDIUM


def handoff_message(
    reason: EscalationReason | str | None,
    debtor: DebtorKnowledge | None = None,
    corporate: CorporateKnowledge | None = None,
) -> str:
    """Reason-specific handoff text; unknown reasons use the technical-error text."""
    try:
        key = EscalationReason(reason)
    except ValueError:
        key = EscalationReason.TECHNICAL_ERROR
    return HANDOFF_TEMPLATES[key].format(debtor=_debtor_name(debtor), company=_company_name(debtor, corporate))


def agreement_summary(proposal: Mapping[str, Any], debtor: DebtorKnowledge | None = None) -> str:
    installments = proposal.get("installments")
    lines = [
        f"- Monto total: ${format_amount(proposal.get('total_amount'))}",
        f"- Número de cuotas: {installments if installments else 'N/A'}",
        f"- Valor por cuota: ${format_amount(proposal.get('installment_amount'))}",
    ]
    if debtor is not None:
        lines.extend(
            [
                f"- Cliente: {_debtor_name(debtor)}",
                f"- Empresa: {_company_name(debtor)}",
                f"- RUT: {debtor.personal_info.rut or 'N/A'}",
            ]
        )
    return "\n".join(lines)


def technical_error_response(error: str | None = None) -> GeneratedResponse:
    return GeneratedResponse(
        content=TECHNICAL_ERROR_CONTENT,
        confidence=CONFIDENCE[ResponseType.TECHNICAL_ERROR],
        type=ResponseType.TECHNICAL_ERROR,
        personalization_level=PersonalizationLevel.NONE,
        keywords=("technical_error",),
        escalation_triggered=True,
        escalation_reason=EscalationReason.TECHNICAL_ERROR,
        error=error,
    )


class ResponseGenerator:
    def generate(
        self,
        message: str,
        analysis: Analysis,
        limits: NegotiationLimits,
        proposal: Mapping[str, Any] | None = None,
        debtor: DebtorKnowledge | None = None,
        corporate: CorporateKnowledge | None = None,
    ) -> GeneratedResponse:
        try:
            if debtor is not None and corporate is not None and not corporate.is_default:
                return self._personalized(message, analysis, debtor, corporate)
            return self._generic(analysis, limits, proposal or {}, debtor)
        except Exception as exc:
            logger.exception("response.generation_failed", extra={"event": "response.generation_failed"})
            return technical_error_response(error=str(exc))

    def _personalized(
        self,
        message: str,
        analysis: Analysis,
        debtor: DebtorKnowledge,
        corporate: CorporateKnowledge,
    ) -> GeneratedResponse:
        prompt = generate_personalized_prompt(debtor, corporate, message)
        name = _debtor_name(debtor)
        company = corporate.profile.name

        if _style(debtor) == CommunicationStyle.FORMAL:
            content = f"{name}, como cliente valioso de {company}, "
        else:
            content = f"{name}, como cliente de {company}, "

        if analysis.intent == Intent.DISCOUNT_REQUEST:
            content += "he revisado tu situación y puedo ofrecerte opciones especiales de descuento. "
            if _risk(debtor) == RiskLevel.LOW:
                content += "Por tu buen historial, calificas para nuestros mejores términos. "
        elif analysis.intent == Intent.INSTALLMENT_REQUEST:
            content += "entiendo que necesitas flexibilidad en los pagos. "
            content += "Tenemos planes personalizados que se ajustan a tu perfil. "
        elif analysis.intent == Intent.TIME_REQUEST:
            content += "comprendo que necesitas más tiempo. "
            content += "Podemos evaluar opciones extendidas según tu caso particular. "
        elif analysis.intent == Intent.AGREEMENT:
            content += "me alegra que estemos cerca de un acuerdo. "
            if _risk(debtor) == RiskLevel.HIGH:
                content += "Entendemos tu situación y cuidaremos que los términos sean alcanzables. "
        else:
            content += "estoy aquí para ayudarte con las mejores opciones para tu situación. "

        content += "¿Podrías indicarme más detalles sobre lo que necesitas para poder darte la mejor solución posible?"

        return GeneratedResponse(
            content=content,
            confidence=CONFIDENCE[ResponseType.PERSONALIZED_RESPONSE],
            type=ResponseType.PERSONALIZED_RESPONSE,
            personalization_level=PersonalizationLevel.ULTRA_HIGH,
            keywords=("personalized", "corporate", "solution"),
            prompt=prompt,
            prompt_hash=prompt_hash(prompt),
        )

    def _generic(
        self,
        analysis: Analysis,
        limits: NegotiationLimits,
        proposal: Mapping[str, Any],
        debtor: DebtorKnowledge | None,
    ) -> GeneratedResponse:
        name = _debtor_name(debtor)
        company = _company_name(debtor)
        formal = _style(debtor) == CommunicationStyle.FORMAL
        level = PersonalizationLevel.HIGH if debtor is not None and debtor.name else PersonalizationLevel.MEDIUM

        if analysis.intent == Intent.DISCOUNT_REQUEST:
            response_type = ResponseType.DISCOUNT_OFFER
            keywords: tuple[str, ...] = ("discount", "calculation")
            content = (
                f"{name}, entiendo tu interés en obtener un mejor descuento. Como cliente de {company}, puedo "
                f"ofrecerte hasta un {limits.max_discount_percent}% de descuento adicional sobre la propuesta "
                "original.\n\nCon este descuento, tu cuota mensual se reduciría significativamente. ¿Te gustaría "
                "que calculemos el nuevo monto con el descuento máximo aplicado?"
            )
        elif analysis.intent == Intent.INSTALLMENT_REQUEST:
            response_type = ResponseType.INSTALLMENT_OPTIONS
            keywords = ("installments", "flexibility")
            content = (
                f"{name}, claro que podemos ajustar el número de cuotas para que se adapte mejor a tu presupuesto. "
            )
            if formal:
                content += (
                    f"Como cliente de {company}, le ofrecemos opciones flexibles de pago en 3, 6, 9 o 12 cuotas."
                    "\n\n¿Cuál de estas opciones le funcionaría mejor? También podemos combinar un mayor número de "
                    "cuotas con algún descuento adicional si lo necesita."
                )
            else:
                content += (
                    "Tenemos opciones flexibles de pago en 3, 6, 9 o 12 cuotas.\n\n¿Cuál de estas opciones te "
                    "funcionaría mejor? También podemos combinar un mayor número de cuotas con algún descuento "
                    "adicional si lo necesitas."
                )
        elif analysis.intent == Intent.TIME_REQUEST:
            response_type = ResponseType.TIME_EXTENSION
            keywords = ("time", "extension")
            days_overdue = debtor.debt_info.days_overdue if debtor else 0
            content = f"{name}, entiendo que necesitas más tiempo para pagar. "
            if days_overdue > 60:
                content += f"Entendemos tu situación actual con {days_overdue} días de mora. "
            content += (
                f"El plazo máximo que podemos ofrecer es de {limits.max_term_months} meses adicionales.\n\n"
                "Esto te daría más flexibilidad en tus pagos mensuales. ¿Te gustaría que evaluemos cómo quedarían "
                "tus cuotas con el plazo extendido?"
            )
        elif analysis.intent == Intent.AGREEMENT:
            response_type = ResponseType.AGREEMENT_CONFIRMATION
            keywords = ("agreement", "confirmation")
            greeting = f"{name}, excelente" if formal else f"¡Excelente, {name}"
            content = (
                f"{greeting}! Me alegra que hayamos llegado a un acuerdo como cliente de {company}. Para finalizar, "
                f"te confirmaré los términos:\n\n{agreement_summary(proposal, debtor)}\n\n¿Estás de acuerdo para "
                "proceder con el procesamiento del pago según estos términos?"
            )
        else:
            response_type = ResponseType.GENERAL_INQUIRY
            keywords = ("help", "options")
            content = (
                f"{name}, gracias por tu mensaje. Como cliente de {company}, estoy aquí para ayudarte a encontrar "
                "la mejor opción de pago. "
            )
            if _risk(debtor) == RiskLevel.HIGH:
                content += "Entendemos tu situación y queremos ofrecerte las mejores opciones posibles. "
            content += (
                "\n\nBasado en tu propuesta actual, podemos trabajar en:\n"
                "- Ajustar el número de cuotas (3, 6, 9 o 12 meses)\n"
                "- Revisar opciones de descuento adicionales\n"
                "- Modificar fechas de pago\n"
                "- Cualquier otra pregunta que tengas sobre tu propuesta\n\n"
                "¿Cuál de estos aspectos te gustaría que revisáramos primero?"
            )

        return GeneratedResponse(
            content=content,
            confidence=CONFIDENCE[response_type],
            type=response_type,
            personalization_level=level,
            keywords=keywords,
        )
