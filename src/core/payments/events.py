"""
Domain Events do Domínio de Pagamentos.

Eventos (um por transição terminal):
- PaymentCompletedEvent: Pagamento confirmado
- PaymentFailedEvent: Pagamento recusado, comprovante inválido ou expirado
- PaymentCancelledEvent: Pagamento cancelado

Consumidor típico: fulfillment do pedido. Transições não terminais e
reentradas idempotentes não geram evento.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent

from .entities import PaymentEntity, PaymentStatus


@dataclass
class PaymentEvent(DomainEvent):
    """
    Base dos eventos terminais de pagamento.

    Attributes:
        cart_id: Carrinho dono do pagamento
        payment_id: ID do pagamento (igual ao aggregate_id)
        amount: Valor do pagamento
        payment_type: Meio de pagamento (valor do enum)
        organization_id: Organização vendedora
        reason: Motivo informado (falha/cancelamento)
    """

    cart_id: str = ""
    payment_id: str = ""
    amount: Decimal = Decimal("0.00")
    payment_type: str = ""
    organization_id: Optional[int] = None
    reason: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        if not self.payment_id:
            self.payment_id = self.aggregate_id
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))

    @property
    def aggregate_type(self) -> str:
        return "Payment"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "cart_id": self.cart_id,
            "payment_id": self.payment_id,
            "amount": str(self.amount),
            "payment_type": self.payment_type,
            "organization_id": self.organization_id,
            "reason": self.reason,
        }

    @classmethod
    def from_payment(
        cls,
        payment: PaymentEntity,
        reason: Optional[str] = None,
    ) -> "PaymentEvent":
        return cls(
            aggregate_id=payment.id,
            cart_id=payment.cart_id,
            payment_id=payment.id,
            amount=payment.amount,
            payment_type=payment.payment_type.value,
            organization_id=payment.organization_id,
            reason=reason,
        )


@dataclass
class PaymentCompletedEvent(PaymentEvent):
    """
    Evento: Pagamento foi confirmado.

    Handlers típicos:
    - Liberar o pedido para fulfillment
    - Enviar comprovante ao cliente
    """


@dataclass
class PaymentFailedEvent(PaymentEvent):
    """
    Evento: Pagamento falhou.

    Disparado por recusa do gateway, comprovante inválido ou
    expiração do retorno do gateway.
    """


@dataclass
class PaymentCancelledEvent(PaymentEvent):
    """Evento: Pagamento foi cancelado."""


EVENT_BY_STATUS = {
    PaymentStatus.COMPLETED: PaymentCompletedEvent,
    PaymentStatus.FAILED: PaymentFailedEvent,
    PaymentStatus.CANCELLED: PaymentCancelledEvent,
}


def terminal_event_for(
    payment: PaymentEntity,
    reason: Optional[str] = None,
) -> Optional[PaymentEvent]:
    """Evento correspondente ao estado terminal do pagamento, se houver."""
    event_class = EVENT_BY_STATUS.get(payment.status)
    if event_class is None:
        return None
    return event_class.from_payment(payment, reason=reason)
