"""
Domínio de Pagamentos - Ciclo de Vida do Pagamento.

Máquina de estados de um pagamento ligado a um carrinho: criação,
comprovante (meios manuais), redirecionamento ao gateway, confirmação,
validação e estados terminais (completed, failed, cancelled), com
transições estritas e reentrada idempotente.

- Entidades (PaymentEntity, PaymentStatus, PaymentType)
- Domain Events (PaymentCompleted, PaymentFailed, PaymentCancelled)
- DTOs (Input/Output)
- Ports (PaymentRepository, PaymentGateway, PaymentTimeoutScheduler)
- Use Cases
"""

from .entities import PaymentEntity, PaymentStatus, PaymentType
from .events import (
    PaymentEvent,
    PaymentCompletedEvent,
    PaymentFailedEvent,
    PaymentCancelledEvent,
)
from .dtos import (
    InitiatePaymentInputDTO,
    SubmitProofInputDTO,
    StartGatewayRedirectInputDTO,
    ConfirmPaymentInputDTO,
    ValidateProofInputDTO,
    MarkPaymentFailedInputDTO,
    CancelPaymentInputDTO,
    ExpireGatewayPaymentInputDTO,
    AnnotatePaymentInputDTO,
    UpdatePaymentAmountInputDTO,
    PaymentOutputDTO,
    CartPaymentStatsDTO,
)
from .ports import (
    PaymentRepository,
    PaymentGateway,
    PaymentTimeoutScheduler,
    InMemoryPaymentRepository,
)
from .use_cases import (
    InitiatePaymentService,
    SubmitProofService,
    StartGatewayRedirectService,
    ConfirmPaymentService,
    ValidateProofService,
    MarkPaymentFailedService,
    CancelPaymentService,
    ExpireGatewayPaymentService,
    AnnotatePaymentService,
    UpdatePaymentAmountService,
    GetPaymentService,
    ListCartPaymentsService,
    GetActivePaymentService,
    CartPaymentStatsService,
)

__all__ = [
    # Entities
    "PaymentEntity",
    "PaymentStatus",
    "PaymentType",
    # Events
    "PaymentEvent",
    "PaymentCompletedEvent",
    "PaymentFailedEvent",
    "PaymentCancelledEvent",
    # DTOs
    "InitiatePaymentInputDTO",
    "SubmitProofInputDTO",
    "StartGatewayRedirectInputDTO",
    "ConfirmPaymentInputDTO",
    "ValidateProofInputDTO",
    "MarkPaymentFailedInputDTO",
    "CancelPaymentInputDTO",
    "ExpireGatewayPaymentInputDTO",
    "AnnotatePaymentInputDTO",
    "UpdatePaymentAmountInputDTO",
    "PaymentOutputDTO",
    "CartPaymentStatsDTO",
    # Ports
    "PaymentRepository",
    "PaymentGateway",
    "PaymentTimeoutScheduler",
    "InMemoryPaymentRepository",
    # Use Cases
    "InitiatePaymentService",
    "SubmitProofService",
    "StartGatewayRedirectService",
    "ConfirmPaymentService",
    "ValidateProofService",
    "MarkPaymentFailedService",
    "CancelPaymentService",
    "ExpireGatewayPaymentService",
    "AnnotatePaymentService",
    "UpdatePaymentAmountService",
    "GetPaymentService",
    "ListCartPaymentsService",
    "GetActivePaymentService",
    "CartPaymentStatsService",
]
