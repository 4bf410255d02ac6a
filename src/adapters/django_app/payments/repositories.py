"""
Repositório Django para persistência de Pagamentos.

Implementa o PaymentRepository definido no Core. A restrição única
condicional de PaymentModel rejeita um segundo pagamento em andamento
para o mesmo carrinho mesmo sob corrida entre instâncias.
"""

from typing import Any, Dict, List, Optional
import logging

from django.db.models import Q

from src.core.payments.entities import PaymentEntity

from ..shared.repository import VersionedRepository, storage_errors
from .models import PaymentModel, ACTIVE_STATUS_VALUES
from .mappers import PaymentMapper

logger = logging.getLogger(__name__)


class DjangoPaymentRepository(VersionedRepository[PaymentEntity, PaymentModel]):
    """
    Implementação Django do PaymentRepository.

    Example:
        repo = DjangoPaymentRepository()
        active = repo.get_active_by_cart("C1")
    """

    model_class = PaymentModel
    entity_name = "payment"

    def to_entity(self, model: PaymentModel) -> PaymentEntity:
        return PaymentMapper.to_entity(model)

    def to_model(self, entity: PaymentEntity) -> PaymentModel:
        return PaymentMapper.to_model(entity)

    def to_db_patch(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        return PaymentMapper.to_columns(patch)

    def get_active_by_cart(self, cart_id: str) -> Optional[PaymentEntity]:
        """Pagamento pending/processing do carrinho, se houver."""
        with storage_errors("get active payment"):
            model = PaymentModel.objects.filter(
                cart_id=cart_id,
                status__in=ACTIVE_STATUS_VALUES,
            ).first()
        return self.to_entity(model) if model else None

    def list_by_cart(self, cart_id: str) -> List[PaymentEntity]:
        """Pagamentos do carrinho, do mais recente ao mais antigo."""
        with storage_errors("list payments"):
            models = list(
                PaymentModel.objects.filter(cart_id=cart_id).order_by('-created_at')
            )
        return [self.to_entity(model) for model in models]

    def get_by_reference(self, reference: str) -> Optional[PaymentEntity]:
        """Pagamento mais recente com transaction_id ou external_reference igual."""
        with storage_errors("get payment by reference"):
            model = PaymentModel.objects.filter(
                Q(transaction_id=reference) | Q(external_reference=reference)
            ).order_by('-created_at').first()
        return self.to_entity(model) if model else None
