"""
Mapper para conversão entre PaymentEntity (Core) e PaymentModel (Django).

Mappers são stateless e não contêm lógica de negócio.
"""

from typing import Any, Dict

from src.core.payments.entities import (
    PaymentEntity,
    PaymentStatus,
    PaymentType,
)

from .models import PaymentModel


class PaymentMapper:
    """
    Mapper para conversão entre PaymentEntity e PaymentModel.

    - to_model(): Entity → Model
    - to_entity(): Model → Entity
    - to_columns(): patch de domínio → valores de coluna
    """

    @staticmethod
    def to_model(entity: PaymentEntity) -> PaymentModel:
        """Converte PaymentEntity para PaymentModel (não salvo)."""
        return PaymentModel(
            id=entity.id,
            cart_id=entity.cart_id,
            organization_id=entity.organization_id,
            amount=entity.amount,
            payment_type=entity.payment_type.value,
            status=entity.status.value,
            proof_url=entity.proof_url,
            external_reference=entity.external_reference,
            transaction_id=entity.transaction_id,
            authorization_code=entity.authorization_code,
            card_last_four_digits=entity.card_last_four_digits,
            payment_date=entity.payment_date,
            confirmed_at=entity.confirmed_at,
            metadata=entity.metadata,
            notes=entity.notes,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            version=entity.version,
        )

    @staticmethod
    def to_entity(model: PaymentModel) -> PaymentEntity:
        """Converte PaymentModel para PaymentEntity."""
        return PaymentEntity(
            id=model.id,
            cart_id=model.cart_id,
            organization_id=model.organization_id,
            amount=model.amount,
            payment_type=PaymentType.from_string(model.payment_type),
            status=PaymentStatus.from_string(model.status),
            proof_url=model.proof_url,
            external_reference=model.external_reference,
            transaction_id=model.transaction_id,
            authorization_code=model.authorization_code,
            card_last_four_digits=model.card_last_four_digits,
            payment_date=model.payment_date,
            confirmed_at=model.confirmed_at,
            metadata=dict(model.metadata or {}),
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
            version=model.version,
        )

    @staticmethod
    def to_columns(patch: Dict[str, Any]) -> Dict[str, Any]:
        """Enums viram seus valores; demais campos passam inalterados."""
        return {
            name: value.value if isinstance(value, (PaymentStatus, PaymentType)) else value
            for name, value in patch.items()
        }
