"""
Mapper para conversão entre CustomerEntity (Core) e CustomerModel (Django).

Mappers são stateless e não contêm lógica de negócio.
"""

from src.core.customers.entities import CustomerEntity, CONTACT_FIELDS

from .models import CustomerModel


class CustomerMapper:
    """
    Mapper para conversão entre CustomerEntity e CustomerModel.

    - to_model(): Entity → Model
    - to_entity(): Model → Entity
    """

    @staticmethod
    def to_model(entity: CustomerEntity) -> CustomerModel:
        """Converte CustomerEntity para CustomerModel (não salvo)."""
        return CustomerModel(
            id=entity.id,
            organization_id=entity.organization_id,
            document_type=entity.document_type,
            document_number=entity.document_number,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            version=entity.version,
            **{name: getattr(entity, name) for name in CONTACT_FIELDS},
        )

    @staticmethod
    def to_entity(model: CustomerModel) -> CustomerEntity:
        """Converte CustomerModel para CustomerEntity."""
        return CustomerEntity(
            id=model.id,
            organization_id=model.organization_id,
            document_type=model.document_type,
            document_number=model.document_number,
            created_at=model.created_at,
            updated_at=model.updated_at,
            version=model.version,
            **{name: getattr(model, name) for name in CONTACT_FIELDS},
        )
