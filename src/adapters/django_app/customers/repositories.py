"""
Repositório Django para persistência de Clientes.

Implementa o CustomerRepository definido no Core. A restrição única
condicional de CustomerModel transforma a corrida de "primeira compra"
em DuplicateKeyError na inserção, tratada pelo ResolveCustomerService.
"""

from typing import Optional
import logging

from src.core.customers.entities import CustomerEntity

from ..shared.repository import VersionedRepository, storage_errors
from .models import CustomerModel
from .mappers import CustomerMapper

logger = logging.getLogger(__name__)


class DjangoCustomerRepository(VersionedRepository[CustomerEntity, CustomerModel]):
    """
    Implementação Django do CustomerRepository.

    Example:
        repo = DjangoCustomerRepository()
        customer = repo.get_by_document(42, "DNI", "12345678")
    """

    model_class = CustomerModel
    entity_name = "customer"

    def to_entity(self, model: CustomerModel) -> CustomerEntity:
        return CustomerMapper.to_entity(model)

    def to_model(self, entity: CustomerEntity) -> CustomerModel:
        return CustomerMapper.to_model(entity)

    def get_by_document(
        self,
        organization_id: int,
        document_type: str,
        document_number: str,
    ) -> Optional[CustomerEntity]:
        """Busca cliente pela chave (organização, tipo, número)."""
        with storage_errors("get customer by document"):
            model = CustomerModel.objects.filter(
                organization_id=organization_id,
                document_type=document_type,
                document_number=document_number,
            ).first()
        return self.to_entity(model) if model else None

    def get_by_phone(self, organization_id: int, phone: str) -> Optional[CustomerEntity]:
        """Cadastro mais recente com o telefone na organização."""
        with storage_errors("get customer by phone"):
            model = CustomerModel.objects.filter(
                organization_id=organization_id,
                phone=phone,
            ).order_by('-created_at').first()
        return self.to_entity(model) if model else None
