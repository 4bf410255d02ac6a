"""
Domínio de Clientes - Resolução de Identidade.

Deduplica clientes dentro de uma organização pelo documento legal
(tipo + número), nunca por IDs fornecidos externamente.

- Entidades (CustomerEntity)
- Use Cases (ResolveCustomer, GetCustomer)
- DTOs (Input/Output)
- Ports (CustomerRepository)
"""

from .entities import CustomerEntity, CONTACT_FIELDS
from .dtos import ResolveCustomerInputDTO, CustomerOutputDTO
from .ports import CustomerRepository, InMemoryCustomerRepository
from .use_cases import ResolveCustomerService, GetCustomerService

__all__ = [
    # Entities
    "CustomerEntity",
    "CONTACT_FIELDS",
    # DTOs
    "ResolveCustomerInputDTO",
    "CustomerOutputDTO",
    # Ports
    "CustomerRepository",
    "InMemoryCustomerRepository",
    # Use Cases
    "ResolveCustomerService",
    "GetCustomerService",
]
