"""
Fixtures para testes dos adapters Django.

O Django é configurado no conftest raiz (SQLite em memória).
"""

import pytest


@pytest.fixture
def customer_repo():
    from src.adapters.django_app.customers.repositories import DjangoCustomerRepository
    return DjangoCustomerRepository()


@pytest.fixture
def payment_repo():
    from src.adapters.django_app.payments.repositories import DjangoPaymentRepository
    return DjangoPaymentRepository()


@pytest.fixture
def event_store():
    from src.adapters.django_app.events.store import DjangoEventStore
    return DjangoEventStore()


@pytest.fixture
def inmemory_publisher():
    from src.adapters.django_app.events.publishers import InMemoryEventPublisher
    return InMemoryEventPublisher()


@pytest.fixture
def payment_factory(payment_repo):
    """Factory para inserir PaymentEntity no banco."""
    from src.core.payments.entities import PaymentEntity, PaymentType

    def create_payment(payment_type=PaymentType.WEBPAY, cart_id="C1", amount="100.00", **kwargs):
        return payment_repo.insert(PaymentEntity.create(
            cart_id=cart_id,
            payment_type=payment_type,
            amount=amount,
            **kwargs,
        ))

    return create_payment
