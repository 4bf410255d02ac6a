"""
Dependency Injection Container.

Configura e gerencia todas as dependências do checkout core.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, publisher, scheduler)
- Factory: Nova instância por chamada (services, UoW)
- Configuration: valores lidos de django.conf.settings em get_container()

Imports são feitos sob demanda para que o container possa ser
importado antes do Django estar configurado.
"""

from dependency_injector import containers, providers
from typing import Any, Callable, Optional


def _lazy(module_path: str, attr: str) -> Callable[..., Any]:
    """Retorna callable que importa `module_path.attr` só na primeira chamada."""
    def build(*args, **kwargs):
        target = getattr(__import__(module_path, fromlist=[attr]), attr)
        return target(*args, **kwargs)
    build.__name__ = attr
    return build


CUSTOMER_USE_CASES = 'src.core.customers.use_cases'
PAYMENT_USE_CASES = 'src.core.payments.use_cases'


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Configuration: settings do Django
    - Infrastructure: publisher, event store, agendador de timeout
    - Repositories: Persistência (Django ORM)
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        from src.config.container import get_container

        service = get_container().confirm_payment_service()
        result = service.execute(input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration(default={
        'event_publisher_mode': 'sync',
        'webpay_timeout_seconds': 180,
    })

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'get_event_publisher'),
        mode=config.event_publisher_mode,
    )

    event_store = providers.Singleton(
        _lazy('src.adapters.django_app.events.store', 'DjangoEventStore'),
    )

    payment_timeout_scheduler = providers.Singleton(
        _lazy('src.adapters.django_app.payments.scheduler', 'CeleryPaymentTimeoutScheduler'),
    )

    # Sem adaptador concreto de gateway: estorno fica desabilitado
    payment_gateway = providers.Object(None)

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    customer_repository = providers.Singleton(
        _lazy('src.adapters.django_app.customers.repositories', 'DjangoCustomerRepository'),
    )

    payment_repository = providers.Singleton(
        _lazy('src.adapters.django_app.payments.repositories', 'DjangoPaymentRepository'),
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'DjangoUnitOfWork'),
        event_publisher=event_publisher,
        event_store=event_store,
    )

    # =========================================================================
    # Services - Clientes
    # =========================================================================

    resolve_customer_service = providers.Factory(
        _lazy(CUSTOMER_USE_CASES, 'ResolveCustomerService'),
        customer_repo=customer_repository,
        uow=unit_of_work,
    )

    get_customer_service = providers.Factory(
        _lazy(CUSTOMER_USE_CASES, 'GetCustomerService'),
        customer_repo=customer_repository,
    )

    find_customer_by_document_service = providers.Factory(
        _lazy(CUSTOMER_USE_CASES, 'FindCustomerByDocumentService'),
        customer_repo=customer_repository,
    )

    find_customer_by_phone_service = providers.Factory(
        _lazy(CUSTOMER_USE_CASES, 'FindCustomerByPhoneService'),
        customer_repo=customer_repository,
    )

    # =========================================================================
    # Services - Pagamentos
    # =========================================================================

    initiate_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'InitiatePaymentService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    submit_proof_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'SubmitProofService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    start_gateway_redirect_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'StartGatewayRedirectService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
        scheduler=payment_timeout_scheduler,
        timeout_seconds=config.webpay_timeout_seconds.as_int(),
    )

    authorize_gateway_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'AuthorizeGatewayPaymentService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    confirm_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'ConfirmPaymentService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    validate_proof_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'ValidateProofService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    mark_payment_failed_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'MarkPaymentFailedService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    cancel_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'CancelPaymentService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    expire_gateway_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'ExpireGatewayPaymentService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
        gateway=payment_gateway,
    )

    annotate_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'AnnotatePaymentService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    update_payment_amount_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'UpdatePaymentAmountService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    # Leitura (sem UoW)
    get_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'GetPaymentService'),
        payment_repo=payment_repository,
    )

    list_cart_payments_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'ListCartPaymentsService'),
        payment_repo=payment_repository,
    )

    get_active_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'GetActivePaymentService'),
        payment_repo=payment_repository,
    )

    cart_payment_stats_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'CartPaymentStatsService'),
        payment_repo=payment_repository,
    )

    find_payment_by_reference_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'FindPaymentByReferenceService'),
        payment_repo=payment_repository,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization) e carrega a
    configuração a partir de django.conf.settings.

    Returns:
        Container configurado
    """
    global _container

    if _container is None:
        from django.conf import settings

        _container = Container()
        _container.config.from_dict({
            'event_publisher_mode': getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync'),
            'webpay_timeout_seconds': getattr(settings, 'WEBPAY_TIMEOUT_MINUTES', 3) * 60,
        })

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo.
    """
    global _container
    _container = None


# =============================================================================
# Testing Container
# =============================================================================

class TestingContainer(containers.DeclarativeContainer):
    """
    Container para testes sem banco de dados.

    Usa implementações InMemory e InMemoryEventPublisher.

    Example:
        container = TestingContainer()
        container.initiate_payment_service().execute(dto)
        assert container.event_publisher().published_events == []
    """

    event_publisher = providers.Singleton(
        _lazy('src.adapters.django_app.events.publishers', 'InMemoryEventPublisher'),
    )

    customer_repository = providers.Singleton(
        _lazy('src.core.customers.ports', 'InMemoryCustomerRepository'),
    )

    payment_repository = providers.Singleton(
        _lazy('src.core.payments.ports', 'InMemoryPaymentRepository'),
    )

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work', 'InMemoryUnitOfWork'),
        event_publisher=event_publisher,
    )

    resolve_customer_service = providers.Factory(
        _lazy(CUSTOMER_USE_CASES, 'ResolveCustomerService'),
        customer_repo=customer_repository,
        uow=unit_of_work,
    )

    initiate_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'InitiatePaymentService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    submit_proof_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'SubmitProofService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    confirm_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'ConfirmPaymentService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    validate_proof_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'ValidateProofService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    cancel_payment_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'CancelPaymentService'),
        payment_repo=payment_repository,
        uow=unit_of_work,
    )

    find_payment_by_reference_service = providers.Factory(
        _lazy(PAYMENT_USE_CASES, 'FindPaymentByReferenceService'),
        payment_repo=payment_repository,
    )
