"""
Django Models para o domínio de Pagamentos.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/payments/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- "Um pagamento em andamento por carrinho" é garantido no banco
  por restrição única condicional (status pending/processing)
"""

from django.db import models
from django.db.models import Q


class PaymentTypeChoices(models.TextChoices):
    """Choices para meio de pagamento (espelha PaymentType do Core)."""
    WEBPAY = 'webpay', 'Webpay'
    BANK_TRANSFER = 'bank_transfer', 'Transferência bancária'
    PURCHASE_ORDER = 'purchase_order', 'Ordem de compra'
    CHECK = 'check', 'Cheque'


class PaymentStatusChoices(models.TextChoices):
    """Choices para status de pagamento (espelha PaymentStatus do Core)."""
    PENDING = 'pending', 'Pendente'
    PROCESSING = 'processing', 'Em processamento'
    COMPLETED = 'completed', 'Concluído'
    FAILED = 'failed', 'Falhou'
    CANCELLED = 'cancelled', 'Cancelado'


ACTIVE_STATUS_VALUES = [
    PaymentStatusChoices.PENDING,
    PaymentStatusChoices.PROCESSING,
]


class PaymentModel(models.Model):
    """
    Model Django para persistência de Pagamentos.

    Fields:
        id: UUID como primary key (gerado pela Entity)
        cart_id: Carrinho dono do pagamento
        amount: Valor decimal(10, 2)
        payment_type / status: choices
        proof_url ... notes: dados específicos por meio
        metadata: JSONField livre
        version: Contador de concorrência otimista
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único do pagamento"
    )

    cart_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Carrinho dono do pagamento"
    )

    organization_id = models.BigIntegerField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Organização vendedora"
    )

    amount = models.DecimalField(max_digits=10, decimal_places=2)

    payment_type = models.CharField(
        max_length=20,
        choices=PaymentTypeChoices.choices,
    )

    status = models.CharField(
        max_length=20,
        choices=PaymentStatusChoices.choices,
        default=PaymentStatusChoices.PENDING,
        db_index=True,
    )

    proof_url = models.TextField(null=True, blank=True)
    external_reference = models.CharField(max_length=255, null=True, blank=True)
    transaction_id = models.CharField(max_length=255, null=True, blank=True)
    authorization_code = models.CharField(max_length=255, null=True, blank=True)
    card_last_four_digits = models.CharField(max_length=4, null=True, blank=True)

    payment_date = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)

    metadata = models.JSONField(default=dict, blank=True)
    notes = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(help_text="Data de criação")
    updated_at = models.DateTimeField(help_text="Data da última atualização")

    version = models.PositiveIntegerField(
        default=1,
        help_text="Versão para concorrência otimista"
    )

    class Meta:
        db_table = 'payments'
        verbose_name = 'Pagamento'
        verbose_name_plural = 'Pagamentos'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['cart_id'],
                condition=Q(status__in=['pending', 'processing']),
                name='uniq_active_payment_per_cart',
            ),
        ]
        indexes = [
            models.Index(fields=['cart_id', 'status'], name='payments_cart_status_idx'),
            models.Index(fields=['transaction_id'], name='payments_transaction_idx'),
            models.Index(fields=['external_reference'], name='payments_ext_ref_idx'),
        ]

    def __str__(self):
        return f"{self.payment_type} {self.amount} [{self.status}] cart={self.cart_id}"
