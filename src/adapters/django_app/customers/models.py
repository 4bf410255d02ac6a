"""
Django Models para o domínio de Clientes.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/customers/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- A unicidade da identidade é garantida no banco por restrição
  única condicional (só quando tipo e número de documento existem)
"""

from django.db import models
from django.db.models import Q


class CustomerModel(models.Model):
    """
    Model Django para persistência de Clientes.

    Fields:
        id: UUID como primary key (gerado pela Entity)
        organization_id: Organização dona do cliente
        document_type / document_number: Identidade legal
        full_name, email, phone: Contato
        delivery_*: Endereço de entrega
        version: Contador de concorrência otimista
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="UUID único do cliente"
    )

    organization_id = models.BigIntegerField(
        db_index=True,
        help_text="Organização dona do cliente"
    )

    # Identidade
    document_type = models.CharField(max_length=20, null=True, blank=True)
    document_number = models.CharField(max_length=50, null=True, blank=True)

    # Contato
    full_name = models.CharField(max_length=255, null=True, blank=True)
    email = models.CharField(max_length=255, null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)

    # Endereço de entrega
    delivery_street = models.CharField(max_length=255, null=True, blank=True)
    delivery_street_number = models.CharField(max_length=50, null=True, blank=True)
    delivery_apartment = models.CharField(max_length=50, null=True, blank=True)
    delivery_city = models.CharField(max_length=100, null=True, blank=True)
    delivery_region = models.CharField(max_length=100, null=True, blank=True)
    delivery_postal_code = models.CharField(max_length=20, null=True, blank=True)
    delivery_country = models.CharField(max_length=100, null=True, blank=True)
    delivery_office = models.CharField(max_length=255, null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(help_text="Data de criação")
    updated_at = models.DateTimeField(help_text="Data da última atualização")

    version = models.PositiveIntegerField(
        default=1,
        help_text="Versão para concorrência otimista"
    )

    class Meta:
        db_table = 'customers'
        verbose_name = 'Cliente'
        verbose_name_plural = 'Clientes'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['organization_id', 'document_type', 'document_number'],
                condition=Q(document_type__isnull=False, document_number__isnull=False),
                name='uniq_customer_org_document',
            ),
        ]
        indexes = [
            models.Index(fields=['organization_id', 'email'], name='customers_org_email_idx'),
            models.Index(fields=['organization_id', 'phone'], name='customers_org_phone_idx'),
        ]

    def __str__(self):
        return f"{self.full_name or '-'} ({self.document_type}:{self.document_number})"
