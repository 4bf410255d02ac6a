"""
Migration inicial para o domínio de Clientes.

Cria a tabela:
- customers: clientes com restrição única condicional por documento
"""

from django.db import migrations, models


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='CustomerModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único do cliente'
                )),
                ('organization_id', models.BigIntegerField(
                    db_index=True,
                    help_text='Organização dona do cliente'
                )),
                ('document_type', models.CharField(max_length=20, null=True, blank=True)),
                ('document_number', models.CharField(max_length=50, null=True, blank=True)),
                ('full_name', models.CharField(max_length=255, null=True, blank=True)),
                ('email', models.CharField(max_length=255, null=True, blank=True)),
                ('phone', models.CharField(max_length=50, null=True, blank=True)),
                ('delivery_street', models.CharField(max_length=255, null=True, blank=True)),
                ('delivery_street_number', models.CharField(max_length=50, null=True, blank=True)),
                ('delivery_apartment', models.CharField(max_length=50, null=True, blank=True)),
                ('delivery_city', models.CharField(max_length=100, null=True, blank=True)),
                ('delivery_region', models.CharField(max_length=100, null=True, blank=True)),
                ('delivery_postal_code', models.CharField(max_length=20, null=True, blank=True)),
                ('delivery_country', models.CharField(max_length=100, null=True, blank=True)),
                ('delivery_office', models.CharField(max_length=255, null=True, blank=True)),
                ('created_at', models.DateTimeField(help_text='Data de criação')),
                ('updated_at', models.DateTimeField(help_text='Data da última atualização')),
                ('version', models.PositiveIntegerField(
                    default=1,
                    help_text='Versão para concorrência otimista'
                )),
            ],
            options={
                'verbose_name': 'Cliente',
                'verbose_name_plural': 'Clientes',
                'db_table': 'customers',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['organization_id', 'email'], name='customers_org_email_idx'),
                    models.Index(fields=['organization_id', 'phone'], name='customers_org_phone_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(
                        fields=('organization_id', 'document_type', 'document_number'),
                        condition=models.Q(document_type__isnull=False, document_number__isnull=False),
                        name='uniq_customer_org_document',
                    ),
                ],
            },
        ),
    ]
