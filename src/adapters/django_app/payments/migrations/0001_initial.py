"""
Migration inicial para o domínio de Pagamentos.

Cria a tabela:
- payments: pagamentos com restrição única condicional por carrinho
"""

from django.db import migrations, models


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='PaymentModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único do pagamento'
                )),
                ('cart_id', models.CharField(
                    max_length=64,
                    db_index=True,
                    help_text='Carrinho dono do pagamento'
                )),
                ('organization_id', models.BigIntegerField(
                    null=True,
                    blank=True,
                    db_index=True,
                    help_text='Organização vendedora'
                )),
                ('amount', models.DecimalField(max_digits=10, decimal_places=2)),
                ('payment_type', models.CharField(
                    max_length=20,
                    choices=[
                        ('webpay', 'Webpay'),
                        ('bank_transfer', 'Transferência bancária'),
                        ('purchase_order', 'Ordem de compra'),
                        ('check', 'Cheque'),
                    ],
                )),
                ('status', models.CharField(
                    max_length=20,
                    choices=[
                        ('pending', 'Pendente'),
                        ('processing', 'Em processamento'),
                        ('completed', 'Concluído'),
                        ('failed', 'Falhou'),
                        ('cancelled', 'Cancelado'),
                    ],
                    default='pending',
                    db_index=True,
                )),
                ('proof_url', models.TextField(null=True, blank=True)),
                ('external_reference', models.CharField(max_length=255, null=True, blank=True)),
                ('transaction_id', models.CharField(max_length=255, null=True, blank=True)),
                ('authorization_code', models.CharField(max_length=255, null=True, blank=True)),
                ('card_last_four_digits', models.CharField(max_length=4, null=True, blank=True)),
                ('payment_date', models.DateTimeField(null=True, blank=True)),
                ('confirmed_at', models.DateTimeField(null=True, blank=True)),
                ('metadata', models.JSONField(default=dict, blank=True)),
                ('notes', models.TextField(null=True, blank=True)),
                ('created_at', models.DateTimeField(help_text='Data de criação')),
                ('updated_at', models.DateTimeField(help_text='Data da última atualização')),
                ('version', models.PositiveIntegerField(
                    default=1,
                    help_text='Versão para concorrência otimista'
                )),
            ],
            options={
                'verbose_name': 'Pagamento',
                'verbose_name_plural': 'Pagamentos',
                'db_table': 'payments',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['cart_id', 'status'], name='payments_cart_status_idx'),
                    models.Index(fields=['transaction_id'], name='payments_transaction_idx'),
                    models.Index(fields=['external_reference'], name='payments_ext_ref_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(
                        fields=('cart_id',),
                        condition=models.Q(status__in=['pending', 'processing']),
                        name='uniq_active_payment_per_cart',
                    ),
                ],
            },
        ),
    ]
