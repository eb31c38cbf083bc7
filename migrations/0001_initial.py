"""
Initial Ledgerman schema.

- Obligation (+ history) with the fulfilled-iff-zero check constraint
- Collection (+ history) and CollectedLineItem
- Reconciliation log (one per collection)
- CodeSequence
"""

import uuid

import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ══════════════════════════════════════════════════════════════
        # CODE SEQUENCE
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="CodeSequence",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "kind",
                    models.CharField(max_length=20, verbose_name="Tipo"),
                ),
                (
                    "year",
                    models.PositiveSmallIntegerField(verbose_name="Ano"),
                ),
                (
                    "last_value",
                    models.PositiveIntegerField(default=0, verbose_name="Último valor"),
                ),
            ],
            options={
                "verbose_name": "Sequência de Código",
                "verbose_name_plural": "Sequências de Código",
                "db_table": "ledgerman_code_sequence",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("kind", "year"), name="ledgerman_code_sequence_kind_year"
                    ),
                ],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # OBLIGATION
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Obligation",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID"
                    ),
                ),
                (
                    "product_code",
                    models.CharField(
                        db_index=True, max_length=100, verbose_name="Código do Produto"
                    ),
                ),
                (
                    "product_description",
                    models.CharField(
                        blank=True, max_length=255, verbose_name="Descrição do Produto"
                    ),
                ),
                (
                    "quantity_pending",
                    models.PositiveIntegerField(verbose_name="Quantidade Pendente"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pendente"),
                            ("fulfilled", "Coletado"),
                            ("cancelled", "Cancelado"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1, editable=False, verbose_name="Versão"
                    ),
                ),
                ("notes", models.TextField(blank=True, verbose_name="Observações")),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        help_text="Define a prioridade FIFO: pendências mais antigas são baixadas primeiro",
                        verbose_name="Criado em",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="Atualizado em"),
                ),
            ],
            options={
                "verbose_name": "Pendência de Coleta",
                "verbose_name_plural": "Pendências de Coleta",
                "db_table": "ledgerman_obligation",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["product_code", "status", "created_at"],
                        name="ledgerman_obl_code_status_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("quantity_pending", 0), ("status", "fulfilled")),
                            models.Q(
                                models.Q(("status", "fulfilled"), _negated=True),
                                ("quantity_pending__gt", 0),
                            ),
                            _connector="OR",
                        ),
                        name="ledgerman_obligation_fulfilled_iff_zero",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="HistoricalObligation",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        db_index=True, default=uuid.uuid4, editable=False, verbose_name="UUID"
                    ),
                ),
                (
                    "product_code",
                    models.CharField(
                        db_index=True, max_length=100, verbose_name="Código do Produto"
                    ),
                ),
                (
                    "product_description",
                    models.CharField(
                        blank=True, max_length=255, verbose_name="Descrição do Produto"
                    ),
                ),
                (
                    "quantity_pending",
                    models.PositiveIntegerField(verbose_name="Quantidade Pendente"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pendente"),
                            ("fulfilled", "Coletado"),
                            ("cancelled", "Cancelado"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1, editable=False, verbose_name="Versão"
                    ),
                ),
                ("notes", models.TextField(blank=True, verbose_name="Observações")),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        help_text="Define a prioridade FIFO: pendências mais antigas são baixadas primeiro",
                        verbose_name="Criado em",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        blank=True, editable=False, verbose_name="Atualizado em"
                    ),
                ),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(
                        choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                        max_length=1,
                    ),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "historical Pendência de Coleta",
                "verbose_name_plural": "historical Pendências de Coleta",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        # ══════════════════════════════════════════════════════════════
        # COLLECTION
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Collection",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, unique=True, verbose_name="UUID"
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        help_text="Identificador único (auto-gerado se vazio)",
                        max_length=50,
                        unique=True,
                        verbose_name="Código",
                    ),
                ),
                (
                    "client_name",
                    models.CharField(blank=True, max_length=255, verbose_name="Cliente"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Coleta Pendente"),
                            ("scheduled", "Coleta Em Trânsito"),
                            ("completed", "Coleta Entregue em nossa unidade"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "completed_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="Concluída em"),
                ),
                ("notes", models.TextField(blank=True, verbose_name="Observações")),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="Criado em"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="Atualizado em"),
                ),
            ],
            options={
                "verbose_name": "Coleta",
                "verbose_name_plural": "Coletas",
                "db_table": "ledgerman_collection",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalCollection",
            fields=[
                (
                    "id",
                    models.BigIntegerField(
                        auto_created=True, blank=True, db_index=True, verbose_name="ID"
                    ),
                ),
                (
                    "uuid",
                    models.UUIDField(
                        db_index=True, default=uuid.uuid4, editable=False, verbose_name="UUID"
                    ),
                ),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Identificador único (auto-gerado se vazio)",
                        max_length=50,
                        verbose_name="Código",
                    ),
                ),
                (
                    "client_name",
                    models.CharField(blank=True, max_length=255, verbose_name="Cliente"),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Coleta Pendente"),
                            ("scheduled", "Coleta Em Trânsito"),
                            ("completed", "Coleta Entregue em nossa unidade"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "completed_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="Concluída em"),
                ),
                ("notes", models.TextField(blank=True, verbose_name="Observações")),
                (
                    "created_at",
                    models.DateTimeField(blank=True, editable=False, verbose_name="Criado em"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        blank=True, editable=False, verbose_name="Atualizado em"
                    ),
                ),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(
                        choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                        max_length=1,
                    ),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "historical Coleta",
                "verbose_name_plural": "historical Coletas",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="CollectedLineItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "product_code",
                    models.CharField(max_length=100, verbose_name="Código do Produto"),
                ),
                (
                    "product_description",
                    models.CharField(
                        blank=True, max_length=255, verbose_name="Descrição do Produto"
                    ),
                ),
                ("quantity", models.PositiveIntegerField(verbose_name="Quantidade")),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="Criado em"),
                ),
                (
                    "collection",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="ledgerman.collection",
                        verbose_name="Coleta",
                    ),
                ),
            ],
            options={
                "verbose_name": "Item Coletado",
                "verbose_name_plural": "Itens Coletados",
                "db_table": "ledgerman_collected_line_item",
                "ordering": ["id"],
            },
        ),
        # ══════════════════════════════════════════════════════════════
        # RECONCILIATION LOG
        # ══════════════════════════════════════════════════════════════
        migrations.CreateModel(
            name="Reconciliation",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "updated_count",
                    models.PositiveIntegerField(
                        default=0, verbose_name="Pendências atualizadas"
                    ),
                ),
                (
                    "updates",
                    models.JSONField(blank=True, default=list, verbose_name="Baixas"),
                ),
                (
                    "shortfalls",
                    models.JSONField(blank=True, default=list, verbose_name="Excedentes"),
                ),
                (
                    "created_by",
                    models.CharField(
                        blank=True,
                        help_text="Ex: 'user:joao', 'system:reconciler', 'api:pdv-001'",
                        max_length=255,
                        verbose_name="Criado por",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="Criado em"),
                ),
                (
                    "collection",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reconciliation",
                        to="ledgerman.collection",
                        verbose_name="Coleta",
                    ),
                ),
            ],
            options={
                "verbose_name": "Baixa de Pendências",
                "verbose_name_plural": "Baixas de Pendências",
                "db_table": "ledgerman_reconciliation",
                "ordering": ["-created_at"],
            },
        ),
    ]
