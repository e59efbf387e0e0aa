import django.utils.timezone
import inventory.models
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=inventory.models.new_record_id,
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("category", models.CharField(db_index=True, max_length=100)),
                ("sku", models.CharField(max_length=64, unique=True)),
                ("current_stock", models.IntegerField(default=0)),
                ("min_stock_level", models.IntegerField(default=0)),
                ("max_stock_level", models.IntegerField(blank=True, null=True)),
                ("buy_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("sell_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("supplier", models.CharField(blank=True, max_length=200)),
                ("location", models.CharField(blank=True, max_length=200)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "ordering": ["name", "id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(current_stock__gte=0), name="item_stock_non_negative"),
                    models.CheckConstraint(
                        condition=models.Q(min_stock_level__gte=0), name="item_min_level_non_negative"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("max_stock_level__isnull", True), ("max_stock_level__gte", 0), _connector="OR"),
                        name="item_max_level_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockTransaction",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=inventory.models.new_record_id,
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("item_id", models.CharField(db_index=True, max_length=64)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("stock_in", "Stock in"),
                            ("stock_out", "Stock out"),
                            ("adjustment", "Adjustment"),
                            ("transfer", "Transfer"),
                        ],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                ("quantity", models.IntegerField()),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("reference", models.CharField(blank=True, max_length=120)),
                ("notes", models.TextField(blank=True)),
                ("performed_by", models.CharField(blank=True, max_length=150)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
            ],
            options={
                "ordering": ["-created_at", "id"],
                "indexes": [models.Index(fields=["item_id", "created_at"], name="inv_txn_item_created_idx")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(quantity__gte=0), name="txn_quantity_non_negative"),
                    models.CheckConstraint(condition=models.Q(unit_price__gte=0), name="txn_unit_price_non_negative"),
                ],
            },
        ),
    ]
