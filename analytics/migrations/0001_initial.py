from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DailySummary",
            fields=[
                ("date", models.DateField(primary_key=True, serialize=False)),
                ("total_transactions_count", models.PositiveIntegerField(default=0)),
                ("total_money_in", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=16)),
                ("total_money_out", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=16)),
                ("net_flow", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=16)),
                (
                    "gross_profit_from_sales",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=16),
                ),
                (
                    "loss_from_below_cost_sales",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=16),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-date"],
                "verbose_name_plural": "daily summaries",
            },
        ),
    ]
