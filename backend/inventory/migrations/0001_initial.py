import django.db.models.deletion
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("unit", models.CharField(default="pcs", max_length=20)),
                ("cost_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("selling_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("current_stock", models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=15)),
                ("minimum_stock", models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=15)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["code"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("current_stock__gte", 0)), name="inventory_stock_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("movement_type", models.CharField(choices=[("in", "Stock In"), ("out", "Stock Out"), ("adjustment", "Adjustment")], max_length=20)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=15)),
                ("delta", models.DecimalField(decimal_places=3, max_digits=15)),
                ("unit_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                ("date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="stock_movements", to=settings.AUTH_USER_MODEL)),
                ("item", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="movements", to="inventory.inventoryitem")),
            ],
            options={
                "ordering": ["-date", "-id"],
                "indexes": [
                    models.Index(fields=["item", "date"], name="stock_movement_item_date_idx"),
                ],
            },
        ),
    ]
