# inventory/serializers.py

from rest_framework import serializers

from .models import InventoryItem, StockMovement


class InventoryItemSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            "id", "code", "name", "description", "unit",
            "cost_price", "selling_price", "current_stock", "minimum_stock",
            "is_low_stock", "is_active", "created_at", "updated_at",
        ]
        read_only_fields = fields


class InventoryItemInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    unit = serializers.CharField(max_length=20, required=False, allow_blank=True, default="pcs")
    cost_price = serializers.JSONField(required=False, default=0)
    selling_price = serializers.JSONField(required=False, default=0)
    minimum_stock = serializers.JSONField(required=False, default=0)
    opening_stock = serializers.JSONField(required=False, default=0)


class StockMovementSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source="item.code", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = StockMovement
        fields = [
            "id", "item_id", "item_code", "item_name", "movement_type",
            "quantity", "delta", "unit_cost", "reference", "date",
            "created_by_name", "created_at",
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj):
        user = obj.created_by
        return (user.name or user.email) if user else None


class StockMovementInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    movement_type = serializers.CharField(max_length=20)
    quantity = serializers.JSONField()
    unit_cost = serializers.JSONField(required=False, default=None)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    date = serializers.CharField(required=False, allow_blank=True, default="")
