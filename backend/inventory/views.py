# inventory/views.py
"""
Inventory API. Thin views over inventory.commands and inventory.queries.
"""

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from accounting.views import error_response, paginate
from .commands import create_item, deactivate_item, record_movement, update_item
from .models import InventoryItem, StockMovement
from .queries import low_stock_items, valuation
from .serializers import (
    InventoryItemInputSerializer,
    InventoryItemSerializer,
    StockMovementInputSerializer,
    StockMovementSerializer,
)


# =============================================================================
# Item Views
# =============================================================================

class ItemListCreateView(APIView):
    """
    GET /api/inventory/items/ -> active items ordered by code
    POST /api/inventory/items/ -> create item
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "inventory.view")

        items = InventoryItem.objects.filter(is_active=True).order_by("code")
        return Response(InventoryItemSerializer(items, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = InventoryItemInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_item(actor, **input_serializer.validated_data)
        if not result.success:
            return error_response(result)

        return Response(InventoryItemSerializer(result.data).data, status=status.HTTP_201_CREATED)


class ItemDetailView(APIView):
    """
    GET /api/inventory/items/<pk>/
    PUT /api/inventory/items/<pk>/ -> update descriptive fields
    DELETE /api/inventory/items/<pk>/ -> soft delete
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "inventory.view")

        item = get_object_or_404(InventoryItem, pk=pk)
        return Response(InventoryItemSerializer(item).data)

    def put(self, request, pk):
        actor = resolve_actor(request)

        input_serializer = InventoryItemInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = dict(input_serializer.validated_data)
        data.pop("opening_stock", None)

        result = update_item(actor, pk, **data)
        if not result.success:
            return error_response(result)

        return Response(InventoryItemSerializer(result.data).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)

        result = deactivate_item(actor, pk)
        if not result.success:
            return error_response(result)

        return Response({"detail": "Item deleted."})


# =============================================================================
# Stock Movement Views
# =============================================================================

class MovementListCreateView(APIView):
    """
    GET /api/inventory/movements/?item_id=&page=&limit=
    POST /api/inventory/movements/ -> record a movement
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "inventory.view")

        movements = StockMovement.objects.select_related("item", "created_by").order_by("-date", "-id")
        item_id = request.query_params.get("item_id")
        if item_id:
            if not item_id.isdigit():
                return Response({"detail": "item_id must be an integer."}, status=status.HTTP_400_BAD_REQUEST)
            movements = movements.filter(item_id=int(item_id))
        return paginate(request, movements, StockMovementSerializer, "movements")

    def post(self, request):
        actor = resolve_actor(request)

        input_serializer = StockMovementInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = record_movement(
            actor,
            data["item_id"],
            data["movement_type"],
            data["quantity"],
            unit_cost=data["unit_cost"],
            reference=data["reference"],
            date=data["date"] or None,
        )
        if not result.success:
            return error_response(result)

        movement = StockMovement.objects.select_related("item", "created_by").get(pk=result.data.pk)
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


class LowStockView(APIView):
    """GET /api/inventory/low-stock/"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "inventory.view")
        return Response(InventoryItemSerializer(low_stock_items(), many=True).data)


class ValuationView(APIView):
    """GET /api/inventory/valuation/"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "inventory.view")
        return Response(valuation())
