# inventory/urls.py

from django.urls import path

from .views import (
    ItemDetailView,
    ItemListCreateView,
    LowStockView,
    MovementListCreateView,
    ValuationView,
)

app_name = "inventory"

urlpatterns = [
    path("items/", ItemListCreateView.as_view(), name="item-list-create"),
    path("items/<int:pk>/", ItemDetailView.as_view(), name="item-detail"),
    path("movements/", MovementListCreateView.as_view(), name="movement-list-create"),
    path("low-stock/", LowStockView.as_view(), name="low-stock"),
    path("valuation/", ValuationView.as_view(), name="valuation"),
]
