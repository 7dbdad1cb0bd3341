from django.urls import path

from .views import BulkStockUpdateView, InventoryLogListView, InventoryOverviewView, StockAdjustView

urlpatterns = [
    path("", InventoryOverviewView.as_view(), name="inventory-overview"),
    path("logs/", InventoryLogListView.as_view(), name="inventory-logs"),
    path("adjust/", StockAdjustView.as_view(), name="inventory-adjust"),
    path("bulk-update/", BulkStockUpdateView.as_view(), name="inventory-bulk-update"),
]

# EOF
