from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import InventoryExportView, InventoryImportView, InventoryItemViewSet, StockTransactionViewSet

router = SimpleRouter()
router.register(r"items", InventoryItemViewSet, basename="inventory-item")
router.register(r"transactions", StockTransactionViewSet, basename="stock-transaction")

urlpatterns = [
    path("export/", InventoryExportView.as_view(), name="inventory-export"),
    path("import/", InventoryImportView.as_view(), name="inventory-import"),
    path("", include(router.urls)),
]

# EOF
