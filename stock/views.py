from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from users.mixins import StoreFilterMixin
from users.permissions import CanAdjustStock
from .filters import StockTransactionFilter
from .models import StockTransaction
from .serializers import StockTransactionSerializer


class StockTransactionViewSet(StoreFilterMixin, viewsets.ReadOnlyModelViewSet):
    """
    Stock ledger of the effective store, newest first.
    Rows are written by stock adjustments and checkout, never through this API.
    """
    queryset = StockTransaction.objects.select_related('product', 'performed_by').all()
    serializer_class = StockTransactionSerializer
    permission_classes = [IsAuthenticated, CanAdjustStock]
    filterset_class = StockTransactionFilter
