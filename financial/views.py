import logging

from django.shortcuts import get_object_or_404
from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from invoices.services import parse_date_params
from stores.models import Store
from users.mixins import StoreFilterMixin, check_store_access
from users.permissions import CanManagePartnerships, CanViewFinancials
from .models import Partnership
from .serializers import PartnershipSerializer
from .services import financial_overview

logger = logging.getLogger(__name__)


class PartnershipViewSet(StoreFilterMixin, viewsets.ModelViewSet):
    queryset = Partnership.objects.prefetch_related('assets').all()
    serializer_class = PartnershipSerializer
    permission_classes = [IsAuthenticated, CanManagePartnerships]
    filterset_fields = ['is_active']


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewFinancials])
def overview(request, store_id):
    """
    Investment, sales, expenses and profit for one store.
    Optional ``from``/``to`` (YYYY-MM-DD, inclusive, store local dates).
    """
    check_store_access(request.user, store_id)
    store = get_object_or_404(Store, pk=store_id)
    date_from, date_to = parse_date_params(request.query_params)

    data = financial_overview(store, date_from, date_to)
    logger.info("Financial overview for %s", store.pk, extra={'store_id': str(store.pk)})
    return Response(data)
