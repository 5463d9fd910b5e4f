import csv
import logging
from zoneinfo import ZoneInfo

from django.conf import settings
from django.http import HttpResponse
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from stores.models import Store
from users.mixins import check_store_access, get_store_for_request, parse_store_id
from users.permissions import CanCheckout, CanViewInvoices
from .backends import get_invoice_backend
from .serializers import CheckoutSerializer, InvoiceDocumentSerializer
from .services import checkout, date_range, parse_date_params, store_zone

logger = logging.getLogger(__name__)

EXPORT_HEADERS = ['Invoice No', 'Date', 'Time', 'Total', 'Tax', 'Discount', 'Payment Method', 'Items Count']


def _zone_for(store):
    return store_zone(store) if store else ZoneInfo(settings.POS_DEFAULT_TIMEZONE)


def _invoices_for_request(request):
    """Invoices of the effective store (all stores for a super admin naming none) in the requested range"""
    store = get_store_for_request(request, required=False)
    date_from, date_to = parse_date_params(request.query_params)
    start, end = date_range(date_from, date_to, _zone_for(store))
    documents = get_invoice_backend().list(store.pk if store else None, start, end)

    payment_method = request.query_params.get('payment_method')
    if payment_method:
        documents = [doc for doc in documents if doc['payment_method'] == payment_method.upper()]
    return store, documents


def _get_document(request, pk):
    document = get_invoice_backend().get(pk)
    if document is None:
        raise NotFound('Invoice not found.')
    check_store_access(request.user, document['store_id'])
    return document


class InvoiceListCreateView(APIView):
    """
    GET: invoices of the effective store, optional ``from``/``to``/``payment_method``.
    POST: checkout. Prices the cart, takes the stock and stores the invoice.
    """
    permission_classes = [IsAuthenticated, CanCheckout]

    def get(self, request):
        _, documents = _invoices_for_request(request)
        serializer = InvoiceDocumentSerializer(documents, many=True)
        return Response({'count': len(documents), 'results': serializer.data})

    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        store = get_store_for_request(request, data.get('store'))
        document = checkout(
            store,
            request.user,
            [dict(item) for item in data['items']],
            payment_method=data['payment_method'],
        )
        return Response(InvoiceDocumentSerializer(document).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewInvoices])
def invoice_detail(request, pk):
    return Response(InvoiceDocumentSerializer(_get_document(request, pk)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanCheckout])
def mark_invoice_synced(request, pk):
    """Flag an invoice as uploaded; the only change an invoice accepts"""
    _get_document(request, pk)
    document = get_invoice_backend().mark_synced(pk)
    if document is None:
        raise NotFound('Invoice not found.')
    return Response(InvoiceDocumentSerializer(document).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewInvoices])
def export_invoices_csv(request):
    """Invoice register as CSV, dates and times local to the store"""
    store, documents = _invoices_for_request(request)
    zone = _zone_for(store)
    zones = {}

    stamp = timezone.now().astimezone(zone).strftime('%Y%m%d_%H%M%S')
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="invoices_{stamp}.csv"'

    writer = csv.writer(response)
    writer.writerow(EXPORT_HEADERS)
    for document in documents:
        if store is None:
            store_id = document['store_id']
            if store_id not in zones:
                document_store = Store.objects.filter(pk=parse_store_id(store_id)).first()
                zones[store_id] = _zone_for(document_store)
            zone = zones[store_id]
        created_at = parse_datetime(document['created_at']).astimezone(zone)
        writer.writerow([
            document['invoice_number'],
            created_at.strftime('%Y-%m-%d'),
            created_at.strftime('%H:%M:%S'),
            document['grand_total'],
            document['tax_total'],
            document['discount_total'],
            document['payment_method'],
            sum(item['quantity'] for item in document['items']),
        ])

    logger.info("Exported %d invoices", len(documents), extra={'store_id': str(store.pk) if store else None})
    return response
