"""
Invoice persistence backends.

One backend is active per process, chosen by ``settings.POS_DATA_SOURCE``
through ``settings.POS_INVOICE_BACKENDS`` and built once by
``get_invoice_backend()``. All backends accept and return the same invoice
document: a JSON-ready dict with money as strings and ``created_at`` as an
ISO 8601 timestamp. Switching the data source does not migrate stored
invoices.
"""
import copy
import logging
import threading
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from functools import lru_cache

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.db import transaction
from django.db.models import Count, Sum
from django.dispatch import receiver
from django.utils.dateparse import parse_datetime
from django.utils.module_loading import import_string

from .models import Invoice, InvoiceItem

logger = logging.getLogger(__name__)

MONEY_FIELDS = ('subtotal', 'discount_total', 'tax_total', 'grand_total')
ITEM_MONEY_FIELDS = (
    'unit_price', 'tax_percent', 'discount_percent', 'line_subtotal',
    'discount_amount', 'tax_amount', 'line_total',
)


def _created_at(document):
    value = document['created_at']
    if isinstance(value, datetime):
        return value
    return parse_datetime(value)


def _in_range(document, date_from, date_to):
    created_at = _created_at(document)
    if date_from is not None and created_at < date_from:
        return False
    if date_to is not None and created_at >= date_to:
        return False
    return True


def empty_summary():
    return {
        'invoice_count': 0,
        'total_sales': Decimal('0.00'),
        'tax_total': Decimal('0.00'),
        'discount_total': Decimal('0.00'),
        'sales_by_payment_method': {},
    }


class BaseInvoiceBackend:
    """
    Interface shared by every backend.

    ``date_from`` is inclusive and ``date_to`` exclusive; both are aware
    datetimes or None. A ``store_id`` of None means every store.
    """
    name = None
    marks_synced_on_save = False

    def save(self, document):
        raise NotImplementedError

    def get(self, invoice_id):
        raise NotImplementedError

    def list(self, store_id=None, date_from=None, date_to=None):
        raise NotImplementedError

    def mark_synced(self, invoice_id):
        raise NotImplementedError

    def summarize(self, store_id=None, date_from=None, date_to=None):
        summary = empty_summary()
        by_method = defaultdict(lambda: Decimal('0.00'))
        for document in self.list(store_id, date_from, date_to):
            summary['invoice_count'] += 1
            summary['total_sales'] += Decimal(document['grand_total'])
            summary['tax_total'] += Decimal(document['tax_total'])
            summary['discount_total'] += Decimal(document['discount_total'])
            by_method[document['payment_method']] += Decimal(document['grand_total'])
        summary['sales_by_payment_method'] = dict(by_method)
        return summary

    def _prepare(self, document):
        document = copy.deepcopy(document)
        document['synced'] = self.marks_synced_on_save
        return document


class DatabaseBackend(BaseInvoiceBackend):
    """Invoices as ``Invoice``/``InvoiceItem`` rows in the Django database"""
    name = 'database'
    marks_synced_on_save = True

    def save(self, document):
        document = self._prepare(document)
        with transaction.atomic():
            invoice = Invoice.objects.create(
                id=document['id'],
                invoice_number=document['invoice_number'],
                store_id=document['store_id'],
                cashier_id=document.get('cashier_id'),
                cashier_name=document.get('cashier_name') or '',
                payment_method=document['payment_method'],
                synced=document['synced'],
                created_at=_created_at(document),
                **{field: Decimal(document[field]) for field in MONEY_FIELDS}
            )
            InvoiceItem.objects.bulk_create([
                InvoiceItem(
                    invoice=invoice,
                    product_id=item.get('product_id'),
                    product_name=item['name'],
                    sku=item.get('sku'),
                    quantity=item['quantity'],
                    **{field: Decimal(item[field]) for field in ITEM_MONEY_FIELDS}
                )
                for item in document['items']
            ])
        return document

    def _queryset(self):
        return Invoice.objects.prefetch_related('items')

    def get(self, invoice_id):
        invoice = self._queryset().filter(pk=invoice_id).first()
        return invoice_to_document(invoice) if invoice else None

    def _filtered(self, store_id, date_from, date_to):
        queryset = Invoice.objects.all()
        if store_id is not None:
            queryset = queryset.filter(store_id=store_id)
        if date_from is not None:
            queryset = queryset.filter(created_at__gte=date_from)
        if date_to is not None:
            queryset = queryset.filter(created_at__lt=date_to)
        return queryset

    def list(self, store_id=None, date_from=None, date_to=None):
        queryset = self._filtered(store_id, date_from, date_to).prefetch_related('items')
        return [invoice_to_document(invoice) for invoice in queryset]

    def mark_synced(self, invoice_id):
        invoice = Invoice.objects.filter(pk=invoice_id).first()
        if invoice is None:
            return None
        if not invoice.synced:
            invoice.synced = True
            invoice.save(update_fields=['synced'])
        return self.get(invoice_id)

    def summarize(self, store_id=None, date_from=None, date_to=None):
        queryset = self._filtered(store_id, date_from, date_to)
        totals = queryset.aggregate(
            invoice_count=Count('id'),
            total_sales=Sum('grand_total'),
            tax_total=Sum('tax_total'),
            discount_total=Sum('discount_total'),
        )
        summary = empty_summary()
        summary['invoice_count'] = totals['invoice_count'] or 0
        for key in ('total_sales', 'tax_total', 'discount_total'):
            summary[key] = totals[key] or Decimal('0.00')
        summary['sales_by_payment_method'] = {
            row['payment_method']: row['total']
            for row in queryset.order_by().values('payment_method').annotate(total=Sum('grand_total'))
        }
        return summary


class LocalMemoryBackend(BaseInvoiceBackend):
    """Process-local invoice list. Nothing survives a restart; saved invoices start unsynced."""
    name = 'local'

    def __init__(self):
        self._lock = threading.Lock()
        self._documents = []

    def save(self, document):
        document = self._prepare(document)
        with self._lock:
            self._documents.append(document)
        return copy.deepcopy(document)

    def get(self, invoice_id):
        invoice_id = str(invoice_id)
        with self._lock:
            for document in self._documents:
                if document['id'] == invoice_id:
                    return copy.deepcopy(document)
        return None

    def list(self, store_id=None, date_from=None, date_to=None):
        with self._lock:
            documents = [
                copy.deepcopy(document) for document in self._documents
                if (store_id is None or document['store_id'] == str(store_id))
                and _in_range(document, date_from, date_to)
            ]
        documents.sort(key=_created_at, reverse=True)
        return documents

    def mark_synced(self, invoice_id):
        invoice_id = str(invoice_id)
        with self._lock:
            for document in self._documents:
                if document['id'] == invoice_id:
                    document['synced'] = True
                    return copy.deepcopy(document)
        return None

    def clear(self):
        with self._lock:
            self._documents.clear()


class FirestoreBackend(BaseInvoiceBackend):
    """
    Invoices as documents in a Google Cloud Firestore collection, keyed by invoice id.

    ``created_at`` is stored as a native timestamp; money stays as strings.
    Date filtering happens client side so only a single-field index on
    ``store_id`` is needed.
    """
    name = 'firestore'
    marks_synced_on_save = True

    def __init__(self, client=None, collection=None):
        if client is None:
            from google.cloud import firestore

            client = firestore.Client(project=settings.POS_FIRESTORE_PROJECT or None)
        self.client = client
        self.collection_name = collection or settings.POS_FIRESTORE_COLLECTION

    @property
    def collection(self):
        return self.client.collection(self.collection_name)

    def _to_document(self, data):
        if data is None:
            return None
        data = dict(data)
        created_at = data.get('created_at')
        if isinstance(created_at, datetime):
            data['created_at'] = created_at.isoformat()
        return data

    def save(self, document):
        document = self._prepare(document)
        stored = dict(document, created_at=_created_at(document))
        self.collection.document(document['id']).set(stored)
        logger.info("Invoice %s written to Firestore", document['invoice_number'],
                    extra={'store_id': document['store_id']})
        return document

    def get(self, invoice_id):
        snapshot = self.collection.document(str(invoice_id)).get()
        if not snapshot.exists:
            return None
        return self._to_document(snapshot.to_dict())

    def list(self, store_id=None, date_from=None, date_to=None):
        query = self.collection
        if store_id is not None:
            from google.cloud.firestore_v1.base_query import FieldFilter

            query = query.where(filter=FieldFilter('store_id', '==', str(store_id)))
        documents = [
            self._to_document(snapshot.to_dict()) for snapshot in query.stream()
        ]
        documents = [document for document in documents if _in_range(document, date_from, date_to)]
        documents.sort(key=_created_at, reverse=True)
        return documents

    def mark_synced(self, invoice_id):
        reference = self.collection.document(str(invoice_id))
        if not reference.get().exists:
            return None
        reference.update({'synced': True})
        return self.get(invoice_id)


def invoice_to_document(invoice):
    return {
        'id': str(invoice.pk),
        'invoice_number': invoice.invoice_number,
        'store_id': str(invoice.store_id),
        'cashier_id': invoice.cashier_id,
        'cashier_name': invoice.cashier_name,
        'payment_method': invoice.payment_method,
        'subtotal': str(invoice.subtotal),
        'discount_total': str(invoice.discount_total),
        'tax_total': str(invoice.tax_total),
        'grand_total': str(invoice.grand_total),
        'synced': invoice.synced,
        'created_at': invoice.created_at.isoformat(),
        'items': [
            {
                'product_id': str(item.product_id) if item.product_id else None,
                'name': item.product_name,
                'sku': item.sku,
                'quantity': item.quantity,
                **{field: str(getattr(item, field)) for field in ITEM_MONEY_FIELDS},
            }
            for item in invoice.items.all()
        ],
    }


def load_backend(name):
    try:
        path = settings.POS_INVOICE_BACKENDS[name]
    except KeyError:
        raise ImproperlyConfigured(
            f"Unknown invoice data source '{name}'. "
            f"Choose one of: {', '.join(sorted(settings.POS_INVOICE_BACKENDS))}."
        )
    return import_string(path)()


@lru_cache(maxsize=None)
def get_invoice_backend():
    """The configured backend, built on first use and reused afterwards."""
    backend = load_backend(settings.POS_DATA_SOURCE)
    logger.info("Invoice backend: %s", backend.name)
    return backend


@receiver(setting_changed)
def reset_invoice_backend(*, setting, **kwargs):
    if setting in ('POS_DATA_SOURCE', 'POS_INVOICE_BACKENDS', 'POS_FIRESTORE_PROJECT', 'POS_FIRESTORE_COLLECTION'):
        get_invoice_backend.cache_clear()
