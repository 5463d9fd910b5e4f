"""
Tests for invoice pricing, checkout, persistence backends and export.
"""
import csv
import io
from decimal import Decimal

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone
from rest_framework import status

from inventory.models import Product
from invoices.backends import (
    DatabaseBackend, FirestoreBackend, LocalMemoryBackend, get_invoice_backend, load_backend
)
from invoices.models import Invoice, InvoiceImmutableError
from invoices.pricing import (
    compute_line, compute_totals, effective_discount_percent, effective_tax_percent, price_product
)
from invoices.services import checkout, generate_invoice_number
from main.exceptions import InsufficientStock
from stock.models import StockTransaction


# ============== Pricing ==============

class TestPricing:

    def test_line_without_discount(self):
        line = compute_line(Decimal('100'), 2, Decimal('10'))
        assert line.line_subtotal == Decimal('200.00')
        assert line.discount_amount == Decimal('0.00')
        assert line.tax_amount == Decimal('20.00')
        assert line.line_total == Decimal('220.00')

    def test_tax_applies_to_discounted_amount(self):
        line = compute_line(Decimal('100'), 2, Decimal('10'), Decimal('10'))
        assert line.discount_amount == Decimal('20.00')
        assert line.taxable_amount == Decimal('180.00')
        assert line.tax_amount == Decimal('18.00')
        assert line.line_total == Decimal('198.00')

    def test_override_wins_over_category_default(self):
        assert effective_tax_percent(Decimal('5'), Decimal('18')) == Decimal('5')
        assert effective_tax_percent(None, Decimal('18')) == Decimal('18')

    def test_zero_override_is_respected(self):
        assert effective_tax_percent(Decimal('0'), Decimal('18')) == Decimal('0')

    def test_discounts_are_additive_and_capped(self):
        assert effective_discount_percent(Decimal('10'), Decimal('5')) == Decimal('15')
        assert effective_discount_percent(Decimal('80'), Decimal('50')) == Decimal('100')
        assert effective_discount_percent(None, None) == Decimal('0')

    def test_half_up_rounding_per_line(self):
        line = compute_line(Decimal('0.05'), 1, Decimal('10'))
        # 0.005 rounds up to 0.01
        assert line.tax_amount == Decimal('0.01')

    def test_grand_total_identity(self):
        lines = [
            compute_line(Decimal('19.99'), 3, Decimal('18'), Decimal('7.5')),
            compute_line(Decimal('0.33'), 7, Decimal('5')),
            compute_line(Decimal('1249.50'), 1, Decimal('28'), Decimal('12')),
        ]
        totals = compute_totals(lines)
        assert totals.grand_total == totals.subtotal - totals.discount_total + totals.tax_total
        assert totals.grand_total == sum(line.line_total for line in lines)

    def test_non_positive_quantity_rejected(self):
        with pytest.raises(ValueError):
            compute_line(Decimal('10'), 0, Decimal('5'))

    @pytest.mark.django_db
    def test_price_product_uses_store_discount(self, store, discounted_product):
        store.global_discount = Decimal('5.00')
        store.save()
        line = price_product(discounted_product, 1, store)
        assert line.discount_percent == Decimal('15.00')
        assert line.discount_amount == Decimal('15.00')
        assert line.tax_amount == Decimal('8.50')
        assert line.line_total == Decimal('93.50')


# ============== Checkout Service ==============

@pytest.mark.django_db
class TestCheckoutService:

    def test_checkout_decrements_stock_and_records_ledger(self, store, cashier_user, product):
        document = checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 2}], 'CASH')

        product.refresh_from_db()
        assert product.stock_qty == 48
        assert document['grand_total'] == '220.00'
        tx = StockTransaction.objects.get(product=product, reason=StockTransaction.Reason.SALE)
        assert tx.delta == -2
        assert tx.quantity_before == 50
        assert tx.quantity_after == 48
        assert tx.reference == document['invoice_number']

    def test_repeated_products_are_merged(self, store, cashier_user, product):
        document = checkout(store, cashier_user, [
            {'product_id': product.pk, 'quantity': 1},
            {'product_id': product.pk, 'quantity': 2},
        ], 'CARD')
        assert len(document['items']) == 1
        assert document['items'][0]['quantity'] == 3

    def test_insufficient_stock_rolls_back_every_line(self, store, cashier_user, product, discounted_product):
        discounted_product.stock_qty = 1
        discounted_product.save()

        with pytest.raises(InsufficientStock):
            checkout(store, cashier_user, [
                {'product_id': product.pk, 'quantity': 5},
                {'product_id': discounted_product.pk, 'quantity': 2},
            ], 'CASH')

        product.refresh_from_db()
        discounted_product.refresh_from_db()
        assert product.stock_qty == 50
        assert discounted_product.stock_qty == 1
        assert Invoice.objects.count() == 0
        assert StockTransaction.objects.count() == 0

    def test_failed_backend_write_restores_stock(self, store, cashier_user, product):
        class BrokenBackend(LocalMemoryBackend):
            def save(self, document):
                raise RuntimeError('backend down')

        with pytest.raises(RuntimeError):
            checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 2}], 'CASH',
                     backend=BrokenBackend())
        product.refresh_from_db()
        assert product.stock_qty == 50

    def test_product_from_other_store_rejected(self, store, cashier_user, store2_product):
        from rest_framework.exceptions import ValidationError
        with pytest.raises(ValidationError):
            checkout(store, cashier_user, [{'product_id': store2_product.pk, 'quantity': 1}], 'CASH')

    def test_invoice_number_format(self, store):
        number = generate_invoice_number(store)
        prefix, stamp, suffix = number.split('-')
        assert prefix == 'INV'
        assert len(stamp) == 14 and stamp.isdigit()
        assert len(suffix) == 8

    def test_invoice_numbers_within_one_second_differ(self, store):
        now = timezone.now()
        numbers = {generate_invoice_number(store, now) for _ in range(50)}
        assert len(numbers) == 50


# ============== Checkout API ==============

@pytest.mark.django_db
class TestCheckoutAPI:

    def test_cashier_checkout(self, cashier_client, product):
        response = cashier_client.post('/api/invoices/', {
            'payment_method': 'UPI',
            'items': [{'product_id': str(product.pk), 'quantity': 2}],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['subtotal'] == '200.00'
        assert response.data['tax_total'] == '20.00'
        assert response.data['grand_total'] == '220.00'
        assert response.data['synced'] is True
        assert Product.objects.get(pk=product.pk).stock_qty == 48

    def test_checkout_with_category_discount(self, cashier_client, discounted_product):
        response = cashier_client.post('/api/invoices/', {
            'payment_method': 'CASH',
            'items': [{'product_id': str(discounted_product.pk), 'quantity': 2}],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['discount_total'] == '20.00'
        assert response.data['tax_total'] == '18.00'
        assert response.data['grand_total'] == '198.00'

    def test_insufficient_stock_returns_400(self, cashier_client, product):
        response = cashier_client.post('/api/invoices/', {
            'payment_method': 'CASH',
            'items': [{'product_id': str(product.pk), 'quantity': 51}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'insufficient_stock'
        assert Product.objects.get(pk=product.pk).stock_qty == 50

    def test_cashier_cannot_sell_for_other_store(self, cashier_client, store2, store2_product):
        response = cashier_client.post('/api/invoices/', {
            'store': str(store2.pk),
            'payment_method': 'CASH',
            'items': [{'product_id': str(store2_product.pk), 'quantity': 1}],
        }, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_suspended_store_cannot_sell(self, cashier_client, store, product):
        store.is_active = False
        store.save()
        response = cashier_client.post('/api/invoices/', {
            'payment_method': 'CASH',
            'items': [{'product_id': str(product.pk), 'quantity': 1}],
        }, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_payment_method(self, cashier_client, product):
        response = cashier_client.post('/api/invoices/', {
            'payment_method': 'BARTER',
            'items': [{'product_id': str(product.pk), 'quantity': 1}],
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_super_admin_must_name_store(self, super_admin_client, product):
        response = super_admin_client.post('/api/invoices/', {
            'payment_method': 'CASH',
            'items': [{'product_id': str(product.pk), 'quantity': 1}],
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_is_scoped_to_store(self, cashier_client, store, store2, cashier_user,
                                     store2_admin, product, store2_product):
        checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 1}], 'CASH')
        checkout(store2, store2_admin, [{'product_id': store2_product.pk, 'quantity': 1}], 'CASH')

        response = cashier_client.get('/api/invoices/')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['store_id'] == str(store.pk)

    def test_other_store_invoice_is_forbidden(self, store2_admin_client, store, cashier_user, product):
        document = checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 1}], 'CASH')
        response = store2_admin_client.get(f"/api/invoices/{document['id']}/")
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_missing_invoice_returns_404(self, cashier_client):
        response = cashier_client.get('/api/invoices/00000000-0000-0000-0000-000000000000/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_export_csv(self, store_admin_client, store, cashier_user, product):
        document = checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 3}], 'CARD')
        response = store_admin_client.get('/api/invoices/export/')

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'text/csv'
        rows = list(csv.reader(io.StringIO(response.content.decode())))
        assert rows[0] == ['Invoice No', 'Date', 'Time', 'Total', 'Tax', 'Discount', 'Payment Method', 'Items Count']
        assert rows[1][0] == document['invoice_number']
        assert rows[1][3] == '330.00'
        assert rows[1][6] == 'CARD'
        assert rows[1][7] == '3'


# ============== Backends ==============

@pytest.mark.django_db
class TestDatabaseBackend:

    def test_saved_invoices_are_synced(self, store, cashier_user, product):
        document = checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 1}], 'CASH',
                            backend=DatabaseBackend())
        invoice = Invoice.objects.get(pk=document['id'])
        assert invoice.synced is True
        assert invoice.items.count() == 1

    def test_invoice_is_immutable(self, store, cashier_user, product):
        document = checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 1}], 'CASH',
                            backend=DatabaseBackend())
        invoice = Invoice.objects.get(pk=document['id'])

        invoice.grand_total = Decimal('1.00')
        with pytest.raises(InvoiceImmutableError):
            invoice.save()
        with pytest.raises(InvoiceImmutableError):
            invoice.delete()
        with pytest.raises(InvoiceImmutableError):
            invoice.items.first().delete()

    def test_synced_flag_may_change(self, store, cashier_user, product):
        backend = DatabaseBackend()
        document = checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 1}], 'CASH',
                            backend=backend)
        invoice = Invoice.objects.get(pk=document['id'])
        invoice.synced = False
        invoice.save(update_fields=['synced'])
        assert backend.mark_synced(document['id'])['synced'] is True

    def test_summarize(self, store, cashier_user, product, discounted_product):
        backend = DatabaseBackend()
        checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 2}], 'CASH', backend=backend)
        checkout(store, cashier_user, [{'product_id': discounted_product.pk, 'quantity': 2}], 'UPI', backend=backend)

        summary = backend.summarize(store.pk)
        assert summary['invoice_count'] == 2
        assert summary['total_sales'] == Decimal('418.00')
        assert summary['tax_total'] == Decimal('38.00')
        assert summary['discount_total'] == Decimal('20.00')
        assert summary['sales_by_payment_method'] == {'CASH': Decimal('220.00'), 'UPI': Decimal('198.00')}


@pytest.mark.django_db
class TestLocalMemoryBackend:

    def test_saved_invoices_start_unsynced(self, local_backend, cashier_client, product):
        response = cashier_client.post('/api/invoices/', {
            'payment_method': 'CASH',
            'items': [{'product_id': str(product.pk), 'quantity': 1}],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['synced'] is False
        assert Invoice.objects.count() == 0

        response = cashier_client.post(f"/api/invoices/{response.data['id']}/mark-synced/")
        assert response.status_code == status.HTTP_200_OK
        assert response.data['synced'] is True

    def test_summary_matches_database_rules(self, local_backend, store, cashier_user, product):
        checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 2}], 'CASH')
        summary = local_backend.summarize(store.pk)
        assert summary['invoice_count'] == 1
        assert summary['total_sales'] == Decimal('220.00')

    def test_list_filters_by_store(self, store, store2):
        backend = LocalMemoryBackend()
        backend.save({'id': 'a', 'store_id': str(store.pk), 'created_at': '2024-01-01T10:00:00+00:00'})
        backend.save({'id': 'b', 'store_id': str(store2.pk), 'created_at': '2024-01-02T10:00:00+00:00'})
        assert [doc['id'] for doc in backend.list(store.pk)] == ['a']
        assert [doc['id'] for doc in backend.list()] == ['b', 'a']


class FakeSnapshot:
    def __init__(self, data):
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, store, key):
        self._store = store
        self._key = key

    def set(self, data):
        self._store[self._key] = dict(data)

    def get(self):
        return FakeSnapshot(self._store.get(self._key))

    def update(self, data):
        self._store[self._key].update(data)


class FakeQuery:
    def __init__(self, documents, filters=()):
        self._documents = documents
        self._filters = filters

    def where(self, filter):
        return FakeQuery(self._documents, self._filters + (filter,))

    def stream(self):
        for data in list(self._documents.values()):
            if all(data.get(f.field_path) == f.value for f in self._filters):
                yield FakeSnapshot(data)


class FakeCollection(FakeQuery):
    def document(self, key):
        return FakeDocument(self._documents, key)


class FakeFirestoreClient:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return FakeCollection(self.collections.setdefault(name, {}))


@pytest.mark.django_db
class TestFirestoreBackend:

    def test_round_trip_through_collection(self, store, cashier_user, product):
        pytest.importorskip('google.cloud.firestore_v1')
        client = FakeFirestoreClient()
        backend = FirestoreBackend(client=client, collection='invoices')

        document = checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 2}], 'QR',
                            backend=backend)

        stored = client.collections['invoices'][document['id']]
        assert stored['grand_total'] == '220.00'
        assert stored['synced'] is True
        assert backend.get(document['id'])['created_at'] == document['created_at']
        assert [doc['id'] for doc in backend.list(store.pk)] == [document['id']]
        assert backend.summarize(store.pk)['total_sales'] == Decimal('220.00')
        assert Invoice.objects.count() == 0

    def test_missing_document(self):
        backend = FirestoreBackend(client=FakeFirestoreClient(), collection='invoices')
        assert backend.get('nope') is None
        assert backend.mark_synced('nope') is None


class TestBackendSelection:

    def test_backend_follows_setting(self, settings):
        settings.POS_DATA_SOURCE = 'local'
        backend = get_invoice_backend()
        assert isinstance(backend, LocalMemoryBackend)
        assert get_invoice_backend() is backend

        settings.POS_DATA_SOURCE = 'database'
        assert isinstance(get_invoice_backend(), DatabaseBackend)

    def test_unknown_backend(self):
        with pytest.raises(ImproperlyConfigured):
            load_backend('carrier-pigeon')
