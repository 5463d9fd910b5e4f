"""
Tests for the stock ledger.
"""
import pytest
from rest_framework import status

from main.exceptions import InsufficientStock
from stock.models import StockTransaction
from stock.services import apply_stock_delta


@pytest.mark.django_db
class TestApplyStockDelta:

    def test_restock_writes_ledger_row(self, product, store_admin):
        tx = apply_stock_delta(product, 10, reason=StockTransaction.Reason.MANUAL,
                               performed_by=store_admin, notes='Delivery')

        assert product.stock_qty == 60
        assert tx.store_id == product.store_id
        assert tx.delta == 10
        assert tx.quantity_before == 50
        assert tx.quantity_after == 60
        assert tx.performed_by == store_admin

    def test_decrement_to_zero_is_allowed(self, product):
        apply_stock_delta(product, -50, reason=StockTransaction.Reason.SALE, reference='INV-1')
        product.refresh_from_db()
        assert product.stock_qty == 0

    def test_decrement_below_zero_is_rejected(self, product):
        with pytest.raises(InsufficientStock) as excinfo:
            apply_stock_delta(product, -51, reason=StockTransaction.Reason.SALE)

        assert 'Available: 50' in str(excinfo.value.detail[0])
        product.refresh_from_db()
        assert product.stock_qty == 50
        assert StockTransaction.objects.count() == 0

    def test_zero_delta(self, product):
        with pytest.raises(ValueError):
            apply_stock_delta(product, 0, reason=StockTransaction.Reason.MANUAL)


@pytest.mark.django_db
class TestStockTransactionAPI:

    def test_list_is_scoped_to_store(self, store_admin_client, product, store2_product):
        apply_stock_delta(product, 5, reason=StockTransaction.Reason.MANUAL)
        apply_stock_delta(store2_product, 5, reason=StockTransaction.Reason.MANUAL)

        response = store_admin_client.get('/api/stock/transactions/')

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['product_sku'] == 'TEST-001'

    def test_filter_by_reason(self, store_admin_client, product):
        apply_stock_delta(product, 5, reason=StockTransaction.Reason.MANUAL)
        apply_stock_delta(product, -2, reason=StockTransaction.Reason.SALE, reference='INV-9')

        response = store_admin_client.get('/api/stock/transactions/', {'reason': 'sale'})

        assert [row['reference'] for row in response.data] == ['INV-9']

    def test_other_store_transaction_is_forbidden(self, store2_admin_client, product):
        tx = apply_stock_delta(product, 5, reason=StockTransaction.Reason.MANUAL)
        response = store2_admin_client.get(f'/api/stock/transactions/{tx.pk}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cashier_cannot_read_ledger(self, cashier_client):
        response = cashier_client.get('/api/stock/transactions/')
        assert response.status_code == status.HTTP_403_FORBIDDEN
