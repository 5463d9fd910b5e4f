"""
Tests for categories, products and stock adjustments.
"""
from decimal import Decimal

import pytest
from django.db import IntegrityError
from rest_framework import status

from inventory.models import Category, Product
from notifications.models import Notification
from stock.models import StockTransaction


# ============== Model Tests ==============

@pytest.mark.django_db
class TestProductModel:

    def test_category_default_tax(self, product):
        assert product.effective_tax_percent == Decimal('10.00')

    def test_override_tax(self, product):
        product.tax_override = Decimal('18.00')
        assert product.effective_tax_percent == Decimal('18.00')

    def test_zero_override_beats_default(self, product):
        product.tax_override = Decimal('0.00')
        assert product.effective_tax_percent == Decimal('0.00')

    def test_low_stock_uses_category_threshold(self, product, category):
        assert not product.is_low_stock
        product.stock_qty = 10
        assert product.is_low_stock
        category.low_stock_threshold = 5
        assert not product.is_low_stock

    def test_out_of_stock(self, product):
        product.stock_qty = 0
        assert product.is_out_of_stock
        assert product.is_low_stock

    def test_stock_cannot_go_negative(self, product):
        with pytest.raises(IntegrityError):
            Product.objects.filter(pk=product.pk).update(stock_qty=-1)

    def test_category_name_unique_per_store(self, category, store2):
        Category.objects.create(store=store2, name=category.name)
        with pytest.raises(IntegrityError):
            Category.objects.create(store=category.store, name=category.name)


# ============== Category API Tests ==============

@pytest.mark.django_db
class TestCategoryAPI:

    def test_create_assigns_own_store(self, store_admin_client, store):
        response = store_admin_client.post('/api/categories/', {
            'name': 'Snacks',
            'default_gst': '5.00',
            'default_discount': '2.50'
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert str(response.data['store']) == str(store.pk)
        assert Category.objects.get(name='Snacks').store_id == store.pk

    def test_duplicate_name_is_conflict(self, store_admin_client, category):
        response = store_admin_client.post('/api/categories/', {'name': category.name})
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_cannot_move_to_other_store(self, store_admin_client, category, store, store2):
        response = store_admin_client.patch(f'/api/categories/{category.pk}/', {'store': store2.pk})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        category.refresh_from_db()
        assert category.store_id == store.pk

    def test_super_admin_cannot_move_between_stores(self, super_admin_client, category, store2):
        response = super_admin_client.patch(f'/api/categories/{category.pk}/', {'store': store2.pk})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'store' in response.data['errors']

    def test_gst_must_be_a_percentage(self, store_admin_client):
        response = store_admin_client.post('/api/categories/', {'name': 'Bad', 'default_gst': '150'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_delete_referenced_category_is_conflict(self, store_admin_client, category, product):
        response = store_admin_client.delete(f'/api/categories/{category.pk}/')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'conflict'
        assert Category.objects.filter(pk=category.pk).exists()
        assert Product.objects.filter(pk=product.pk, category=category).exists()

    def test_delete_empty_category(self, store_admin_client, category):
        response = store_admin_client.delete(f'/api/categories/{category.pk}/')
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Category.objects.filter(pk=category.pk).exists()

    def test_cashier_reads_but_cannot_write(self, cashier_client, category):
        assert cashier_client.get('/api/categories/').status_code == status.HTTP_200_OK
        response = cashier_client.post('/api/categories/', {'name': 'Cashier Category'})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_is_scoped_to_store(self, store_admin_client, category, store2_product):
        response = store_admin_client.get('/api/categories/')
        assert [row['name'] for row in response.data] == ['General']


# ============== Product API Tests ==============

@pytest.mark.django_db
class TestProductAPI:

    def test_create_product_records_opening_stock(self, store_admin_client, store, category):
        response = store_admin_client.post('/api/products/', {
            'category': str(category.pk),
            'name': 'Biscuits',
            'sku': 'BIS-1',
            'price': '25.00',
            'stock_qty': 40,
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['effective_tax_percent'] == '10.00'
        product = Product.objects.get(sku='BIS-1')
        assert product.store_id == store.pk
        tx = StockTransaction.objects.get(product=product)
        assert tx.delta == 40
        assert tx.reason == StockTransaction.Reason.MANUAL

    def test_category_from_other_store_rejected(self, store_admin_client, store2_product):
        response = store_admin_client.post('/api/products/', {
            'category': str(store2_product.category_id),
            'name': 'Smuggled',
            'price': '1.00',
        })
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_ignores_stock(self, store_admin_client, product):
        response = store_admin_client.patch(f'/api/products/{product.pk}/', {
            'name': 'Renamed',
            'stock_qty': 999,
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Renamed'
        product.refresh_from_db()
        assert product.stock_qty == 50

    def test_cashier_cannot_create_product(self, cashier_client, category):
        response = cashier_client.post('/api/products/', {
            'category': str(category.pk),
            'name': 'Nope',
            'price': '1.00',
        })
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cashier_lists_products(self, cashier_client, product, store2_product):
        response = cashier_client.get('/api/products/')

        assert response.status_code == status.HTTP_200_OK
        assert [row['sku'] for row in response.data] == ['TEST-001']

    def test_other_store_product_is_forbidden(self, store2_admin_client, product):
        response = store2_admin_client.get(f'/api/products/{product.pk}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'permission_denied'

    def test_other_store_product_cannot_be_deleted(self, store2_admin_client, product):
        response = store2_admin_client.delete(f'/api/products/{product.pk}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Product.objects.filter(pk=product.pk).exists()

    def test_product_cannot_be_moved_to_other_store(self, store_admin_client, product, store, store2):
        response = store_admin_client.patch(f'/api/products/{product.pk}/', {'store': store2.pk})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        product.refresh_from_db()
        assert product.store_id == store.pk


@pytest.mark.django_db
class TestStockAdjustment:

    def test_restock(self, store_admin_client, product):
        response = store_admin_client.patch(f'/api/products/{product.pk}/stock/', {'delta': 25})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['new_stock'] == 75
        tx = StockTransaction.objects.get(product=product)
        assert (tx.quantity_before, tx.quantity_after) == (50, 75)

    def test_removal_below_threshold_alerts_admins(self, store_admin_client, store_admin, product):
        response = store_admin_client.patch(f'/api/products/{product.pk}/stock/', {'delta': -45})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['new_stock'] == 5
        alert = Notification.objects.get(user=store_admin)
        assert alert.type == Notification.Type.LOW_STOCK_ALERT
        assert alert.product_id == product.pk

    def test_removal_beyond_stock_is_rejected(self, store_admin_client, product):
        response = store_admin_client.patch(f'/api/products/{product.pk}/stock/', {'delta': -51})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'insufficient_stock'
        product.refresh_from_db()
        assert product.stock_qty == 50
        assert not StockTransaction.objects.exists()

    def test_zero_delta_is_rejected(self, store_admin_client, product):
        response = store_admin_client.patch(f'/api/products/{product.pk}/stock/', {'delta': 0})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_cashier_cannot_adjust(self, cashier_client, product):
        response = cashier_client.patch(f'/api/products/{product.pk}/stock/', {'delta': 5})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_low_stock_list(self, store_admin_client, product, discounted_product):
        Product.objects.filter(pk=product.pk).update(stock_qty=3)
        response = store_admin_client.get('/api/products/low-stock/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(product.pk)
        assert response.data['results'][0]['is_low_stock'] is True
