"""
Tests for partnerships and the financial overview.
"""
from datetime import date
from decimal import Decimal

import pytest
from rest_framework import status

from expenses.models import Expense
from financial.models import Partnership, PartnershipAsset
from financial.services import financial_overview, total_investment
from invoices.backends import LocalMemoryBackend
from invoices.services import checkout


@pytest.fixture
def partnership(db, store):
    partnership = Partnership.objects.create(
        store=store, partner_name='Meera', cash_investment=Decimal('1000.00'), share_percent=Decimal('60.00')
    )
    PartnershipAsset.objects.create(partnership=partnership, name='Fridge', asset_value=Decimal('500.00'))
    Partnership.objects.create(
        store=store, partner_name='Former', cash_investment=Decimal('999.00'), is_active=False
    )
    return partnership


@pytest.mark.django_db
class TestFinancialOverview:

    def test_investment_counts_active_partnerships(self, store, partnership):
        assert total_investment(store) == Decimal('1500.00')
        assert partnership.total_investment == Decimal('1500.00')

    def test_overview_numbers(self, store, cashier_user, product, partnership):
        checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 2}], 'CASH')
        Expense.objects.create(store=store, title='Rent', amount=Decimal('50.00'), expense_date=date(2024, 1, 5))

        data = financial_overview(store)
        summary = data['summary']

        assert summary['total_investment'] == Decimal('1500.00')
        assert summary['total_sales'] == Decimal('220.00')
        assert summary['total_expenses'] == Decimal('50.00')
        assert summary['profit'] == Decimal('170.00')
        assert summary['profit_margin'] == Decimal('77.27')
        assert summary['tax_collected'] == Decimal('20.00')
        assert data['counts'] == {'invoices': 1, 'expenses': 1}
        assert data['sales_by_payment_method'] == {'CASH': Decimal('220.00')}
        assert data['currency'] == 'INR'

    def test_margin_is_zero_without_sales(self, store):
        Expense.objects.create(store=store, title='Rent', amount=Decimal('50.00'), expense_date=date(2024, 1, 5))

        summary = financial_overview(store)['summary']

        assert summary['total_sales'] == Decimal('0.00')
        assert summary['profit'] == Decimal('-50.00')
        assert summary['profit_margin'] == Decimal('0.00')

    def test_uses_given_backend(self, store, cashier_user, product):
        backend = LocalMemoryBackend()
        checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 1}], 'UPI', backend=backend)

        summary = financial_overview(store, backend=backend)['summary']
        assert summary['total_sales'] == Decimal('110.00')

    def test_date_window(self, store, cashier_user, product):
        checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 1}], 'CASH')
        Expense.objects.create(store=store, title='Old', amount=Decimal('10.00'), expense_date=date(2000, 1, 15))

        data = financial_overview(store, date(2000, 1, 1), date(2000, 1, 31))

        assert data['period'] == {'from': '2000-01-01', 'to': '2000-01-31'}
        assert data['summary']['total_sales'] == Decimal('0.00')
        assert data['summary']['total_expenses'] == Decimal('10.00')
        assert data['counts']['invoices'] == 0


@pytest.mark.django_db
class TestFinancialAPI:

    def test_store_admin_sees_overview(self, store_admin_client, store, partnership):
        response = store_admin_client.get(f'/api/financial/overview/{store.pk}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['summary']['total_investment'] == Decimal('1500.00')

    def test_cashier_cannot_view(self, cashier_client, store):
        response = cashier_client.get(f'/api/financial/overview/{store.pk}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_other_store_is_forbidden(self, store2_admin_client, store):
        response = store2_admin_client.get(f'/api/financial/overview/{store.pk}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_store(self, super_admin_client):
        response = super_admin_client.get('/api/financial/overview/00000000-0000-0000-0000-000000000000/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_reversed_range_is_rejected(self, store_admin_client, store):
        response = store_admin_client.get(
            f'/api/financial/overview/{store.pk}/', {'from': '2024-02-01', 'to': '2024-01-01'}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestPartnershipAPI:

    def test_create_with_assets(self, store_admin_client, store):
        response = store_admin_client.post('/api/financial/partnerships/', {
            'partner_name': 'Kiran',
            'cash_investment': '2000.00',
            'share_percent': '40.00',
            'assets': [{'name': 'Scale', 'asset_value': '300.00'}],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['total_investment'] == '2300.00'
        assert Partnership.objects.get(partner_name='Kiran').store_id == store.pk

    def test_update_replaces_assets(self, store_admin_client, partnership):
        response = store_admin_client.patch(f'/api/financial/partnerships/{partnership.pk}/', {
            'assets': [{'name': 'Counter', 'asset_value': '100.00'}],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert [asset.name for asset in partnership.assets.all()] == ['Counter']
        assert response.data['total_investment'] == '1100.00'

    def test_cashier_cannot_read_partnerships(self, cashier_client, partnership):
        response = cashier_client.get('/api/financial/partnerships/')
        assert response.status_code == status.HTTP_403_FORBIDDEN
