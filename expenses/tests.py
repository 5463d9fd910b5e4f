"""
Tests for expense recording and store scoping.
"""
from datetime import date
from decimal import Decimal

import pytest
from rest_framework import status

from expenses.models import Expense


@pytest.fixture
def expense(db, store, store_admin):
    return Expense.objects.create(
        store=store,
        title='Electricity',
        amount=Decimal('1200.00'),
        expense_date=date(2024, 3, 10),
        category='Utilities',
        created_by=store_admin,
    )


@pytest.mark.django_db
class TestExpenseAPI:

    def test_cashier_records_expense(self, cashier_client, cashier_user, store):
        response = cashier_client.post('/api/expenses/', {
            'title': 'Tea',
            'amount': '40.00',
            'expense_date': '2024-03-11',
            'category': 'Staff',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['store_name'] == 'Test Store'
        expense = Expense.objects.get(title='Tea')
        assert expense.store_id == store.pk
        assert expense.created_by == cashier_user

    def test_amount_must_be_positive(self, cashier_client):
        response = cashier_client.post('/api/expenses/', {
            'title': 'Free', 'amount': '0', 'expense_date': '2024-03-11'
        })
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_cashier_cannot_edit_or_delete(self, cashier_client, expense):
        response = cashier_client.patch(f'/api/expenses/{expense.pk}/', {'amount': '1.00'})
        assert response.status_code == status.HTTP_403_FORBIDDEN
        response = cashier_client.delete(f'/api/expenses/{expense.pk}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_store_admin_edits(self, store_admin_client, expense):
        response = store_admin_client.patch(f'/api/expenses/{expense.pk}/', {'amount': '1100.00'})

        assert response.status_code == status.HTTP_200_OK
        expense.refresh_from_db()
        assert expense.amount == Decimal('1100.00')

    def test_cannot_move_to_other_store(self, store_admin_client, expense, store, store2):
        response = store_admin_client.patch(f'/api/expenses/{expense.pk}/', {'store': store2.pk})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        expense.refresh_from_db()
        assert expense.store_id == store.pk

    def test_date_range_filter(self, store_admin_client, expense, store, store_admin):
        Expense.objects.create(
            store=store, title='Rent', amount=Decimal('5000.00'),
            expense_date=date(2024, 4, 1), created_by=store_admin
        )

        response = store_admin_client.get('/api/expenses/', {'from': '2024-03-01', 'to': '2024-03-31'})

        assert response.status_code == status.HTTP_200_OK
        assert [row['title'] for row in response.data] == ['Electricity']

    def test_bad_date_is_rejected(self, store_admin_client):
        response = store_admin_client.get('/api/expenses/', {'from': '10/03/2024'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_store_endpoint(self, cashier_client, expense, store):
        response = cashier_client.get(f'/api/expenses/store/{store.pk}/')

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

    def test_store_endpoint_other_store(self, store2_admin_client, expense, store):
        response = store2_admin_client.get(f'/api/expenses/store/{store.pk}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cannot_record_for_other_store(self, cashier_client, store2):
        response = cashier_client.post('/api/expenses/', {
            'store': str(store2.pk), 'title': 'Sneaky', 'amount': '5.00', 'expense_date': '2024-03-11'
        })
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Expense.objects.filter(title='Sneaky').exists()
