"""
Tests for the health probe, the error envelope and the demo data command.
"""
import io

import pytest
from django.core.management import call_command
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError

from main.exceptions import Conflict, InsufficientStock, custom_exception_handler


class TestErrorEnvelope:

    def test_validation_error(self):
        response = custom_exception_handler(ValidationError({'name': ['Required.']}), {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'validation_error'
        assert response.data['message'] == 'Validation failed.'
        assert response.data['status'] == 400
        assert 'name' in response.data['errors']

    def test_insufficient_stock_keeps_its_message(self):
        response = custom_exception_handler(InsufficientStock('Insufficient stock for Tea. Available: 2'), {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'insufficient_stock'
        assert response.data['message'] == 'Insufficient stock for Tea. Available: 2'

    def test_conflict(self):
        response = custom_exception_handler(Conflict('Username already exists'), {})
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'conflict'

    def test_not_found(self):
        response = custom_exception_handler(NotFound(), {})
        assert response.data['code'] == 'not_found'

    def test_unexpected_error_is_hidden(self):
        response = custom_exception_handler(RuntimeError('db password is hunter2'), {})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['code'] == 'internal_server_error'
        assert 'hunter2' not in response.data['message']


@pytest.mark.django_db
class TestHealth:

    def test_health_needs_no_auth(self, api_client):
        response = api_client.get('/api/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['data_source'] == 'database'
        assert 'X-Request-ID' in response

    def test_request_id_is_echoed(self, api_client):
        response = api_client.get('/api/health/', HTTP_X_REQUEST_ID='abc-123')
        assert response['X-Request-ID'] == 'abc-123'


@pytest.mark.django_db
class TestLoadDemoData:

    def test_loads_store_catalog_and_invoices(self):
        from invoices.models import Invoice
        from stores.models import Store
        from users.models import User

        call_command('load_demo_data', invoices=3, stdout=io.StringIO())

        store = Store.objects.get(email='owner@demo-store.in')
        assert store.products.count() == 9
        assert Invoice.objects.filter(store=store).count() == 3
        assert User.objects.filter(username='owner@demo-store.in', role=User.Role.STORE_ADMIN).exists()

    def test_is_idempotent(self):
        from inventory.models import Product

        call_command('load_demo_data', invoices=0, stdout=io.StringIO())
        call_command('load_demo_data', invoices=0, stdout=io.StringIO())
        assert Product.objects.count() == 9
