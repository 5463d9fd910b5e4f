"""
Tests for store onboarding, updates and the settings endpoint.
"""
import pytest
from rest_framework import status

from stores.models import Store
from stores.services import create_store, provision_store_admin, update_store
from users.models import User


# ============== Onboarding Service Tests ==============

@pytest.mark.django_db
class TestStoreOnboarding:

    def test_default_admin_is_provisioned(self):
        store, admin, warnings = create_store({
            'name': 'Corner Shop',
            'owner_name': 'Asha',
            'email': 'asha@corner.in',
            'mobile': '9876543210',
        })

        assert warnings == []
        assert admin.username == 'asha@corner.in'
        assert admin.role == User.Role.STORE_ADMIN
        assert admin.store_id == store.pk
        assert admin.display_name == 'Asha'
        assert admin.phone_number == '9876543210'
        assert admin.check_password('9876543210')

    def test_missing_mobile_skips_admin(self):
        store, admin, warnings = create_store({'name': 'No Phone', 'owner_name': 'Ravi', 'email': 'ravi@x.in'})

        assert admin is None
        assert len(warnings) == 1
        assert Store.objects.filter(pk=store.pk).exists()
        assert not store.users.exists()

    def test_existing_username_is_not_duplicated(self, store):
        provision_store_admin(store, 'dup@shop.in', '111')
        second = Store.objects.create(name='Second', owner_name='X')

        admin, warnings = provision_store_admin(second, 'dup@shop.in', '222')

        assert admin is None
        assert "already exists" in warnings[0]
        assert User.objects.filter(username='dup@shop.in').count() == 1


@pytest.mark.django_db
class TestStoreUpdatePropagation:

    def test_owner_and_contact_changes_reach_admins(self, store, store_admin, cashier_user):
        store, warnings = update_store(store, {
            'owner_name': 'New Owner',
            'email': 'new@teststore.in',
            'mobile': '9111111111',
        })

        assert warnings == []
        store_admin.refresh_from_db()
        assert store_admin.display_name == 'New Owner'
        assert store_admin.email == 'new@teststore.in'
        assert store_admin.phone_number == '9111111111'
        assert store_admin.username == 'new@teststore.in'

        cashier_user.refresh_from_db()
        assert cashier_user.display_name is None
        assert cashier_user.username == 'cashier'

    def test_taken_username_becomes_warning(self, store, store_admin, store2_admin):
        store, warnings = update_store(store, {'email': 'store2admin'})

        assert len(warnings) == 1
        assert 'already in use' in warnings[0]
        store.refresh_from_db()
        assert store.email == 'store2admin'
        store_admin.refresh_from_db()
        assert store_admin.username == 'storeadmin'
        assert store_admin.email == 'store2admin'

    def test_unrelated_change_does_not_touch_users(self, store, store_admin):
        store, warnings = update_store(store, {'address': 'MG Road'})
        assert warnings == []
        store_admin.refresh_from_db()
        assert store_admin.display_name is None


# ============== Store API Tests ==============

@pytest.mark.django_db
class TestStoreAPI:

    def test_super_admin_creates_store(self, super_admin_client):
        response = super_admin_client.post('/api/stores/', {
            'name': 'New Store',
            'owner_name': 'Owner',
            'email': 'new@shop.in',
            'mobile': '9111111111',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['admin_username'] == 'new@shop.in'
        assert response.data['warnings'] == []
        assert response.data['timezone'] == 'Asia/Kolkata'

    def test_repeat_email_reports_warning(self, super_admin_client):
        payload = {'name': 'A', 'owner_name': 'Owner', 'email': 'same@shop.in', 'mobile': '9111111111'}
        super_admin_client.post('/api/stores/', payload)
        response = super_admin_client.post('/api/stores/', dict(payload, name='B'))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['admin_username'] is None
        assert len(response.data['warnings']) == 1
        assert User.objects.filter(username='same@shop.in').count() == 1

    def test_unknown_timezone_rejected(self, super_admin_client):
        response = super_admin_client.post('/api/stores/', {
            'name': 'Lost', 'owner_name': 'Owner', 'timezone': 'Mars/Olympus'
        })
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_active_upi_must_be_set(self, super_admin_client):
        response = super_admin_client.post('/api/stores/', {
            'name': 'Pay', 'owner_name': 'Owner', 'active_upi_type': 'SECONDARY'
        })
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_store_admin_cannot_create_store(self, store_admin_client):
        response = store_admin_client.post('/api/stores/', {'name': 'Mine', 'owner_name': 'Me'})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_store_admin_updates_own_store(self, store_admin_client, store, store_admin):
        response = store_admin_client.patch(f'/api/stores/{store.pk}/', {
            'owner_name': 'Renamed Owner',
            'mobile': '9222222222',
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['warnings'] == []
        store_admin.refresh_from_db()
        assert store_admin.display_name == 'Renamed Owner'
        assert store_admin.phone_number == '9222222222'

    def test_store_admin_cannot_update_other_store(self, store_admin_client, store2):
        response = store_admin_client.patch(f'/api/stores/{store2.pk}/', {'name': 'Hijacked'})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        store2.refresh_from_db()
        assert store2.name == 'Other Store'

    def test_store_admin_cannot_suspend(self, store_admin_client, store):
        response = store_admin_client.patch(f'/api/stores/{store.pk}/', {'is_active': False})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        store.refresh_from_db()
        assert store.is_active is True

    def test_super_admin_suspends_store(self, super_admin_client, store):
        response = super_admin_client.patch(f'/api/stores/{store.pk}/', {'is_active': False})

        assert response.status_code == status.HTTP_200_OK
        store.refresh_from_db()
        assert store.is_active is False

    def test_cashier_cannot_update_store(self, cashier_client, store):
        response = cashier_client.patch(f'/api/stores/{store.pk}/', {'name': 'Cashier Store'})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cashier_sees_only_own_store(self, cashier_client, store, store2):
        response = cashier_client.get('/api/stores/')

        assert response.status_code == status.HTTP_200_OK
        assert [row['id'] for row in response.data] == [str(store.pk)]
        assert response.data[0]['active_upi_id'] == 'teststore@upi'

    def test_stores_cannot_be_deleted(self, super_admin_client, store):
        response = super_admin_client.delete(f'/api/stores/{store.pk}/')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert Store.objects.filter(pk=store.pk).exists()

    def test_global_settings(self, cashier_client):
        response = cashier_client.get('/api/settings/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data_source'] == 'database'
        assert response.data['tax_presets'] == [0, 5, 12, 18, 28]
        assert 'INR' in response.data['currencies']
