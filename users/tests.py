"""
Tests for authentication, roles and store scoping.
"""
import pytest
from rest_framework import status

from users.capabilities import (
    ADJUST_STOCK, CHECKOUT, MANAGE_CATALOG, MANAGE_STORES, RECORD_EXPENSES,
    capabilities_for, role_has_capability
)
from users.mixins import can_access_store
from users.models import User


# ============== Capability Tests ==============

class TestCapabilities:

    def test_super_admin_holds_everything(self):
        assert role_has_capability('SUPER_ADMIN', MANAGE_STORES)
        assert role_has_capability('SUPER_ADMIN', MANAGE_CATALOG)

    def test_store_admin_cannot_manage_stores(self):
        assert not role_has_capability('STORE_ADMIN', MANAGE_STORES)
        assert role_has_capability('STORE_ADMIN', ADJUST_STOCK)

    def test_cashier_sells_but_does_not_manage(self):
        assert role_has_capability('CASHIER', CHECKOUT)
        assert role_has_capability('CASHIER', RECORD_EXPENSES)
        assert not role_has_capability('CASHIER', MANAGE_CATALOG)
        assert not role_has_capability('CASHIER', ADJUST_STOCK)

    def test_unknown_role_has_nothing(self):
        assert capabilities_for('GUEST') == frozenset()


@pytest.mark.django_db
class TestStoreAccess:

    def test_super_admin_reaches_any_store(self, super_admin, store, store2):
        assert can_access_store(super_admin, store.pk)
        assert can_access_store(super_admin, store2.pk)

    def test_store_user_is_pinned(self, cashier_user, store, store2):
        assert can_access_store(cashier_user, store.pk)
        assert can_access_store(cashier_user, str(store.pk))
        assert not can_access_store(cashier_user, store2.pk)
        assert not can_access_store(cashier_user, None)


# ============== Authentication Tests ==============

@pytest.mark.django_db
class TestAuthentication:

    def test_login_success(self, api_client, store_admin):
        response = api_client.post('/api/auth/login/', {
            'username': 'storeadmin',
            'password': 'testpass123'
        })

        assert response.status_code == status.HTTP_200_OK
        assert 'access_token' in response.data
        assert 'refresh_token' in response.data
        assert response.data['user']['username'] == 'storeadmin'
        assert response.data['user']['store']['id'] == str(store_admin.store_id)

    def test_login_invalid_credentials(self, api_client, store_admin):
        response = api_client.post('/api/auth/login/', {
            'username': 'storeadmin',
            'password': 'wrongpassword'
        })
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_missing_fields(self, api_client):
        response = api_client.post('/api/auth/login/', {'username': 'storeadmin'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_suspended_store_cannot_log_in(self, api_client, suspended_store, oauth_application):
        User.objects.create_user(
            username='stranded', password='testpass123',
            role=User.Role.CASHIER, store=suspended_store
        )
        response = api_client.post('/api/auth/login/', {
            'username': 'stranded',
            'password': 'testpass123'
        })
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_issued_token_authenticates(self, api_client, cashier_user):
        response = api_client.post('/api/auth/login/', {
            'username': 'cashier',
            'password': 'testpass123'
        })
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access_token']}")

        response = api_client.get('/api/auth/me/')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['role'] == User.Role.CASHIER

    def test_logout_revokes_token(self, api_client, cashier_user):
        response = api_client.post('/api/auth/login/', {
            'username': 'cashier',
            'password': 'testpass123'
        })
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access_token']}")

        assert api_client.post('/api/auth/logout/').status_code == status.HTTP_200_OK
        assert api_client.get('/api/auth/me/').status_code == status.HTTP_401_UNAUTHORIZED

    def test_unauthenticated_request(self, api_client):
        response = api_client.get('/api/auth/me/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestCurrentUser:

    def test_profile_lists_capabilities(self, cashier_client):
        response = cashier_client.get('/api/auth/me/')

        assert response.status_code == status.HTTP_200_OK
        assert CHECKOUT in response.data['capabilities']
        assert MANAGE_CATALOG not in response.data['capabilities']

    def test_update_profile(self, cashier_client, cashier_user):
        response = cashier_client.patch('/api/auth/me/', {'display_name': 'Till One'})

        assert response.status_code == status.HTTP_200_OK
        cashier_user.refresh_from_db()
        assert cashier_user.display_name == 'Till One'
        assert cashier_user.role == User.Role.CASHIER

    def test_username_clash_is_conflict(self, cashier_client, store_admin):
        response = cashier_client.patch('/api/auth/me/', {'username': 'storeadmin'})
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'conflict'

    def test_change_password(self, cashier_client, cashier_user):
        response = cashier_client.post('/api/auth/me/change-password/', {
            'old_password': 'testpass123',
            'new_password': 'newpass456'
        })

        assert response.status_code == status.HTTP_200_OK
        cashier_user.refresh_from_db()
        assert cashier_user.check_password('newpass456')

    def test_change_password_wrong_old(self, cashier_client):
        response = cashier_client.post('/api/auth/me/change-password/', {
            'old_password': 'nope',
            'new_password': 'newpass456'
        })
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_capability_table(self, cashier_client):
        response = cashier_client.get('/api/auth/capabilities/')

        assert response.status_code == status.HTTP_200_OK
        assert set(response.data) == {'SUPER_ADMIN', 'STORE_ADMIN', 'CASHIER'}
        assert MANAGE_STORES not in response.data['STORE_ADMIN']


# ============== User Management Tests ==============

@pytest.mark.django_db
class TestUserManagement:

    def test_store_admin_creates_cashier_in_own_store(self, store_admin_client, store):
        response = store_admin_client.post('/api/auth/users/', {
            'username': 'newcashier',
            'password': 'secret123',
            'role': 'CASHIER'
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['store_id'] == str(store.pk)
        user = User.objects.get(username='newcashier')
        assert user.store_id == store.pk
        assert user.check_password('secret123')

    def test_duplicate_username_is_conflict(self, store_admin_client, cashier_user):
        response = store_admin_client.post('/api/auth/users/', {
            'username': 'cashier',
            'password': 'secret123',
            'role': 'CASHIER'
        })
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_store_admin_cannot_create_for_other_store(self, store_admin_client, store2):
        response = store_admin_client.post('/api/auth/users/', {
            'username': 'intruder',
            'password': 'secret123',
            'role': 'CASHIER',
            'store': str(store2.pk)
        })
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not User.objects.filter(username='intruder').exists()

    def test_store_admin_cannot_create_super_admin(self, store_admin_client):
        response = store_admin_client.post('/api/auth/users/', {
            'username': 'boss',
            'password': 'secret123',
            'role': 'SUPER_ADMIN'
        })
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_super_admin_must_name_store_for_store_user(self, super_admin_client):
        response = super_admin_client.post('/api/auth/users/', {
            'username': 'floating',
            'password': 'secret123',
            'role': 'CASHIER'
        })
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_super_admin_creates_super_admin_without_store(self, super_admin_client, store):
        response = super_admin_client.post('/api/auth/users/', {
            'username': 'boss',
            'password': 'secret123',
            'role': 'SUPER_ADMIN',
            'store': str(store.pk)
        })
        assert response.status_code == status.HTTP_201_CREATED
        assert User.objects.get(username='boss').store_id is None

    def test_cashier_cannot_manage_users(self, cashier_client):
        response = cashier_client.get('/api/auth/users/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_is_scoped_to_store(self, store_admin_client, cashier_user, store2_admin):
        response = store_admin_client.get('/api/auth/users/')

        assert response.status_code == status.HTTP_200_OK
        usernames = {row['username'] for row in response.data}
        assert usernames == {'storeadmin', 'cashier'}

    def test_other_store_user_is_forbidden(self, store_admin_client, store2_admin):
        response = store_admin_client.get(f'/api/auth/users/{store2_admin.pk}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cannot_delete_self(self, store_admin_client, store_admin):
        response = store_admin_client.delete(f'/api/auth/users/{store_admin.pk}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN
