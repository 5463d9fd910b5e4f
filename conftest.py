"""
Pytest fixtures for POS API tests.
Provides common test data and utilities for all test modules.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from oauth2_provider.models import AccessToken, Application
from oauthlib.common import generate_token
from rest_framework.test import APIClient

User = get_user_model()


# ============== OAuth2 Application Fixture ==============

@pytest.fixture
def oauth_application(db):
    """OAuth2 application; the name must match the one used by login_view"""
    return Application.objects.create(
        name='pos-frontend',
        client_type=Application.CLIENT_PUBLIC,
        authorization_grant_type=Application.GRANT_PASSWORD,
    )


# ============== Store Fixtures ==============

@pytest.fixture
def store(db):
    from stores.models import Store
    return Store.objects.create(
        name='Test Store',
        owner_name='Test Owner',
        email='owner@teststore.in',
        mobile='9000000001',
        primary_upi_id='teststore@upi',
        active_upi_type=Store.UpiType.PRIMARY,
    )


@pytest.fixture
def store2(db):
    """Second store for isolation tests"""
    from stores.models import Store
    return Store.objects.create(
        name='Other Store',
        owner_name='Other Owner',
        email='owner@otherstore.in',
        mobile='9000000002',
    )


@pytest.fixture
def suspended_store(db):
    from stores.models import Store
    return Store.objects.create(name='Suspended Store', owner_name='Nobody', is_active=False)


# ============== User Fixtures ==============

@pytest.fixture
def super_admin(db, oauth_application):
    return User.objects.create_user(
        username='superadmin',
        email='superadmin@test.com',
        password='testpass123',
        role=User.Role.SUPER_ADMIN,
        store=None
    )


@pytest.fixture
def store_admin(db, store, oauth_application):
    return User.objects.create_user(
        username='storeadmin',
        email='storeadmin@test.com',
        password='testpass123',
        role=User.Role.STORE_ADMIN,
        store=store
    )


@pytest.fixture
def cashier_user(db, store, oauth_application):
    return User.objects.create_user(
        username='cashier',
        email='cashier@test.com',
        password='testpass123',
        role=User.Role.CASHIER,
        store=store
    )


@pytest.fixture
def store2_admin(db, store2, oauth_application):
    return User.objects.create_user(
        username='store2admin',
        email='store2admin@test.com',
        password='testpass123',
        role=User.Role.STORE_ADMIN,
        store=store2
    )


# ============== Token / Client Fixtures ==============

def create_access_token(user, application, scope='read write'):
    """Helper function to create access token"""
    return AccessToken.objects.create(
        user=user,
        application=application,
        token=generate_token(),
        expires=timezone.now() + timedelta(hours=1),
        scope=scope
    )


def authenticated_client(user, application):
    client = APIClient()
    token = create_access_token(user, application)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token.token}')
    return client


@pytest.fixture
def api_client():
    """Unauthenticated API client"""
    return APIClient()


@pytest.fixture
def super_admin_client(super_admin, oauth_application):
    return authenticated_client(super_admin, oauth_application)


@pytest.fixture
def store_admin_client(store_admin, oauth_application):
    return authenticated_client(store_admin, oauth_application)


@pytest.fixture
def cashier_client(cashier_user, oauth_application):
    return authenticated_client(cashier_user, oauth_application)


@pytest.fixture
def store2_admin_client(store2_admin, oauth_application):
    return authenticated_client(store2_admin, oauth_application)


# ============== Catalog Fixtures ==============

@pytest.fixture
def category(db, store):
    """10% GST, no discount"""
    from inventory.models import Category
    return Category.objects.create(
        store=store,
        name='General',
        default_gst=Decimal('10.00'),
        default_discount=Decimal('0.00'),
    )


@pytest.fixture
def discount_category(db, store):
    """10% GST with a 10% category discount"""
    from inventory.models import Category
    return Category.objects.create(
        store=store,
        name='Promo',
        default_gst=Decimal('10.00'),
        default_discount=Decimal('10.00'),
    )


@pytest.fixture
def product(db, store, category):
    """Price 100 at the category's 10% tax, 50 in stock"""
    from inventory.models import Product
    return Product.objects.create(
        store=store,
        category=category,
        name='Test Product',
        sku='TEST-001',
        price=Decimal('100.00'),
        stock_qty=50,
    )


@pytest.fixture
def discounted_product(db, store, discount_category):
    from inventory.models import Product
    return Product.objects.create(
        store=store,
        category=discount_category,
        name='Promo Product',
        sku='PROMO-001',
        price=Decimal('100.00'),
        stock_qty=50,
    )


@pytest.fixture
def store2_product(db, store2):
    from inventory.models import Category, Product
    other_category = Category.objects.create(store=store2, name='Other', default_gst=Decimal('5.00'))
    return Product.objects.create(
        store=store2,
        category=other_category,
        name='Other Product',
        price=Decimal('20.00'),
        stock_qty=10,
    )


# ============== Invoice Backend Fixtures ==============

@pytest.fixture
def local_backend(settings):
    """Switch the active invoice backend to the in-memory one"""
    from invoices.backends import get_invoice_backend
    settings.POS_DATA_SOURCE = 'local'
    backend = get_invoice_backend()
    yield backend
    backend.clear()
