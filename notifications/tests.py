"""
Tests for stock alerts and the notification endpoints.
"""
import pytest
from rest_framework import status

from inventory.models import Product
from notifications.models import Notification
from notifications.tasks import check_stock_levels
from notifications.utils import clear_stock_alerts, create_stock_alert_notifications, notify_low_stock


@pytest.mark.django_db
class TestStockAlerts:

    def test_low_stock_alerts_store_admins_only(self, product, store_admin, cashier_user, store2_admin):
        product.stock_qty = 4
        assert create_stock_alert_notifications(product) == 1

        alert = Notification.objects.get()
        assert alert.user == store_admin
        assert alert.type == Notification.Type.LOW_STOCK_ALERT

    def test_out_of_stock_alert(self, product, store_admin):
        product.stock_qty = 0
        create_stock_alert_notifications(product)
        assert Notification.objects.get().type == Notification.Type.OUT_OF_STOCK_ALERT

    def test_unread_alert_is_not_repeated(self, product, store_admin):
        product.stock_qty = 4
        create_stock_alert_notifications(product)
        assert create_stock_alert_notifications(product) == 0

        Notification.objects.get().mark_as_read()
        assert create_stock_alert_notifications(product) == 1

    def test_healthy_stock_is_ignored(self, product, store_admin):
        assert notify_low_stock([product]) == 0
        assert not Notification.objects.exists()

    def test_restock_clears_unread_alerts(self, store_admin_client, store_admin, product):
        Product.objects.filter(pk=product.pk).update(stock_qty=3)
        product.refresh_from_db()
        create_stock_alert_notifications(product)

        response = store_admin_client.patch(f'/api/products/{product.pk}/stock/', {'delta': 20})

        assert response.status_code == status.HTTP_200_OK
        assert not Notification.objects.filter(is_read=False).exists()

    def test_partial_restock_keeps_alert(self, product, store_admin):
        product.stock_qty = 3
        create_stock_alert_notifications(product)
        product.stock_qty = 8
        assert clear_stock_alerts(product) == 0

    def test_checkout_into_low_stock_alerts(self, store, cashier_user, store_admin, product):
        from invoices.services import checkout

        checkout(store, cashier_user, [{'product_id': product.pk, 'quantity': 41}], 'CASH')
        assert Notification.objects.filter(user=store_admin).count() == 1


@pytest.mark.django_db
class TestCheckStockLevelsTask:

    def test_sweep_alerts_low_products(self, product, discounted_product, store_admin):
        Product.objects.filter(pk=product.pk).update(stock_qty=2)

        assert check_stock_levels() == 1
        assert check_stock_levels() == 0

    def test_sweep_skips_suspended_stores(self, product, store, store_admin):
        Product.objects.filter(pk=product.pk).update(stock_qty=0)
        store.is_active = False
        store.save()

        assert check_stock_levels() == 0

    def test_daily_schedule_follows_settings(self, settings):
        from main.celery import app

        entry = app.conf.beat_schedule['check-stock-levels-daily']
        assert entry['task'] == 'notifications.tasks.check_stock_levels'
        assert entry['schedule'].hour == {settings.POS_STOCK_CHECK_HOUR}
        assert entry['schedule'].minute == {0}
        assert app.conf.timezone == settings.POS_DEFAULT_TIMEZONE


@pytest.mark.django_db
class TestNotificationAPI:

    @pytest.fixture
    def alerts(self, product, store_admin):
        product.stock_qty = 0
        create_stock_alert_notifications(product)
        return list(Notification.objects.filter(user=store_admin))

    def test_list_own_notifications(self, store_admin_client, alerts):
        response = store_admin_client.get('/api/notifications/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['type'] == 'OUT_OF_STOCK_ALERT'

    def test_unread_count_and_mark_read(self, store_admin_client, alerts):
        assert store_admin_client.get('/api/notifications/unread-count/').data['unread_count'] == 1

        response = store_admin_client.patch(f'/api/notifications/{alerts[0].pk}/read/')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_read'] is True

        assert store_admin_client.get('/api/notifications/unread-count/').data['unread_count'] == 0

    def test_mark_all_read(self, store_admin_client, alerts):
        response = store_admin_client.post('/api/notifications/mark-all-read/')
        assert response.data['updated_count'] == 1

    def test_other_users_notification_is_hidden(self, cashier_client, alerts):
        response = cashier_client.patch(f'/api/notifications/{alerts[0].pk}/read/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete(self, store_admin_client, alerts):
        response = store_admin_client.delete(f'/api/notifications/{alerts[0].pk}/')
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Notification.objects.exists()
