"""
Stock alerts, shared by the stock endpoint, checkout and the daily sweep.
"""
import logging

from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


def _alert_for(product):
    if product.is_out_of_stock:
        return (
            Notification.Type.OUT_OF_STOCK_ALERT,
            f'Out of Stock: {product.name}',
            f'{product.name} is out of stock.',
        )
    return (
        Notification.Type.LOW_STOCK_ALERT,
        f'Low Stock: {product.name}',
        f'{product.name} is running low: {product.stock_qty} left '
        f'(threshold {product.low_stock_threshold}).',
    )


def create_stock_alert_notifications(product):
    """
    Alert every active STORE_ADMIN of the product's store.

    Admins that still hold an unread alert of the same type for the product
    are skipped. Returns the number of alerts created.
    """
    from users.models import User

    alert_type, title, message = _alert_for(product)
    already_alerted = Notification.objects.filter(
        product=product, type=alert_type, is_read=False
    ).values_list('user_id', flat=True)
    recipients = User.objects.filter(
        store_id=product.store_id,
        role=User.Role.STORE_ADMIN,
        is_active=True,
    ).exclude(pk__in=already_alerted)

    alerts = Notification.objects.bulk_create([
        Notification(
            user=admin,
            store_id=product.store_id,
            product=product,
            type=alert_type,
            title=title,
            message=message,
            data={'sku': product.sku, 'stock_qty': product.stock_qty},
        )
        for admin in recipients
    ])

    if alerts:
        logger.info(
            "%s for product %s sent to %d admin(s)", alert_type, product.pk, len(alerts),
            extra={'store_id': str(product.store_id)}
        )
    return len(alerts)


def notify_low_stock(products):
    """Alert on every product in ``products`` at or below its category threshold."""
    return sum(create_stock_alert_notifications(product) for product in products if product.is_low_stock)


def clear_stock_alerts(product):
    """Mark a restocked product's unread alerts read. Returns how many were cleared."""
    if product.is_low_stock:
        return 0
    return Notification.objects.filter(
        product=product,
        type__in=Notification.STOCK_ALERT_TYPES,
        is_read=False,
    ).update(is_read=True, read_at=timezone.now())
