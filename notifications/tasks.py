import logging

from celery import shared_task
from django.db.models import F

logger = logging.getLogger(__name__)


@shared_task
def check_stock_levels():
    """
    Daily sweep: alert store admins about every product of an active store at
    or below its category threshold. Returns the number of alerts created.
    """
    from inventory.models import Product
    from notifications.utils import notify_low_stock

    low = (
        Product.objects
        .filter(store__is_active=True, stock_qty__lte=F('category__low_stock_threshold'))
        .select_related('category')
        .order_by('store_id', 'stock_qty')
    )
    created = notify_low_stock(low.iterator())
    logger.info("Stock sweep finished: %d alert(s) created", created)
    return created
