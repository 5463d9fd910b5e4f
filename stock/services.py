import logging

from django.db import transaction
from django.db.models import F

from inventory.models import Product
from main.exceptions import InsufficientStock
from .models import StockTransaction

logger = logging.getLogger(__name__)


def apply_stock_delta(product, delta, *, reason, performed_by=None, reference=None, notes=None):
    """
    Apply a signed stock change to ``product`` and record it in the ledger.

    Decrements are a single conditional UPDATE so stock never goes below zero,
    even with concurrent sales. Raises InsufficientStock when the product does
    not hold enough units. Returns the ledger row; ``product.stock_qty`` is
    refreshed in place.
    """
    if delta == 0:
        raise ValueError('Stock delta must be non-zero')

    with transaction.atomic():
        queryset = Product.objects.filter(pk=product.pk)
        if delta < 0:
            queryset = queryset.filter(stock_qty__gte=-delta)

        updated = queryset.update(stock_qty=F('stock_qty') + delta)
        if not updated:
            available = Product.objects.filter(pk=product.pk).values_list('stock_qty', flat=True).first()
            logger.info(
                "Insufficient stock for product %s: requested %s, available %s",
                product.pk, -delta, available,
                extra={'store_id': str(product.store_id)}
            )
            raise InsufficientStock(
                f"Insufficient stock for {product.name}. Available: {available or 0}"
            )

        product.refresh_from_db(fields=['stock_qty'])
        return StockTransaction.objects.create(
            store_id=product.store_id,
            product=product,
            delta=delta,
            quantity_before=product.stock_qty - delta,
            quantity_after=product.stock_qty,
            reason=reason,
            reference=reference,
            notes=notes,
            performed_by=performed_by,
        )
