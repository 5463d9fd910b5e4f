"""
Checkout: price the cart, take the stock, persist the invoice.

Stock decrements and the backend write share one database transaction, so a
line that runs out of stock or a failed backend write leaves every product
untouched.
"""
import logging
import secrets
import uuid
from collections import OrderedDict
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from inventory.models import Product
from notifications.utils import notify_low_stock
from stock.models import StockTransaction
from stock.services import apply_stock_delta
from .backends import get_invoice_backend
from .models import Invoice
from .pricing import compute_totals, price_product

logger = logging.getLogger(__name__)


def store_zone(store):
    return ZoneInfo(store.timezone)


def generate_invoice_number(store, now=None):
    """INV-<local timestamp>-<8 random hex chars>, local to the store's timezone"""
    local_now = (now or timezone.now()).astimezone(store_zone(store))
    return f"INV-{local_now:%Y%m%d%H%M%S}-{secrets.token_hex(4).upper()}"


def date_range(date_from, date_to, zone):
    """Turn inclusive calendar dates into an aware ``[start, end)`` datetime range"""
    start = datetime.combine(date_from, time.min, tzinfo=zone) if date_from else None
    end = datetime.combine(date_to + timedelta(days=1), time.min, tzinfo=zone) if date_to else None
    return start, end


def _merge_quantities(items):
    quantities = OrderedDict()
    for item in items:
        product_id = uuid.UUID(str(item['product_id']))
        quantities[product_id] = quantities.get(product_id, 0) + int(item['quantity'])
    return quantities


def build_invoice_document(store, cashier, payment_method, priced, invoice_number, created_at):
    totals = compute_totals(line for _, line in priced)
    return {
        'id': str(uuid.uuid4()),
        'invoice_number': invoice_number,
        'store_id': str(store.pk),
        'cashier_id': cashier.pk if cashier else None,
        'cashier_name': (cashier.display_name or cashier.username) if cashier else '',
        'payment_method': payment_method,
        'subtotal': str(totals.subtotal),
        'discount_total': str(totals.discount_total),
        'tax_total': str(totals.tax_total),
        'grand_total': str(totals.grand_total),
        'synced': False,
        'created_at': created_at.isoformat(),
        'items': [
            {
                'product_id': str(product.pk),
                'name': product.name,
                'sku': product.sku,
                'quantity': line.quantity,
                'unit_price': str(line.unit_price),
                'tax_percent': str(line.tax_percent),
                'discount_percent': str(line.discount_percent),
                'line_subtotal': str(line.line_subtotal),
                'discount_amount': str(line.discount_amount),
                'tax_amount': str(line.tax_amount),
                'line_total': str(line.line_total),
            }
            for product, line in priced
        ],
    }


def checkout(store, cashier, items, payment_method=Invoice.PaymentMethod.CASH, backend=None):
    """
    Sell ``items`` (``[{'product_id', 'quantity'}, ...]``) at ``store``.

    Repeated products are merged into one line. Returns the stored invoice
    document. Raises InsufficientStock when any line cannot be covered, in
    which case no stock moves and nothing is stored.
    """
    if not store.is_active:
        raise PermissionDenied('Store is suspended.')
    if not items:
        raise ValidationError({'items': 'At least one item is required.'})
    if payment_method not in Invoice.PaymentMethod.values:
        raise ValidationError({'payment_method': f"Unknown payment method '{payment_method}'."})

    quantities = _merge_quantities(items)
    products = {
        product.pk: product
        for product in Product.objects.select_related('category').filter(store=store, pk__in=quantities)
    }
    missing = [str(product_id) for product_id in quantities if product_id not in products]
    if missing:
        raise ValidationError({'items': f"Products not found in this store: {', '.join(missing)}"})

    priced = [
        (products[product_id], price_product(products[product_id], quantity, store))
        for product_id, quantity in quantities.items()
    ]
    backend = backend or get_invoice_backend()
    created_at = timezone.now()
    invoice_number = generate_invoice_number(store, created_at)

    with transaction.atomic():
        # fixed lock order across concurrent checkouts
        for product_id in sorted(quantities):
            apply_stock_delta(
                products[product_id],
                -quantities[product_id],
                reason=StockTransaction.Reason.SALE,
                performed_by=cashier,
                reference=invoice_number,
            )
        document = build_invoice_document(store, cashier, payment_method, priced, invoice_number, created_at)
        document = backend.save(document)

    logger.info(
        "Invoice %s created: %s items, total %s, via %s backend",
        invoice_number, len(priced), document['grand_total'], backend.name,
        extra={'store_id': str(store.pk)}
    )
    notify_low_stock(products.values())
    return document


def parse_date_params(query_params):
    """Read ``from``/``to`` (YYYY-MM-DD) from a query string"""
    from django.utils.dateparse import parse_date

    dates = []
    for name in ('from', 'to'):
        raw = query_params.get(name)
        if not raw:
            dates.append(None)
            continue
        try:
            value = parse_date(raw)
        except ValueError:
            value = None
        if value is None:
            raise ValidationError({name: 'Use the YYYY-MM-DD format.'})
        dates.append(value)

    date_from, date_to = dates
    if date_from and date_to and date_from > date_to:
        raise ValidationError({'from': "'from' must not be after 'to'."})
    return date_from, date_to
