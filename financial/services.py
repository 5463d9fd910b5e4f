from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Count, DecimalField, OuterRef, Subquery, Sum, Value
from django.db.models.functions import Coalesce

from expenses.models import Expense
from invoices.backends import get_invoice_backend
from invoices.services import date_range, store_zone
from .models import Partnership, PartnershipAsset

ZERO = Decimal('0.00')


def total_investment(store):
    """Σ(cash investment + Σ asset value) over the store's active partnerships"""
    asset_totals = (
        PartnershipAsset.objects.filter(partnership=OuterRef('pk'))
        .order_by()
        .values('partnership')
        .annotate(total=Sum('asset_value'))
        .values('total')
    )
    money = DecimalField(max_digits=14, decimal_places=2)
    rows = Partnership.objects.filter(store=store, is_active=True).annotate(
        assets_total=Coalesce(Subquery(asset_totals, output_field=money), Value(ZERO), output_field=money)
    )
    return sum((row.cash_investment + row.assets_total for row in rows), ZERO)


def financial_overview(store, date_from=None, date_to=None, backend=None):
    backend = backend or get_invoice_backend()
    start, end = date_range(date_from, date_to, store_zone(store))
    sales = backend.summarize(store.pk, start, end)

    expenses = Expense.objects.filter(store=store)
    if date_from:
        expenses = expenses.filter(expense_date__gte=date_from)
    if date_to:
        expenses = expenses.filter(expense_date__lte=date_to)
    expense_totals = expenses.aggregate(total=Sum('amount'), count=Count('id'))

    investment = total_investment(store)
    total_sales = Decimal(sales['total_sales'])
    total_expenses = expense_totals['total'] or ZERO
    profit = total_sales - total_expenses
    margin = (profit / total_sales * 100).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP) if total_sales else ZERO

    return {
        'store_id': store.pk,
        'period': {
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
        },
        'summary': {
            'total_investment': investment,
            'total_sales': total_sales,
            'total_expenses': total_expenses,
            'profit': profit,
            'profit_margin': margin,
            'tax_collected': Decimal(sales['tax_total']),
            'discount_given': Decimal(sales['discount_total']),
        },
        'counts': {
            'invoices': sales['invoice_count'],
            'expenses': expense_totals['count'] or 0,
        },
        'sales_by_payment_method': {
            method: Decimal(total) for method, total in sales['sales_by_payment_method'].items()
        },
        'currency': store.currency,
    }
