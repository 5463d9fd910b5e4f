"""
Invoice line-item computation.

Every money amount is a ``Decimal`` quantized to cents with ROUND_HALF_UP, per
line. Invoice totals are plain sums of the rounded line values, so
``grand_total == subtotal - discount_total + tax_total`` holds exactly.

Discount stacking is additive: the category discount and the store's global
discount are added, capped at 100 percent, and applied once to the line
subtotal. Tax is charged on the discounted amount.
"""
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

MONEY = Decimal('0.01')
ZERO = Decimal('0.00')
HUNDRED = Decimal('100')


def quantize(value):
    return Decimal(value).quantize(MONEY, rounding=ROUND_HALF_UP)


def effective_tax_percent(tax_override, category_default_gst):
    """Product override wins when set, even when it is zero."""
    if tax_override is not None:
        return Decimal(tax_override)
    return Decimal(category_default_gst or ZERO)


def effective_discount_percent(category_discount, store_discount):
    total = Decimal(category_discount or ZERO) + Decimal(store_discount or ZERO)
    return min(total, HUNDRED)


@dataclass(frozen=True)
class LineItem:
    unit_price: Decimal
    quantity: int
    tax_percent: Decimal
    discount_percent: Decimal
    line_subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    line_total: Decimal

    @property
    def taxable_amount(self):
        return self.line_subtotal - self.discount_amount


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal = ZERO
    discount_total: Decimal = ZERO
    tax_total: Decimal = ZERO
    grand_total: Decimal = ZERO
    lines: tuple = field(default_factory=tuple)


def compute_line(unit_price, quantity, tax_percent, discount_percent=ZERO):
    if quantity <= 0:
        raise ValueError('Quantity must be positive')
    unit_price = Decimal(unit_price)
    tax_percent = Decimal(tax_percent)
    discount_percent = min(Decimal(discount_percent), HUNDRED)

    line_subtotal = quantize(unit_price * quantity)
    discount_amount = quantize(line_subtotal * discount_percent / HUNDRED)
    taxable = line_subtotal - discount_amount
    tax_amount = quantize(taxable * tax_percent / HUNDRED)

    return LineItem(
        unit_price=unit_price,
        quantity=quantity,
        tax_percent=tax_percent,
        discount_percent=discount_percent,
        line_subtotal=line_subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        line_total=taxable + tax_amount,
    )


def compute_totals(lines):
    lines = tuple(lines)
    subtotal = sum((line.line_subtotal for line in lines), ZERO)
    discount_total = sum((line.discount_amount for line in lines), ZERO)
    tax_total = sum((line.tax_amount for line in lines), ZERO)
    return InvoiceTotals(
        subtotal=subtotal,
        discount_total=discount_total,
        tax_total=tax_total,
        grand_total=subtotal - discount_total + tax_total,
        lines=lines,
    )


def price_product(product, quantity, store=None):
    """Price ``quantity`` units of a catalog product under its store's discount."""
    store = store or product.store
    category = product.category
    return compute_line(
        product.price,
        quantity,
        effective_tax_percent(product.tax_override, category.default_gst),
        effective_discount_percent(category.default_discount, store.global_discount),
    )
