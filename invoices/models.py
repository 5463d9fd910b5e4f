import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class InvoiceImmutableError(Exception):
    """Raised on any attempt to change or delete a stored invoice."""


MUTABLE_INVOICE_FIELDS = frozenset({'synced'})


class Invoice(models.Model):
    """Completed sale. Only ``synced`` may change after creation."""

    class PaymentMethod(models.TextChoices):
        CASH = 'CASH', 'Cash'
        CARD = 'CARD', 'Card'
        UPI = 'UPI', 'UPI'
        QR = 'QR', 'QR Code'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice_number = models.CharField(max_length=50)
    store = models.ForeignKey('stores.Store', on_delete=models.PROTECT, related_name='invoices')
    cashier = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices'
    )
    cashier_name = models.CharField(max_length=150, blank=True, default='')
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    discount_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    synced = models.BooleanField(default=False)
    created_at = models.DateTimeField()

    class Meta:
        db_table = 'invoices'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['store', '-created_at'], name='invoice_store_created_idx'),
            models.Index(fields=['invoice_number'], name='invoice_number_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['store', 'invoice_number'],
                name='unique_invoice_number_per_store'
            )
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.grand_total}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            update_fields = kwargs.get('update_fields')
            if update_fields is None or not set(update_fields) <= MUTABLE_INVOICE_FIELDS:
                raise InvoiceImmutableError(f"Invoice {self.invoice_number} is immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise InvoiceImmutableError(f"Invoice {self.invoice_number} cannot be deleted")


class InvoiceItem(models.Model):
    """Snapshot of a product line as it was priced at checkout"""

    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(
        'inventory.Product',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoice_items'
    )
    product_name = models.CharField(max_length=255)
    sku = models.CharField(max_length=100, blank=True, null=True)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    quantity = models.IntegerField(validators=[MinValueValidator(1)])
    tax_percent = models.DecimalField(max_digits=5, decimal_places=2)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2)
    line_subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2)
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'invoice_items'
        ordering = ['id']

    def __str__(self):
        return f"{self.invoice.invoice_number} - {self.product_name} x {self.quantity}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise InvoiceImmutableError('Invoice items are immutable')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise InvoiceImmutableError('Invoice items cannot be deleted')
