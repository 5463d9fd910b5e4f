from django.db import models


class StockTransaction(models.Model):
    """Stock movement history, one row per applied delta"""

    class Reason(models.TextChoices):
        SALE = 'SALE', 'Sale'
        MANUAL = 'MANUAL', 'Manual Adjustment'

    store = models.ForeignKey(
        'stores.Store',
        on_delete=models.CASCADE,
        related_name='stock_transactions'
    )
    product = models.ForeignKey(
        'inventory.Product',
        on_delete=models.CASCADE,
        related_name='stock_transactions'
    )
    delta = models.IntegerField(help_text='Signed quantity change')
    quantity_before = models.IntegerField()
    quantity_after = models.IntegerField()
    reason = models.CharField(max_length=20, choices=Reason.choices)
    reference = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        help_text='Invoice number or other reference'
    )
    notes = models.TextField(blank=True, null=True)
    performed_by = models.ForeignKey(
        'users.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='stock_transactions'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stock_transactions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['product'], name='stock_tx_product_idx'),
            models.Index(fields=['-created_at'], name='stock_tx_created_idx'),
            models.Index(fields=['store'], name='stock_tx_store_idx'),
        ]

    def __str__(self):
        return f"{self.get_reason_display()} - {self.product_id} ({self.delta:+d})"
