from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    """
    In-app message for one user. Stock alerts point at the store and product
    they are about, so an unread alert is never raised twice for one product.
    """

    class Type(models.TextChoices):
        LOW_STOCK_ALERT = 'LOW_STOCK_ALERT', 'Low Stock Alert'
        OUT_OF_STOCK_ALERT = 'OUT_OF_STOCK_ALERT', 'Out of Stock Alert'
        GENERAL = 'GENERAL', 'General'

    STOCK_ALERT_TYPES = (Type.LOW_STOCK_ALERT, Type.OUT_OF_STOCK_ALERT)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    store = models.ForeignKey(
        'stores.Store',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications'
    )
    product = models.ForeignKey(
        'inventory.Product',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='alerts'
    )
    type = models.CharField(max_length=30, choices=Type.choices, default=Type.GENERAL)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(blank=True, null=True, help_text='Snapshot of the alert context')
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read', '-created_at'], name='notif_user_unread_idx'),
            models.Index(fields=['product', 'type', 'is_read'], name='notif_product_alert_idx'),
        ]

    def __str__(self):
        return f"{self.get_type_display()} for {self.user_id}: {self.title}"

    def mark_as_read(self, when=None):
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = when or timezone.now()
        self.save(update_fields=['is_read', 'read_at'])
        return True
