import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


def default_timezone():
    return settings.POS_DEFAULT_TIMEZONE


class Store(models.Model):
    """A tenant: one independently configured retail outlet"""

    class Currency(models.TextChoices):
        INR = 'INR', 'Indian Rupee'
        USD = 'USD', 'US Dollar'
        AED = 'AED', 'UAE Dirham'
        EUR = 'EUR', 'Euro'

    class UpiType(models.TextChoices):
        PRIMARY = 'PRIMARY', 'Primary'
        SECONDARY = 'SECONDARY', 'Secondary'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    owner_name = models.CharField(max_length=255)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.INR)
    gst_number = models.CharField(max_length=50, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    mobile = models.CharField(max_length=20, blank=True, null=True)
    primary_upi_id = models.CharField(max_length=100, blank=True, null=True)
    secondary_upi_id = models.CharField(max_length=100, blank=True, null=True)
    active_upi_type = models.CharField(
        max_length=10,
        choices=UpiType.choices,
        blank=True,
        null=True,
        help_text='Which UPI id is shown to customers at checkout'
    )
    is_active = models.BooleanField(default=True, help_text='Suspended stores cannot log in or sell')
    logo_url = models.URLField(max_length=500, blank=True, null=True)
    timezone = models.CharField(max_length=64, default=default_timezone)
    global_discount = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))],
        help_text='Store-wide seasonal discount percent'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stores'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active'], name='store_is_active_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def active_upi_id(self):
        if self.active_upi_type == self.UpiType.SECONDARY:
            return self.secondary_upi_id
        if self.active_upi_type == self.UpiType.PRIMARY:
            return self.primary_upi_id
        return None
