import uuid
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Sum


class Partnership(models.Model):
    """A partner's stake in a store: cash put in plus contributed assets"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey(
        'stores.Store',
        on_delete=models.CASCADE,
        related_name='partnerships'
    )
    partner_name = models.CharField(max_length=255)
    cash_investment = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    share_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))]
    )
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'partnerships'
        ordering = ['partner_name']

    def __str__(self):
        return f"{self.partner_name} ({self.store_id})"

    @property
    def asset_value(self):
        return self.assets.aggregate(total=Sum('asset_value'))['total'] or Decimal('0.00')

    @property
    def total_investment(self):
        return self.cash_investment + self.asset_value


class PartnershipAsset(models.Model):
    partnership = models.ForeignKey(Partnership, on_delete=models.CASCADE, related_name='assets')
    name = models.CharField(max_length=255)
    asset_value = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'partnership_assets'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} - {self.asset_value}"
