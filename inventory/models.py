import uuid
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

PERCENT_VALIDATORS = [MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))]


class Category(models.Model):
    """Product category carrying the default GST and discount for its products"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey(
        'stores.Store',
        on_delete=models.CASCADE,
        related_name='categories',
        help_text='Store this category belongs to'
    )
    name = models.CharField(max_length=100)
    default_gst = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=PERCENT_VALIDATORS,
        help_text='Tax percent applied to products without an override'
    )
    default_discount = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=PERCENT_VALIDATORS
    )
    low_stock_threshold = models.PositiveIntegerField(
        default=10,
        help_text='Alert when a product stock falls to this level'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'categories'
        ordering = ['name']
        verbose_name_plural = 'Categories'
        constraints = [
            models.UniqueConstraint(
                fields=['store', 'name'],
                name='unique_category_per_store'
            )
        ]

    def __str__(self):
        return self.name


class Product(models.Model):
    """Sellable item. ``stock_qty`` only changes through stock deltas."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    store = models.ForeignKey(
        'stores.Store',
        on_delete=models.CASCADE,
        related_name='products'
    )
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')
    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=100, blank=True, null=True, help_text='Stock Keeping Unit')
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    stock_qty = models.IntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text='Current available stock quantity'
    )
    tax_override = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        blank=True,
        null=True,
        validators=PERCENT_VALIDATORS,
        help_text='Tax percent used instead of the category default'
    )
    image_url = models.URLField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        ordering = ['name']
        indexes = [
            models.Index(fields=['sku'], name='product_sku_idx'),
            models.Index(fields=['category'], name='product_category_idx'),
            models.Index(fields=['store'], name='product_store_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock_qty__gte=0),
                name='product_stock_not_negative'
            )
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})" if self.sku else self.name

    @property
    def low_stock_threshold(self):
        return self.category.low_stock_threshold

    @property
    def is_low_stock(self):
        return self.stock_qty <= self.category.low_stock_threshold

    @property
    def is_out_of_stock(self):
        return self.stock_qty <= 0

    @property
    def effective_tax_percent(self):
        from invoices.pricing import effective_tax_percent
        return effective_tax_percent(self.tax_override, self.category.default_gst)
