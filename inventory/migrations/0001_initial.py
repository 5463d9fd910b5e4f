import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


PERCENT_VALIDATORS = [
    django.core.validators.MinValueValidator(Decimal('0.00')),
    django.core.validators.MaxValueValidator(Decimal('100.00')),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('stores', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('default_gst', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Tax percent applied to products without an override', max_digits=5, validators=PERCENT_VALIDATORS)),
                ('default_discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5, validators=PERCENT_VALIDATORS)),
                ('low_stock_threshold', models.PositiveIntegerField(default=10, help_text='Alert when a product stock falls to this level')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('store', models.ForeignKey(help_text='Store this category belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='categories', to='stores.store')),
            ],
            options={
                'verbose_name_plural': 'Categories',
                'db_table': 'categories',
                'ordering': ['name'],
                'constraints': [models.UniqueConstraint(fields=('store', 'name'), name='unique_category_per_store')],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('sku', models.CharField(blank=True, help_text='Stock Keeping Unit', max_length=100, null=True)),
                ('price', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('stock_qty', models.IntegerField(default=0, help_text='Current available stock quantity', validators=[django.core.validators.MinValueValidator(0)])),
                ('tax_override', models.DecimalField(blank=True, decimal_places=2, help_text='Tax percent used instead of the category default', max_digits=5, null=True, validators=PERCENT_VALIDATORS)),
                ('image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='products', to='inventory.category')),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='products', to='stores.store')),
            ],
            options={
                'db_table': 'products',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['sku'], name='product_sku_idx'),
                    models.Index(fields=['category'], name='product_category_idx'),
                    models.Index(fields=['store'], name='product_store_idx'),
                ],
                'constraints': [models.CheckConstraint(condition=models.Q(('stock_qty__gte', 0)), name='product_stock_not_negative')],
            },
        ),
    ]
