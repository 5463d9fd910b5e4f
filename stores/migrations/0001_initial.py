import uuid
from decimal import Decimal

import django.core.validators
from django.db import migrations, models

import stores.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Store',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('owner_name', models.CharField(max_length=255)),
                ('currency', models.CharField(choices=[('INR', 'Indian Rupee'), ('USD', 'US Dollar'), ('AED', 'UAE Dirham'), ('EUR', 'Euro')], default='INR', max_length=3)),
                ('gst_number', models.CharField(blank=True, max_length=50, null=True)),
                ('address', models.TextField(blank=True, null=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('mobile', models.CharField(blank=True, max_length=20, null=True)),
                ('primary_upi_id', models.CharField(blank=True, max_length=100, null=True)),
                ('secondary_upi_id', models.CharField(blank=True, max_length=100, null=True)),
                ('active_upi_type', models.CharField(blank=True, choices=[('PRIMARY', 'Primary'), ('SECONDARY', 'Secondary')], help_text='Which UPI id is shown to customers at checkout', max_length=10, null=True)),
                ('is_active', models.BooleanField(default=True, help_text='Suspended stores cannot log in or sell')),
                ('logo_url', models.URLField(blank=True, max_length=500, null=True)),
                ('timezone', models.CharField(default=stores.models.default_timezone, max_length=64)),
                ('global_discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Store-wide seasonal discount percent', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0.00')), django.core.validators.MaxValueValidator(Decimal('100.00'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'stores',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['is_active'], name='store_is_active_idx')],
            },
        ),
    ]
