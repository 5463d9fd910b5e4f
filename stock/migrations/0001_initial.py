import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('inventory', '0001_initial'),
        ('stores', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StockTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('delta', models.IntegerField(help_text='Signed quantity change')),
                ('quantity_before', models.IntegerField()),
                ('quantity_after', models.IntegerField()),
                ('reason', models.CharField(choices=[('SALE', 'Sale'), ('MANUAL', 'Manual Adjustment')], max_length=20)),
                ('reference', models.CharField(blank=True, help_text='Invoice number or other reference', max_length=100, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('performed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_transactions', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_transactions', to='inventory.product')),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stock_transactions', to='stores.store')),
            ],
            options={
                'db_table': 'stock_transactions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['product'], name='stock_tx_product_idx'),
                    models.Index(fields=['-created_at'], name='stock_tx_created_idx'),
                    models.Index(fields=['store'], name='stock_tx_store_idx'),
                ],
            },
        ),
    ]
