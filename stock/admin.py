from django.contrib import admin

from users.admin import StoreScopedAdmin
from .models import StockTransaction


@admin.register(StockTransaction)
class StockTransactionAdmin(StoreScopedAdmin):
    list_display = ['product', 'store', 'delta', 'quantity_before', 'quantity_after',
                    'reason', 'reference', 'performed_by', 'created_at']
    list_filter = ['store', 'reason', 'created_at']
    search_fields = ['product__name', 'product__sku', 'reference']
    readonly_fields = [f.name for f in StockTransaction._meta.fields]
