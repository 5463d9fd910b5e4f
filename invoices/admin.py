from django.contrib import admin

from users.admin import StoreScopedAdmin
from .models import Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    can_delete = False
    readonly_fields = [
        'product', 'product_name', 'sku', 'unit_price', 'quantity', 'tax_percent',
        'discount_percent', 'line_subtotal', 'discount_amount', 'tax_amount', 'line_total'
    ]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(StoreScopedAdmin):
    list_display = ['invoice_number', 'store', 'cashier_name', 'payment_method', 'grand_total', 'synced', 'created_at']
    list_filter = ['store', 'payment_method', 'synced', 'created_at']
    search_fields = ['invoice_number', 'cashier_name']
    inlines = [InvoiceItemInline]

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in Invoice._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
