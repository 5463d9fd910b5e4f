from django.contrib import admin

from users.admin import StoreScopedAdmin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(StoreScopedAdmin):
    list_display = ['name', 'store', 'default_gst', 'default_discount', 'low_stock_threshold', 'created_at']
    list_filter = ['store']
    search_fields = ['name']


@admin.register(Product)
class ProductAdmin(StoreScopedAdmin):
    list_display = ['name', 'sku', 'store', 'category', 'price', 'stock_qty', 'tax_override']
    list_filter = ['store', 'category']
    search_fields = ['name', 'sku']
    readonly_fields = ['stock_qty', 'created_at', 'updated_at']
