from django.contrib import admin

from .models import Store


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner_name', 'currency', 'is_active', 'global_discount', 'created_at']
    list_filter = ['is_active', 'currency', 'created_at']
    search_fields = ['name', 'owner_name', 'email', 'mobile', 'gst_number']
    readonly_fields = ['id', 'created_at', 'updated_at']

    def has_delete_permission(self, request, obj=None):
        return False
