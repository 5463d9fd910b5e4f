from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


class StoreScopedAdmin(admin.ModelAdmin):
    """Restrict queryset to request user's store unless super admin."""

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if getattr(request.user, 'is_super_admin', False) or request.user.is_superuser:
            return qs
        store_id = getattr(request.user, 'store_id', None)
        if store_id:
            return qs.filter(store_id=store_id)
        return qs.none()

    def save_model(self, request, obj, form, change):
        if not getattr(request.user, 'is_super_admin', False):
            if hasattr(obj, 'store_id') and not obj.store_id:
                obj.store_id = getattr(request.user, 'store_id', None)
        super().save_model(request, obj, form, change)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'role', 'store', 'display_name', 'is_active', 'is_staff']
    list_filter = ['role', 'store', 'is_active', 'is_staff', 'is_superuser']
    search_fields = ['username', 'email', 'display_name', 'phone_number']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Store Access', {
            'fields': ('role', 'store', 'display_name', 'phone_number', 'image_url')
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Store Access', {
            'fields': ('role', 'store', 'display_name', 'phone_number')
        }),
    )
