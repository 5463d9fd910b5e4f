from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'user', 'store', 'is_read', 'created_at']
    list_filter = ['type', 'is_read', 'store']
    list_select_related = ['user', 'store']
    search_fields = ['user__username', 'title', 'product__name', 'product__sku']
    raw_id_fields = ['user', 'product']
    readonly_fields = ['created_at', 'read_at']
    actions = ['mark_read']

    @admin.action(description='Mark selected notifications as read')
    def mark_read(self, request, queryset):
        for notification in queryset:
            notification.mark_as_read()
