from django.contrib import admin

from users.admin import StoreScopedAdmin
from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(StoreScopedAdmin):
    list_display = ['title', 'store', 'amount', 'category', 'expense_date', 'created_by', 'created_at']
    list_filter = ['store', 'category', 'expense_date']
    search_fields = ['title', 'category', 'notes']
    date_hierarchy = 'expense_date'
    readonly_fields = ['created_by', 'created_at', 'updated_at']

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)
