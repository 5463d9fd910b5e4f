from django.contrib import admin

from users.admin import StoreScopedAdmin
from .models import Partnership, PartnershipAsset


class PartnershipAssetInline(admin.TabularInline):
    model = PartnershipAsset
    extra = 1


@admin.register(Partnership)
class PartnershipAdmin(StoreScopedAdmin):
    list_display = ['partner_name', 'store', 'cash_investment', 'share_percent', 'is_active']
    list_filter = ['store', 'is_active']
    search_fields = ['partner_name']
    inlines = [PartnershipAssetInline]
