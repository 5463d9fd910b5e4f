import django_filters

from .models import StockTransaction


class StockTransactionFilter(django_filters.FilterSet):
    reason = django_filters.CharFilter(method='filter_reason')
    start_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    end_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')
    reference = django_filters.CharFilter(lookup_expr='iexact')

    class Meta:
        model = StockTransaction
        fields = ['product', 'reason', 'reference']

    def filter_reason(self, queryset, name, value):
        return queryset.filter(reason=value.upper())
