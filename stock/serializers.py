from rest_framework import serializers

from .models import StockTransaction


class StockTransactionSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    performed_by_username = serializers.CharField(source='performed_by.username', read_only=True, default=None)
    reason_display = serializers.CharField(source='get_reason_display', read_only=True)

    class Meta:
        model = StockTransaction
        fields = [
            'id', 'store', 'product', 'product_name', 'product_sku',
            'delta', 'quantity_before', 'quantity_after',
            'reason', 'reason_display', 'reference', 'notes',
            'performed_by', 'performed_by_username', 'created_at'
        ]
        read_only_fields = fields
