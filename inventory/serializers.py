from rest_framework import serializers

from stores.models import Store
from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all(), required=False)
    product_count = serializers.IntegerField(source='products.count', read_only=True)

    class Meta:
        model = Category
        fields = [
            'id', 'store', 'name', 'default_gst', 'default_discount',
            'low_stock_threshold', 'product_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        validators = []


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True)
    effective_tax_percent = serializers.DecimalField(max_digits=5, decimal_places=2, read_only=True)
    low_stock_threshold = serializers.IntegerField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'store', 'category', 'category_name', 'name', 'sku', 'price',
            'stock_qty', 'tax_override', 'effective_tax_percent', 'low_stock_threshold',
            'is_low_stock', 'image_url', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ProductCreateUpdateSerializer(serializers.ModelSerializer):
    """``stock_qty`` is the opening stock on create and read-only afterwards"""
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all(), required=False)

    class Meta:
        model = Product
        fields = ['store', 'category', 'name', 'sku', 'price', 'stock_qty', 'tax_override', 'image_url']

    def get_fields(self):
        fields = super().get_fields()
        if self.instance is not None:
            fields['stock_qty'].read_only = True
        return fields


class StockDeltaSerializer(serializers.Serializer):
    delta = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError('Delta must be non-zero.')
        return value
