from rest_framework import serializers

from stores.models import Store
from .models import Invoice


class CheckoutItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class CheckoutSerializer(serializers.Serializer):
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all(), required=False)
    payment_method = serializers.ChoiceField(choices=Invoice.PaymentMethod.choices)
    items = CheckoutItemSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one item is required.')
        return value


class InvoiceItemDocumentSerializer(serializers.Serializer):
    product_id = serializers.CharField(allow_null=True)
    name = serializers.CharField()
    sku = serializers.CharField(allow_null=True, required=False)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax_percent = serializers.DecimalField(max_digits=5, decimal_places=2)
    discount_percent = serializers.DecimalField(max_digits=5, decimal_places=2)
    line_subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class InvoiceDocumentSerializer(serializers.Serializer):
    """Read-only rendering of a backend invoice document"""
    id = serializers.CharField()
    invoice_number = serializers.CharField()
    store_id = serializers.CharField()
    cashier_id = serializers.IntegerField(allow_null=True)
    cashier_name = serializers.CharField(allow_blank=True)
    payment_method = serializers.CharField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    grand_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    synced = serializers.BooleanField()
    created_at = serializers.CharField()
    items = InvoiceItemDocumentSerializer(many=True)
