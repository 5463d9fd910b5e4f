from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source='get_type_display', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True, default=None)

    class Meta:
        model = Notification
        fields = [
            'id', 'type', 'type_display', 'store', 'product', 'product_name',
            'title', 'message', 'data', 'is_read', 'created_at', 'read_at'
        ]
        read_only_fields = fields
