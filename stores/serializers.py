from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rest_framework import serializers

from .models import Store


class StoreSerializer(serializers.ModelSerializer):
    active_upi_id = serializers.CharField(read_only=True)

    class Meta:
        model = Store
        fields = [
            'id', 'name', 'owner_name', 'currency', 'gst_number', 'address',
            'email', 'mobile', 'primary_upi_id', 'secondary_upi_id', 'active_upi_type',
            'active_upi_id', 'is_active', 'logo_url', 'timezone', 'global_discount',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class StoreCreateUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Store
        fields = [
            'name', 'owner_name', 'currency', 'gst_number', 'address', 'email', 'mobile',
            'primary_upi_id', 'secondary_upi_id', 'active_upi_type', 'is_active',
            'logo_url', 'timezone', 'global_discount'
        ]

    def validate_timezone(self, value):
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise serializers.ValidationError(f"Unknown timezone '{value}'.")
        return value

    def validate(self, data):
        def current(field):
            if field in data:
                return data[field]
            return getattr(self.instance, field, None)

        upi_type = current('active_upi_type')
        if upi_type == Store.UpiType.PRIMARY and not current('primary_upi_id'):
            raise serializers.ValidationError({'active_upi_type': 'Primary UPI id is not set.'})
        if upi_type == Store.UpiType.SECONDARY and not current('secondary_upi_id'):
            raise serializers.ValidationError({'active_upi_type': 'Secondary UPI id is not set.'})
        return data


class GlobalSettingsSerializer(serializers.Serializer):
    data_source = serializers.CharField()
    tax_presets = serializers.ListField(child=serializers.IntegerField())
    currencies = serializers.ListField(child=serializers.CharField())
