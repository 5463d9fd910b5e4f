from django.db import transaction
from rest_framework import serializers

from stores.models import Store
from .models import Partnership, PartnershipAsset


class PartnershipAssetSerializer(serializers.ModelSerializer):
    class Meta:
        model = PartnershipAsset
        fields = ['id', 'name', 'asset_value']
        read_only_fields = ['id']


class PartnershipSerializer(serializers.ModelSerializer):
    """Nested assets are replaced wholesale when given on update"""
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all(), required=False)
    assets = PartnershipAssetSerializer(many=True, required=False)
    total_investment = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Partnership
        fields = [
            'id', 'store', 'partner_name', 'cash_investment', 'share_percent', 'is_active',
            'notes', 'assets', 'total_investment', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def create(self, validated_data):
        assets = validated_data.pop('assets', [])
        with transaction.atomic():
            partnership = Partnership.objects.create(**validated_data)
            for asset in assets:
                PartnershipAsset.objects.create(partnership=partnership, **asset)
        return partnership

    def update(self, instance, validated_data):
        assets = validated_data.pop('assets', None)
        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if assets is not None:
                instance.assets.all().delete()
                for asset in assets:
                    PartnershipAsset.objects.create(partnership=instance, **asset)
        return instance
