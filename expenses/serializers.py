from rest_framework import serializers

from stores.models import Store
from .models import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)
    store_name = serializers.CharField(source='store.name', read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id', 'store', 'store_name', 'title', 'amount', 'expense_date', 'category',
            'notes', 'created_by', 'created_by_username', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ExpenseCreateUpdateSerializer(serializers.ModelSerializer):
    store = serializers.PrimaryKeyRelatedField(queryset=Store.objects.all(), required=False)

    class Meta:
        model = Expense
        fields = ['store', 'title', 'amount', 'expense_date', 'category', 'notes']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero.")
        return value
