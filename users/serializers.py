from rest_framework import serializers

from stores.models import Store
from .capabilities import capabilities_for
from .models import User


class StoreMinimalSerializer(serializers.ModelSerializer):
    """Minimal serializer for Store (used in nested representations)"""

    class Meta:
        model = Store
        fields = [
            'id', 'name', 'owner_name', 'currency', 'gst_number', 'address',
            'primary_upi_id', 'secondary_upi_id', 'active_upi_type', 'is_active',
            'logo_url', 'timezone', 'global_discount',
        ]


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model"""
    store_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'role', 'store_id', 'display_name', 'email',
            'phone_number', 'image_url', 'is_active', 'date_joined', 'last_login'
        ]
        read_only_fields = fields


class ProfileSerializer(UserSerializer):
    """Current user with their store summary and capability list"""
    store = StoreMinimalSerializer(read_only=True)
    capabilities = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['store', 'capabilities']
        read_only_fields = fields

    def get_capabilities(self, obj):
        return sorted(capabilities_for(obj.role))


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """User-editable profile fields; role and store are never changed here"""

    class Meta:
        model = User
        fields = ['username', 'display_name', 'email', 'phone_number', 'image_url']
        extra_kwargs = {
            # uniqueness is checked in the view so a clash returns 409
            'username': {'validators': [], 'required': False},
        }


class UserCreateSerializer(serializers.ModelSerializer):
    """Serializer for creating new users"""
    password = serializers.CharField(write_only=True, min_length=6)
    store = serializers.PrimaryKeyRelatedField(
        queryset=Store.objects.all(),
        required=False,
        allow_null=True
    )

    class Meta:
        model = User
        fields = [
            'username', 'password', 'role', 'store', 'display_name',
            'email', 'phone_number', 'image_url'
        ]
        extra_kwargs = {
            'username': {'validators': []},
        }

    def validate(self, data):
        if data.get('role') == User.Role.SUPER_ADMIN:
            data['store'] = None
        return data

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user


class UserUpdateSerializer(serializers.ModelSerializer):
    """Serializer for updating user details"""

    class Meta:
        model = User
        fields = ['role', 'display_name', 'email', 'phone_number', 'image_url', 'is_active']


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for password change"""
    old_password = serializers.CharField(required=True)
    new_password = serializers.CharField(required=True, min_length=6)


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()
