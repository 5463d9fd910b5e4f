import logging

from django.conf import settings
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from users.mixins import StoreFilterMixin
from users.permissions import CanManageStores, CanUpdateStore
from .models import Store
from .serializers import GlobalSettingsSerializer, StoreCreateUpdateSerializer, StoreSerializer
from .services import create_store, update_store

logger = logging.getLogger(__name__)


class StoreViewSet(StoreFilterMixin,
                   mixins.CreateModelMixin,
                   mixins.RetrieveModelMixin,
                   mixins.UpdateModelMixin,
                   mixins.ListModelMixin,
                   viewsets.GenericViewSet):
    """
    Store registry. There is no delete: stores are suspended with ``is_active``.
    - Super Admin: every store, may create and suspend
    - Store Admin: own store, may edit its details
    - Cashier: own store, read only
    """
    queryset = Store.objects.all()
    store_field = 'pk'
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name', 'owner_name', 'email', 'mobile']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']

    def get_permissions(self):
        if self.action in ['update', 'partial_update']:
            self.permission_classes = [IsAuthenticated, CanUpdateStore]
        else:
            self.permission_classes = [IsAuthenticated, CanManageStores]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return StoreCreateUpdateSerializer
        return StoreSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store, admin_user, warnings = create_store(serializer.validated_data)

        data = StoreSerializer(store).data
        data['admin_username'] = admin_user.username if admin_user else None
        data['warnings'] = warnings
        return Response(data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        if 'is_active' in serializer.validated_data and not request.user.is_super_admin:
            if serializer.validated_data['is_active'] != instance.is_active:
                raise PermissionDenied('Only super admins can suspend or reactivate a store.')

        store, warnings = update_store(instance, serializer.validated_data)
        logger.info("Store %s updated by %s", store.pk, request.user.username)

        data = StoreSerializer(store).data
        data['warnings'] = warnings
        return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_settings_view(request):
    """Process-wide settings the client needs: data source and tax presets"""
    serializer = GlobalSettingsSerializer({
        'data_source': settings.POS_DATA_SOURCE,
        'tax_presets': settings.POS_TAX_PRESETS,
        'currencies': list(Store.Currency.values),
    })
    return Response(serializer.data)
