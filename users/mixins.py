"""
Store scoping for multi-tenant data isolation.

SUPER_ADMIN may act on any store. STORE_ADMIN and CASHIER are pinned to their
assigned store: naming any other store is rejected with 403.
"""
import uuid

from rest_framework import permissions, serializers
from rest_framework.exceptions import PermissionDenied


STORE_MISMATCH_MESSAGE = "You can only access your own store."
NO_STORE_MESSAGE = "User not associated with any store."


def parse_store_id(value, field='store_id'):
    """Validate a store id taken from a URL or query string."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise serializers.ValidationError({field: 'Must be a valid UUID.'})


def can_access_store(user, store_id):
    """Access decision: (role, assigned store, requested store) -> bool."""
    if not (user and user.is_authenticated):
        return False
    if user.is_super_admin:
        return True
    if user.store_id is None or store_id is None:
        return False
    return str(user.store_id) == str(store_id)


def check_store_access(user, store_id):
    """Raise PermissionDenied unless ``user`` may act on ``store_id``."""
    if can_access_store(user, store_id):
        return
    if not user.is_super_admin and user.store_id is None:
        raise PermissionDenied(NO_STORE_MESSAGE)
    raise PermissionDenied(STORE_MISMATCH_MESSAGE)


def get_store_for_request(request, store=None, *, required=True):
    """
    Resolve the effective store for the current request.

    Logic:
    1. Store users always get their assigned store; asking for another store is a 403
    2. Super admins get the store they asked for (payload or ``store_id`` query param)
    3. Super admins that named no store get None, or a 400 when ``required``

    ``store`` may be a Store instance or an id.
    """
    user = request.user
    from stores.models import Store

    if store is None:
        store = request.query_params.get('store_id') or None

    if isinstance(store, Store):
        store_id = store.pk
    elif store is not None:
        store_id = parse_store_id(store, field='store')
    else:
        store_id = None

    if not user.is_super_admin:
        if user.store_id is None:
            raise PermissionDenied(NO_STORE_MESSAGE)
        if store_id is not None:
            check_store_access(user, store_id)
        return user.store

    if store_id is None:
        if required:
            raise serializers.ValidationError({'store': 'This field is required.'})
        return None

    if isinstance(store, Store):
        return store
    try:
        return Store.objects.get(pk=store_id)
    except Store.DoesNotExist:
        raise serializers.ValidationError({'store': 'Store not found.'})


class StoreObjectPermission(permissions.BasePermission):
    """Object-level half of the store check: the object's store must be the user's."""
    message = STORE_MISMATCH_MESSAGE

    def has_object_permission(self, request, view, obj):
        return can_access_store(request.user, view.get_object_store_id(obj))


class StoreFilterMixin:
    """
    Mixin for store-scoped views.

    Usage:
        class ProductViewSet(StoreFilterMixin, viewsets.ModelViewSet):
            queryset = Product.objects.all()
            ...

    The mixin will:
    1. Filter list requests to the effective store (super admins may pass ``?store_id=``)
    2. Reject detail requests on another store's object with 403, not 404
    3. Resolve and assign the store on create, rejecting foreign stores
    4. Reject updates naming a foreign store with 403; nobody moves records between stores
    """

    store_field = 'store'  # 'pk' when the object is itself a Store

    def get_object_store_id(self, obj):
        if self.store_field == 'pk':
            return obj.pk
        return getattr(obj, f'{self.store_field}_id')

    def _store_filter_kwargs(self, store_id):
        key = 'pk' if self.store_field == 'pk' else f'{self.store_field}_id'
        return {key: store_id}

    def _is_detail_request(self):
        lookup_url_kwarg = self.lookup_url_kwarg or self.lookup_field
        return lookup_url_kwarg in self.kwargs

    def get_permissions(self):
        return super().get_permissions() + [StoreObjectPermission()]

    def get_queryset(self):
        queryset = super().get_queryset()
        if self._is_detail_request():
            # object-level check happens in StoreObjectPermission
            return queryset

        user = self.request.user
        if user.is_super_admin:
            store_id = self.request.query_params.get('store_id')
            if store_id:
                queryset = queryset.filter(**self._store_filter_kwargs(parse_store_id(store_id)))
            return queryset

        store = get_store_for_request(self.request)
        return queryset.filter(**self._store_filter_kwargs(store.pk))

    def perform_create(self, serializer):
        """Auto-assign the effective store on create."""
        requested = serializer.validated_data.get(self.store_field)
        store = get_store_for_request(self.request, requested)
        serializer.save(**{self.store_field: store})

    def perform_update(self, serializer):
        requested = serializer.validated_data.get(self.store_field)
        if requested is not None:
            check_store_access(self.request.user, requested.pk)
            if requested.pk != self.get_object_store_id(serializer.instance):
                raise serializers.ValidationError({self.store_field: 'Records cannot be moved between stores.'})
        serializer.save()
