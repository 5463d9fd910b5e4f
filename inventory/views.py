import logging

from django.db import transaction
from django.db.models import F
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from main.exceptions import Conflict
from notifications.utils import clear_stock_alerts, notify_low_stock
from stock.models import StockTransaction
from stock.services import apply_stock_delta
from users.mixins import StoreFilterMixin, get_store_for_request
from users.permissions import CanAdjustStock, CanManageCatalog
from .models import Category, Product
from .serializers import (
    CategorySerializer, ProductCreateUpdateSerializer, ProductSerializer, StockDeltaSerializer
)

logger = logging.getLogger(__name__)


class CategoryViewSet(StoreFilterMixin, viewsets.ModelViewSet):
    """Categories of the effective store. A category in use cannot be deleted."""
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated, CanManageCatalog]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['name']
    ordering_fields = ['name', 'created_at']

    def _check_unique_name(self, store, name, exclude_pk=None):
        queryset = Category.objects.filter(store=store, name=name)
        if exclude_pk is not None:
            queryset = queryset.exclude(pk=exclude_pk)
        if queryset.exists():
            raise Conflict(f"Category '{name}' already exists in this store.")

    def perform_create(self, serializer):
        store = get_store_for_request(self.request, serializer.validated_data.get('store'))
        self._check_unique_name(store, serializer.validated_data['name'])
        serializer.save(store=store)

    def perform_update(self, serializer):
        name = serializer.validated_data.get('name')
        if name:
            self._check_unique_name(serializer.instance.store_id, name, exclude_pk=serializer.instance.pk)
        super().perform_update(serializer)

    def perform_destroy(self, instance):
        if instance.products.exists():
            raise Conflict('Category has products assigned. Move or delete them first.')
        instance.delete()


class ProductViewSet(StoreFilterMixin, viewsets.ModelViewSet):
    """
    Products of the effective store.
    Stock changes only through ``PATCH /products/{id}/stock/`` and checkout.
    """
    queryset = Product.objects.select_related('category', 'store').all()
    permission_classes = [IsAuthenticated, CanManageCatalog]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category']
    search_fields = ['name', 'sku']
    ordering_fields = ['name', 'price', 'stock_qty', 'created_at']

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return ProductCreateUpdateSerializer
        return ProductSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return Response(ProductSerializer(serializer.instance).data, status=201)

    def update(self, request, *args, **kwargs):
        super().update(request, *args, **kwargs)
        return Response(ProductSerializer(self.get_object()).data)

    def perform_create(self, serializer):
        store = get_store_for_request(self.request, serializer.validated_data.get('store'))
        category = serializer.validated_data['category']
        if category.store_id != store.pk:
            raise ValidationError({'category': 'Category belongs to a different store.'})

        with transaction.atomic():
            product = serializer.save(store=store)
            if product.stock_qty:
                StockTransaction.objects.create(
                    store=store,
                    product=product,
                    delta=product.stock_qty,
                    quantity_before=0,
                    quantity_after=product.stock_qty,
                    reason=StockTransaction.Reason.MANUAL,
                    notes='Opening stock',
                    performed_by=self.request.user,
                )

    def perform_update(self, serializer):
        category = serializer.validated_data.get('category')
        if category is not None and category.store_id != serializer.instance.store_id:
            raise ValidationError({'category': 'Category belongs to a different store.'})
        super().perform_update(serializer)

    @action(detail=True, methods=['patch'], url_path='stock',
            permission_classes=[IsAuthenticated, CanAdjustStock])
    def adjust_stock(self, request, pk=None):
        """Apply a signed stock delta: positive restocks, negative removes"""
        product = self.get_object()
        serializer = StockDeltaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        apply_stock_delta(
            product,
            serializer.validated_data['delta'],
            reason=StockTransaction.Reason.MANUAL,
            performed_by=request.user,
            notes=serializer.validated_data.get('notes') or None,
        )
        logger.info(
            "Stock of %s adjusted by %+d to %d",
            product.pk, serializer.validated_data['delta'], product.stock_qty,
            extra={'store_id': str(product.store_id)}
        )
        if serializer.validated_data['delta'] < 0:
            notify_low_stock([product])
        else:
            clear_stock_alerts(product)

        return Response({
            'message': 'Stock updated successfully',
            'new_stock': product.stock_qty,
        })

    @action(detail=False, methods=['get'], url_path='low-stock')
    def low_stock(self, request):
        queryset = self.filter_queryset(self.get_queryset()).filter(
            stock_qty__lte=F('category__low_stock_threshold')
        ).order_by('stock_qty', 'name')
        serializer = ProductSerializer(queryset, many=True)
        return Response({'count': len(serializer.data), 'results': serializer.data})
