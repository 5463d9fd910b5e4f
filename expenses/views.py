from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from invoices.services import parse_date_params
from users.mixins import StoreFilterMixin, check_store_access, get_store_for_request
from users.permissions import CanRecordExpenses
from .models import Expense
from .serializers import ExpenseCreateUpdateSerializer, ExpenseSerializer


def filter_by_dates(queryset, query_params):
    date_from, date_to = parse_date_params(query_params)
    if date_from:
        queryset = queryset.filter(expense_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(expense_date__lte=date_to)
    return queryset


class ExpenseViewSet(StoreFilterMixin, viewsets.ModelViewSet):
    """
    Expenses of the effective store.
    Any store user may record and list; only admins edit or delete.
    """
    queryset = Expense.objects.select_related('store', 'created_by').all()
    permission_classes = [IsAuthenticated, CanRecordExpenses]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category']
    search_fields = ['title', 'category', 'notes']
    ordering_fields = ['expense_date', 'amount', 'created_at']
    ordering = ['-expense_date']

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return ExpenseCreateUpdateSerializer
        return ExpenseSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'list':
            queryset = filter_by_dates(queryset, self.request.query_params)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return Response(ExpenseSerializer(serializer.instance).data, status=status.HTTP_201_CREATED)

    def perform_create(self, serializer):
        store = get_store_for_request(self.request, serializer.validated_data.get('store'))
        serializer.save(store=store, created_by=self.request.user)


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanRecordExpenses])
def store_expenses(request, store_id):
    """Expenses of one store, optional ``from``/``to`` on the expense date"""
    check_store_access(request.user, store_id)
    queryset = filter_by_dates(
        Expense.objects.select_related('store', 'created_by').filter(store_id=store_id),
        request.query_params
    )
    return Response(ExpenseSerializer(queryset, many=True).data)
