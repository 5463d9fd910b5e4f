from rest_framework.routers import SimpleRouter

from .views import StockTransactionViewSet

router = SimpleRouter()
router.register(r'transactions', StockTransactionViewSet, basename='stock-transaction')

urlpatterns = router.urls
