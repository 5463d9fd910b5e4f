from django.urls import include, path
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    path('store/<uuid:store_id>/', views.store_expenses, name='store-expenses'),
    path('', include(router.urls)),
]
