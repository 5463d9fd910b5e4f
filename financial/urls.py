from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register(r'partnerships', views.PartnershipViewSet, basename='partnership')

urlpatterns = [
    path('overview/<uuid:store_id>/', views.overview, name='financial-overview'),
    path('', include(router.urls)),
]
