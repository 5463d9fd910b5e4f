from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import StoreViewSet, global_settings_view

app_name = 'stores'

router = DefaultRouter()
router.register(r'stores', StoreViewSet, basename='store')

urlpatterns = [
    path('settings/', global_settings_view, name='global-settings'),
] + router.urls
