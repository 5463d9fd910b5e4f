"""
URL configuration for the POS API.
"""
from django.conf import settings
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView


def health_check(request):
    """Liveness probe: no auth, no database queries"""
    return JsonResponse({
        'status': 'healthy',
        'service': 'pos-api',
        'data_source': settings.POS_DATA_SOURCE,
    })


urlpatterns = [
    path('api/health/', health_check, name='health-check'),

    path('admin/', admin.site.urls),

    # OAuth2
    path('o/', include('oauth2_provider.urls', namespace='oauth2_provider')),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # API endpoints
    path('api/auth/', include('users.urls')),
    path('api/stock/', include('stock.urls')),
    path('api/invoices/', include('invoices.urls')),
    path('api/financial/', include('financial.urls')),
    path('api/expenses/', include('expenses.urls')),
    path('api/notifications/', include('notifications.urls')),
    path('api/', include('inventory.urls')),
    path('api/', include('stores.urls')),
]
