from django.urls import path

from . import views

urlpatterns = [
    path('', views.InvoiceListCreateView.as_view(), name='invoice-list-create'),
    path('export/', views.export_invoices_csv, name='invoice-export'),
    path('<uuid:pk>/', views.invoice_detail, name='invoice-detail'),
    path('<uuid:pk>/mark-synced/', views.mark_invoice_synced, name='invoice-mark-synced'),
]
