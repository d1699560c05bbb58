"""
Purchase Order URL Configuration
"""
from django.urls import path

from procurement.po import views

app_name = 'po'

urlpatterns = [
    # ============================================================================
    # PO CRUD Operations
    # ============================================================================
    path('', views.po_list, name='po-list'),
    path('<int:pk>/', views.po_detail, name='po-detail'),

    # ============================================================================
    # PO Workflow Actions
    # ============================================================================
    path('<int:pk>/send/', views.po_send, name='po-send'),
    path('<int:pk>/acknowledge/', views.po_acknowledge, name='po-acknowledge'),
    path('<int:pk>/history/', views.po_history, name='po-history'),

    # ============================================================================
    # Reporting
    # ============================================================================
    path('by-status/', views.po_by_status, name='po-by-status'),
    path('by-supplier/', views.po_by_supplier, name='po-by-supplier'),
]
