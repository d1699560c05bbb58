"""
Purchase Requisition URL Configuration
"""
from django.urls import path

from procurement.PR import views

app_name = 'pr'

urlpatterns = [
    path('', views.pr_list, name='pr-list'),
    path('pending-approvals/', views.pr_pending_approvals, name='pr-pending-approvals'),
    path('by-status/', views.pr_by_status, name='pr-by-status'),
    path('<int:pk>/', views.pr_detail, name='pr-detail'),

    # Approval workflow
    path('<int:pk>/submit/', views.pr_submit, name='pr-submit'),
    path('<int:pk>/approve/', views.pr_approve, name='pr-approve'),
    path('<int:pk>/reject/', views.pr_reject, name='pr-reject'),
    path('<int:pk>/approvals/', views.pr_approvals, name='pr-approvals'),
]
