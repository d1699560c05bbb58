from django.urls import path

from . import views

app_name = 'audit'

urlpatterns = [
    path('logs/', views.audit_log_list, name='audit-log-list'),
    path('history/<str:entity_type>/<int:entity_id>/', views.entity_history, name='entity-history'),
]
