"""
URL configuration for the core module: approval workflows and the audit log.
"""
from django.urls import include, path

urlpatterns = [
    path('approval/', include('core.approval.urls')),
    path('audit/', include('core.audit.urls')),
]
