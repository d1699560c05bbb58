"""
URL configuration for procurement_hub.

    auth/         JWT token endpoints
    accounts/     user profile and user administration
    core/         approval (authorization matrix) and audit log
    procurement/  projects, suppliers, MR, RFQ, quotes, PR, PO
"""
from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path('auth/token/', TokenObtainPairView.as_view(), name='token-obtain-pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('accounts/', include('core.user_accounts.urls')),
    path('core/', include('core.urls')),
    path('procurement/', include('procurement.urls')),
]
