"""
URL Configuration for user accounts.
"""
from django.urls import path

from . import views

app_name = 'accounts'

urlpatterns = [
    path('me/', views.current_user, name='current-user'),
    path('users/', views.admin_user_list, name='user-list'),
    path('users/<int:user_id>/', views.admin_user_detail, name='user-detail'),
]
