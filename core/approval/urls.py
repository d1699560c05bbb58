"""
URL Configuration for the approval app.
"""
from django.urls import path

from . import views

app_name = 'approval'

urlpatterns = [
    path('authorization-matrix/', views.authorization_matrix, name='authorization-matrix'),
    path('preview/', views.approval_preview, name='approval-preview'),
]
